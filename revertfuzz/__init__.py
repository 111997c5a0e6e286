"""revertfuzz: mutation eligibility and selection for negative-case fuzzing."""

__version__ = "0.1.0"
