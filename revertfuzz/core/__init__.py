"""Shared configuration, logging and protocol types."""
