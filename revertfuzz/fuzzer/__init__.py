"""Mutation-eligibility and selection engine for negative-case fuzzing.

Decides which failure may be injected into a generated scenario, which
order or criteria resolver it targets, and the exact revert payload the
system under test must produce:
  - Failure catalog and derivation scopes
  - Eligibility rules, registry and scenario evaluator
  - Seeded selection of failures and targets
  - Mutation context derivation
  - Failure details and revert-reason derivers
"""

from revertfuzz.fuzzer.engine import MutationEligibilityEngine, PreparedMutation
from revertfuzz.fuzzer.failures import DerivationScope, Failure
from revertfuzz.fuzzer.scenario import MutationState, ScenarioContext

__all__ = [
    "DerivationScope",
    "Failure",
    "MutationEligibilityEngine",
    "MutationState",
    "PreparedMutation",
    "ScenarioContext",
]
