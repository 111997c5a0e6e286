"""Error hierarchy for the mutation-eligibility engine.

Three families, each with a stable code so harnesses can route them:

    setup: broken registrations; abort the whole suite
    exhaustion: the scenario cannot host any (or the chosen) failure;
        discard this test case and generate another
    lookup: asking a registry for something never registered;
        a programming error once setup has passed
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Stable codes carried by every engine error."""

    # Setup
    MISSING_COVERAGE = "MISSING_COVERAGE"
    MISSING_FAILURE_DETAIL = "MISSING_FAILURE_DETAIL"
    DUPLICATE_FAILURE_DETAIL = "DUPLICATE_FAILURE_DETAIL"
    UNKNOWN_DERIVATION_SCOPE = "UNKNOWN_DERIVATION_SCOPE"
    FROZEN_REGISTRY = "FROZEN_REGISTRY"

    # Selection exhaustion
    NO_ELIGIBLE_FAILURE = "NO_ELIGIBLE_FAILURE"
    NO_ELIGIBLE_ORDER = "NO_ELIGIBLE_ORDER"
    NO_ELIGIBLE_CRITERIA_RESOLVER = "NO_ELIGIBLE_CRITERIA_RESOLVER"
    NO_ELIGIBLE_ORDER_FOUND = "NO_ELIGIBLE_ORDER_FOUND"
    NO_ELIGIBLE_CRITERIA_RESOLVER_FOUND = "NO_ELIGIBLE_CRITERIA_RESOLVER_FOUND"

    # Lookup
    NO_RULE_FOUND = "NO_RULE_FOUND"
    NO_FAILURE_DETAIL = "NO_FAILURE_DETAIL"


class MutationEngineError(Exception):
    """Engine error with structured code + message."""

    code: ErrorCode

    def __init__(self, code: ErrorCode, message: str, details: dict[str, Any] | None = None) -> None:
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)


# ── Setup ────────────────────────────────────────────────────────────────────


class RegistrationError(MutationEngineError):
    """A registry was assembled incorrectly."""


class MissingCoverageError(RegistrationError):
    """A failure kind has no eligibility rule."""

    def __init__(self, failure: Any, scope: Any = None) -> None:
        self.failure = failure
        self.scope = scope
        if scope is None:
            message = f"No eligibility rule covers failure {failure.name}"
        else:
            message = f"No {scope.value} eligibility rule covers failure {failure.name}"
        super().__init__(ErrorCode.MISSING_COVERAGE, message, {"failure": failure.value})


class MissingFailureDetailError(RegistrationError):
    def __init__(self, failure: Any) -> None:
        self.failure = failure
        super().__init__(
            ErrorCode.MISSING_FAILURE_DETAIL,
            f"No failure detail registered for {failure.name}",
            {"failure": failure.value},
        )


class DuplicateFailureDetailError(RegistrationError):
    def __init__(self, failure: Any) -> None:
        self.failure = failure
        super().__init__(
            ErrorCode.DUPLICATE_FAILURE_DETAIL,
            f"Failure detail for {failure.name} registered twice",
            {"failure": failure.value},
        )


class UnknownDerivationScopeError(RegistrationError):
    def __init__(self, scope: Any) -> None:
        self.scope = scope
        super().__init__(
            ErrorCode.UNKNOWN_DERIVATION_SCOPE,
            f"Unknown derivation scope: {scope!r}",
            {"scope": repr(scope)},
        )


class FrozenRegistryError(RegistrationError):
    def __init__(self, registry: str) -> None:
        super().__init__(
            ErrorCode.FROZEN_REGISTRY,
            f"{registry} is frozen; register everything before building the engine",
        )


# ── Selection exhaustion ─────────────────────────────────────────────────────


class SelectionExhaustedError(MutationEngineError):
    """The current scenario offers no target for the requested selection."""


class NoEligibleFailureError(SelectionExhaustedError):
    def __init__(self) -> None:
        super().__init__(ErrorCode.NO_ELIGIBLE_FAILURE, "No eligible failures for this scenario")


class NoEligibleOrderError(SelectionExhaustedError):
    def __init__(self) -> None:
        super().__init__(ErrorCode.NO_ELIGIBLE_ORDER, "No eligible orders for this scenario")


class NoEligibleCriteriaResolverError(SelectionExhaustedError):
    def __init__(self) -> None:
        super().__init__(
            ErrorCode.NO_ELIGIBLE_CRITERIA_RESOLVER,
            "No eligible criteria resolvers for this scenario",
        )


class NoEligibleOrderFoundError(SelectionExhaustedError):
    """No order survived narrowing for the selected failure."""

    def __init__(self, failure: Any) -> None:
        self.failure = failure
        super().__init__(
            ErrorCode.NO_ELIGIBLE_ORDER_FOUND,
            f"No eligible order found for {failure.name}",
            {"failure": failure.value},
        )


class NoEligibleCriteriaResolverFoundError(SelectionExhaustedError):
    """No criteria resolver survived narrowing for the selected failure."""

    def __init__(self, failure: Any) -> None:
        self.failure = failure
        super().__init__(
            ErrorCode.NO_ELIGIBLE_CRITERIA_RESOLVER_FOUND,
            f"No eligible criteria resolver found for {failure.name}",
            {"failure": failure.value},
        )


# ── Lookup ───────────────────────────────────────────────────────────────────


class RegistryLookupError(MutationEngineError, LookupError):
    """Requested entry was never registered."""


class NoRuleFoundError(RegistryLookupError):
    def __init__(self, failure: Any, scope: Any = None) -> None:
        self.failure = failure
        self.scope = scope
        where = f" with scope {scope.value}" if scope is not None else ""
        super().__init__(
            ErrorCode.NO_RULE_FOUND,
            f"No eligibility rule found for {failure.name}{where}",
            {"failure": failure.value},
        )


class NoFailureDetailError(RegistryLookupError):
    def __init__(self, failure: Any) -> None:
        self.failure = failure
        super().__init__(
            ErrorCode.NO_FAILURE_DETAIL,
            f"No failure detail found for {failure.name}",
            {"failure": failure.value},
        )


def is_discardable(exc: BaseException) -> bool:
    """Whether the harness may drop the test case and generate another."""
    return isinstance(exc, SelectionExhaustedError)
