"""Failure details and expected revert payloads.

Every failure has exactly one ``FailureDetail``: the protocol error it must
produce, the scope its target is chosen in, and a deriver that computes the
exact revert payload from the scenario and the mutation state. The default
deriver returns the bare 4-byte error selector; failures whose error carries
arguments register their own deriver.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Iterable

from eth_utils import function_signature_to_4byte_selector

from revertfuzz.fuzzer.errors import (
    DuplicateFailureDetailError,
    FrozenRegistryError,
    MissingFailureDetailError,
    NoFailureDetailError,
    UnknownDerivationScopeError,
)
from revertfuzz.fuzzer.failures import ALL_FAILURES, DerivationScope, Failure
from revertfuzz.fuzzer.scenario import MutationState, ScenarioContext

logger = logging.getLogger(__name__)

RevertReasonDeriver = Callable[[ScenarioContext, MutationState, bytes], bytes]


def selector_only(context: ScenarioContext, state: MutationState, error_selector: bytes) -> bytes:
    """Default deriver: the error carries no arguments."""
    return error_selector


@dataclass(frozen=True)
class FailureDetail:
    """Static description of one failure."""

    name: str
    mutation: str
    error_signature: str
    scope: DerivationScope
    deriver: RevertReasonDeriver = selector_only
    error_selector: bytes = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "error_selector", function_signature_to_4byte_selector(self.error_signature)
        )

    def revert_reason(self, context: ScenarioContext, state: MutationState) -> bytes:
        return self.deriver(context, state, self.error_selector)


class FailureDetailRegistry:
    """One ``FailureDetail`` per failure, frozen before test cases run."""

    def __init__(self) -> None:
        self._details: dict[Failure, FailureDetail] = {}
        self._frozen = False

    def register(
        self,
        failure: Failure,
        scope: DerivationScope,
        error_signature: str,
        deriver: RevertReasonDeriver | None = None,
        mutation: str | None = None,
    ) -> FailureDetail:
        if self._frozen:
            raise FrozenRegistryError("FailureDetailRegistry")
        if not isinstance(scope, DerivationScope):
            raise UnknownDerivationScopeError(scope)
        if failure in self._details:
            raise DuplicateFailureDetailError(failure)
        detail = FailureDetail(
            name=failure.name,
            mutation=mutation or f"mutation_{failure.value}",
            error_signature=error_signature,
            scope=scope,
            deriver=deriver or selector_only,
        )
        self._details[failure] = detail
        return detail

    def with_generic(
        self, failure: Failure, error_signature: str, deriver: RevertReasonDeriver | None = None
    ) -> FailureDetail:
        return self.register(failure, DerivationScope.GENERIC, error_signature, deriver)

    def with_order(
        self, failure: Failure, error_signature: str, deriver: RevertReasonDeriver | None = None
    ) -> FailureDetail:
        return self.register(failure, DerivationScope.PER_ORDER, error_signature, deriver)

    def with_criteria_resolver(
        self, failure: Failure, error_signature: str, deriver: RevertReasonDeriver | None = None
    ) -> FailureDetail:
        return self.register(failure, DerivationScope.PER_CRITERIA_RESOLVER, error_signature, deriver)

    def freeze(self) -> None:
        self._frozen = True

    def get(self, failure: Failure) -> FailureDetail:
        try:
            return self._details[failure]
        except KeyError:
            raise NoFailureDetailError(failure) from None

    def __contains__(self, failure: object) -> bool:
        return failure in self._details

    def __len__(self) -> int:
        return len(self._details)

    def items(self) -> list[tuple[Failure, FailureDetail]]:
        return list(self._details.items())

    def assert_complete(self, failures: Iterable[Failure] = ALL_FAILURES) -> None:
        """Fail on the first failure (in catalog order) without a detail."""
        for failure in failures:
            if failure not in self._details:
                raise MissingFailureDetailError(failure)

    def derive_revert_reason(
        self, context: ScenarioContext, state: MutationState, failure: Failure
    ) -> bytes:
        """Exact revert payload the system under test must return."""
        payload = self.get(failure).revert_reason(context, state)
        logger.debug(
            "Derived %d-byte revert payload for %s",
            len(payload),
            failure.name,
            extra={"seed": context.seed, "failure": failure.value},
        )
        return payload
