"""Composition root for the mutation-eligibility engine.

Flow for one test case:
  1. evaluate: mark failures no target in the scenario can host
  2. select: seeded choice of one eligible failure
  3. derive: narrow and pick the failure's target order / resolver
  4. (external mutation step corrupts the target)
  5. expected_payload: exact revert bytes the system under test must return

The registries are built and checked once, then frozen and shared
read-only by every test case.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from revertfuzz.core.config import Settings, get_settings
from revertfuzz.core.types import AdvancedOrder
from revertfuzz.fuzzer.deriver import MutationContextDeriver
from revertfuzz.fuzzer.details import FailureDetail, FailureDetailRegistry
from revertfuzz.fuzzer.eligibility import FilterRegistry, eligible_failures, evaluate
from revertfuzz.fuzzer.errors import MissingCoverageError
from revertfuzz.fuzzer.failures import ALL_FAILURES, DerivationScope, Failure
from revertfuzz.fuzzer.filters import build_default_filter_registry
from revertfuzz.fuzzer.revert_reasons import build_default_detail_registry
from revertfuzz.fuzzer.scenario import MutationState, ScenarioContext
from revertfuzz.fuzzer.selector import select_eligible_failure, select_eligible_order

logger = logging.getLogger(__name__)


@dataclass
class PreparedMutation:
    """Everything the mutation and result-checking steps need."""

    failure: Failure
    detail: FailureDetail
    state: MutationState


class MutationEligibilityEngine:
    """Evaluate, select and derive mutations against generated scenarios."""

    def __init__(
        self,
        filters: FilterRegistry,
        details: FailureDetailRegistry,
        settings: Settings | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.filters = filters
        self.details = details
        self.assert_coverage()
        self.filters.freeze()
        self.details.freeze()
        self._separator = self.settings.selection_domain_separator
        self._deriver = MutationContextDeriver(filters, details, self._separator)
        logger.info(
            "Mutation engine ready: %d rules, %d failure details",
            len(filters),
            len(details),
        )

    @classmethod
    def default(cls, settings: Settings | None = None) -> "MutationEligibilityEngine":
        return cls(build_default_filter_registry(), build_default_detail_registry(), settings)

    # ── Setup ────────────────────────────────────────────────────────────

    def assert_coverage(self) -> None:
        """Abort unless every failure has a rule and exactly one detail."""
        self.filters.assert_coverage(ALL_FAILURES)
        self.details.assert_complete(ALL_FAILURES)
        if not self.settings.strict_scope_coverage:
            return
        for failure in ALL_FAILURES:
            scope = self.details.get(failure).scope
            if scope is DerivationScope.GENERIC:
                continue
            if not any(rule.scope is scope for rule in self.filters.rules_for(failure)):
                raise MissingCoverageError(failure, scope)

    # ── Per test case ────────────────────────────────────────────────────

    def evaluate(self, context: ScenarioContext) -> None:
        evaluate(self.filters.rules, context)
        logger.debug(
            "%d of %d failures eligible",
            len(eligible_failures(context)),
            len(ALL_FAILURES),
            extra={"seed": context.seed},
        )

    def select_failure(self, context: ScenarioContext) -> Failure:
        return select_eligible_failure(context, self._separator)

    def select_order(self, context: ScenarioContext) -> tuple[AdvancedOrder, int]:
        return select_eligible_order(context, self._separator)

    def derive(self, context: ScenarioContext, failure: Failure) -> MutationState:
        return self._deriver.derive(context, failure)

    def expected_payload(
        self, context: ScenarioContext, state: MutationState, failure: Failure
    ) -> bytes:
        return self.details.derive_revert_reason(context, state, failure)

    def prepare(self, context: ScenarioContext) -> PreparedMutation:
        """Run evaluate, select and derive for one scenario."""
        self.evaluate(context)
        failure = self.select_failure(context)
        state = self.derive(context, failure)
        return PreparedMutation(failure=failure, detail=self.details.get(failure), state=state)
