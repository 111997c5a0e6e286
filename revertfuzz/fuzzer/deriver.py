"""Mutation context derivation.

Once a failure is chosen, narrow the scenario's targets with that failure's
own per-target rule and pick one. The first eligibility pass only asked
whether *some* target could host the failure; this pass runs after the
caller, conduit key and other scenario-wide choices are final, so it can
reject targets the first pass could not.
"""

from __future__ import annotations

import logging
from typing import cast

from revertfuzz.fuzzer.details import FailureDetailRegistry
from revertfuzz.fuzzer.eligibility import (
    CriteriaResolverRule,
    FilterRegistry,
    OrderRule,
    mark_ineligible_criteria_resolvers,
    mark_ineligible_orders,
)
from revertfuzz.fuzzer.errors import (
    NoEligibleCriteriaResolverError,
    NoEligibleCriteriaResolverFoundError,
    NoEligibleOrderError,
    NoEligibleOrderFoundError,
    UnknownDerivationScopeError,
)
from revertfuzz.fuzzer.failures import DerivationScope, Failure
from revertfuzz.fuzzer.scenario import MutationState, ScenarioContext
from revertfuzz.fuzzer.selector import select_eligible_criteria_resolver, select_eligible_order

logger = logging.getLogger(__name__)


class MutationContextDeriver:
    """Build the ``MutationState`` for a chosen failure."""

    def __init__(
        self,
        filters: FilterRegistry,
        details: FailureDetailRegistry,
        separator: int | None = None,
    ) -> None:
        self.filters = filters
        self.details = details
        self.separator = separator

    def derive(self, context: ScenarioContext, failure: Failure) -> MutationState:
        scope = self.details.get(failure).scope

        if scope is DerivationScope.GENERIC:
            state = MutationState()
        elif scope is DerivationScope.PER_ORDER:
            state = self._derive_from_order(context, failure)
        elif scope is DerivationScope.PER_CRITERIA_RESOLVER:
            state = self._derive_from_criteria_resolver(context, failure)
        else:
            raise UnknownDerivationScopeError(scope)

        logger.debug(
            "Derived mutation state for %s",
            failure.name,
            extra={
                "seed": context.seed,
                "failure": failure.value,
                "scope": scope.value,
                "order_index": state.selected_order_index,
                "resolver_index": state.selected_criteria_resolver_index,
            },
        )
        return state

    def _derive_from_order(self, context: ScenarioContext, failure: Failure) -> MutationState:
        rule = cast(OrderRule, self.filters.first_rule_for(failure, DerivationScope.PER_ORDER))
        mark_ineligible_orders(context, rule)
        try:
            order, index = select_eligible_order(context, self.separator)
        except NoEligibleOrderError:
            raise NoEligibleOrderFoundError(failure) from None
        return MutationState(selected_order=order, selected_order_index=index)

    def _derive_from_criteria_resolver(
        self, context: ScenarioContext, failure: Failure
    ) -> MutationState:
        rule = cast(
            CriteriaResolverRule,
            self.filters.first_rule_for(failure, DerivationScope.PER_CRITERIA_RESOLVER),
        )
        mark_ineligible_criteria_resolvers(context, rule)
        try:
            resolver, index = select_eligible_criteria_resolver(context, self.separator)
        except NoEligibleCriteriaResolverError:
            raise NoEligibleCriteriaResolverFoundError(failure) from None
        order = None
        order_index = None
        if resolver.order_index < len(context.orders):
            order_index = resolver.order_index
            order = context.orders[order_index]
        return MutationState(
            selected_order=order,
            selected_order_index=order_index,
            selected_criteria_resolver=resolver,
            selected_criteria_resolver_index=index,
        )
