"""Tests for mutation context derivation."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from conftest import CALLER, make_order
from revertfuzz.core.types import FulfillAction, OrderType
from revertfuzz.fuzzer.deriver import MutationContextDeriver
from revertfuzz.fuzzer.eligibility import FilterRegistry
from revertfuzz.fuzzer.errors import (
    NoEligibleCriteriaResolverFoundError,
    NoEligibleOrderFoundError,
    UnknownDerivationScopeError,
    is_discardable,
)
from revertfuzz.fuzzer.failures import Failure
from revertfuzz.fuzzer.filters import build_default_filter_registry, is_contract_order, resolves_wildcard
from revertfuzz.fuzzer.revert_reasons import build_default_detail_registry


@pytest.fixture
def deriver() -> MutationContextDeriver:
    return MutationContextDeriver(build_default_filter_registry(), build_default_detail_registry())


class TestDerive:
    """Scope dispatch and target narrowing."""

    def test_generic_failure_yields_empty_state(self, deriver, single_order_context):
        state = deriver.derive(single_order_context, Failure.NO_SPECIFIED_ORDERS_AVAILABLE)
        assert state.is_empty
        assert state.selected_order_index is None
        assert len(single_order_context.ineligible_orders) == 0

    def test_single_order_selected(self, deriver, single_order_context):
        state = deriver.derive(single_order_context, Failure.CALLER_MISSING_APPROVAL)
        assert state.selected_order is single_order_context.orders[0]
        assert state.selected_order_index == 0
        assert state.selected_criteria_resolver is None

    def test_narrowing_skips_rejected_orders(self, deriver, context_factory):
        context = context_factory(
            orders=[
                make_order(order_type=OrderType.CONTRACT),
                make_order(),
                make_order(order_type=OrderType.CONTRACT),
            ]
        )
        state = deriver.derive(context, Failure.INVALID_TIME_NOT_STARTED)
        assert state.selected_order_index == 1
        assert sorted(context.ineligible_orders) == [0, 2]

    def test_no_order_survives_narrowing(self, deriver, context_factory):
        # Every order is cancellable by the caller, so none can exercise the failure.
        context = context_factory(
            orders=[make_order(offerer=CALLER), make_order(offerer=CALLER)],
            action=FulfillAction.CANCEL,
        )
        with pytest.raises(NoEligibleOrderFoundError) as exc_info:
            deriver.derive(context, Failure.CANNOT_CANCEL_ORDER)
        assert exc_info.value.failure is Failure.CANNOT_CANCEL_ORDER
        assert is_discardable(exc_info.value)

    def test_resolver_failure_selects_resolver_and_its_order(self, deriver, criteria_context):
        state = deriver.derive(criteria_context, Failure.INVALID_PROOF_MERKLE)
        assert state.selected_criteria_resolver is criteria_context.criteria_resolvers[0]
        assert state.selected_criteria_resolver_index == 0
        assert state.selected_order_index == 0

    def test_resolver_narrowing_exhausted(self, deriver, criteria_context):
        # The only resolver points at a merkle root, not a wildcard.
        with pytest.raises(NoEligibleCriteriaResolverFoundError):
            deriver.derive(criteria_context, Failure.INVALID_PROOF_WILDCARD)
        assert 0 in criteria_context.ineligible_criteria_resolvers

    def test_unknown_scope_is_fatal(self, single_order_context):
        details = MagicMock()
        details.get.return_value = MagicMock(scope="per_zone")
        deriver = MutationContextDeriver(build_default_filter_registry(), details)
        with pytest.raises(UnknownDerivationScopeError):
            deriver.derive(single_order_context, Failure.NO_CONTRACT)

    def test_derivation_is_reproducible(self, deriver, context_factory):
        orders = [make_order() for _ in range(5)]
        first = deriver.derive(context_factory(orders=orders, seed=31337), Failure.INVALID_TIME_EXPIRED)
        second = deriver.derive(context_factory(orders=orders, seed=31337), Failure.INVALID_TIME_EXPIRED)
        assert first.selected_order_index == second.selected_order_index

    def test_narrowing_uses_scoped_rule_after_generic_rule(self, context_factory):
        filters = FilterRegistry()
        filters.with_generic(Failure.INVALID_TIME_NOT_STARTED, lambda ctx: False)
        filters.with_order(Failure.INVALID_TIME_NOT_STARTED, is_contract_order)
        deriver = MutationContextDeriver(filters, build_default_detail_registry())
        context = context_factory(orders=[make_order(order_type=OrderType.CONTRACT), make_order()])

        state = deriver.derive(context, Failure.INVALID_TIME_NOT_STARTED)

        assert state.selected_order_index == 1

    def test_resolver_narrowing_uses_scoped_rule_after_generic_rule(self, criteria_context):
        filters = FilterRegistry()
        filters.with_generic(Failure.INVALID_PROOF_MERKLE, lambda ctx: False)
        filters.with_criteria_resolver(Failure.INVALID_PROOF_MERKLE, resolves_wildcard)
        deriver = MutationContextDeriver(filters, build_default_detail_registry())

        state = deriver.derive(criteria_context, Failure.INVALID_PROOF_MERKLE)

        assert state.selected_criteria_resolver_index == 0
        assert state.selected_order is criteria_context.orders[0]
