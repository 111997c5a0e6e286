"""Concrete eligibility predicates and the default rule set.

Every predicate returns ``True`` when the failure can NOT be exercised
against its target. Each failure has at most one per-target rule, because
the deriver narrows targets with the first per-target rule it finds;
per-target conditions that apply to many failures are folded in with
``any_of`` rather than registered as extra rules.
"""

from __future__ import annotations

from typing import Callable

from revertfuzz.core.types import (
    AdvancedOrder,
    CriteriaResolver,
    FulfillAction,
    ItemType,
    OrderStatus,
    Side,
)
from revertfuzz.fuzzer.eligibility import FilterRegistry
from revertfuzz.fuzzer.failures import Failure
from revertfuzz.fuzzer.helpers import (
    all_items,
    first_transferable_consideration_item,
    first_transferable_offer_item,
    has_item_of_type,
    same_address,
)
from revertfuzz.fuzzer.scenario import ScenarioContext

OrderCheck = Callable[[AdvancedOrder, int, ScenarioContext], bool]
ResolverCheck = Callable[[CriteriaResolver, int, ScenarioContext], bool]


def any_of(*checks: Callable[..., bool]) -> Callable[..., bool]:
    """Combine predicates; the target is ineligible if any check says so."""

    def combined(*args: object) -> bool:
        return any(check(*args) for check in checks)

    combined.__name__ = "any_of(" + ", ".join(c.__name__ for c in checks) + ")"
    return combined


# ── Generic (whole scenario) ─────────────────────────────────────────────────


def ineligible_when_cancelling(context: ScenarioContext) -> bool:
    return context.action is FulfillAction.CANCEL


def ineligible_when_not_cancelling(context: ScenarioContext) -> bool:
    return context.action is not FulfillAction.CANCEL


def ineligible_when_not_executing(context: ScenarioContext) -> bool:
    return not context.action.executes_transfers


def ineligible_when_not_advanced(context: ScenarioContext) -> bool:
    return not context.action.is_advanced


def ineligible_when_fulfill_available(context: ScenarioContext) -> bool:
    """Unavailable orders are skipped, not reverted on, by fulfill-available."""
    return context.action.is_fulfill_available


def ineligible_when_status_is_skipped_or_cancelling(context: ScenarioContext) -> bool:
    return context.action.is_fulfill_available or context.action is FulfillAction.CANCEL


def ineligible_when_not_fulfill_available(context: ScenarioContext) -> bool:
    return not context.action.is_fulfill_available


def ineligible_when_not_aggregating(context: ScenarioContext) -> bool:
    return not (context.action.is_fulfill_available or context.action.is_match)


def ineligible_when_not_matching(context: ScenarioContext) -> bool:
    return not context.action.is_match


def ineligible_when_no_criteria_resolvers_accepted(context: ScenarioContext) -> bool:
    return not context.action.accepts_criteria_resolvers


def ineligible_for_invalid_msg_value(context: ScenarioContext) -> bool:
    """Only a basic order paid entirely in tokens rejects a non-zero value."""
    if context.action is not FulfillAction.FULFILL_BASIC_ORDER or not context.orders:
        return True
    return has_item_of_type(context.orders[0], ItemType.NATIVE)


def ineligible_for_insufficient_native_tokens(context: ScenarioContext) -> bool:
    return context.value == 0 or not context.action.executes_transfers


# ── Per order ────────────────────────────────────────────────────────────────


def is_contract_order(order: AdvancedOrder, order_index: int, context: ScenarioContext) -> bool:
    return order.is_contract_order


def is_not_contract_order(order: AdvancedOrder, order_index: int, context: ScenarioContext) -> bool:
    return not order.is_contract_order


def is_unavailable(order: AdvancedOrder, order_index: int, context: ScenarioContext) -> bool:
    return context.status_of(order_index) in (OrderStatus.CANCELLED, OrderStatus.FILLED)


def skips_signature_check(order: AdvancedOrder, order_index: int, context: ScenarioContext) -> bool:
    """Validated orders and orders fulfilled by their own offerer are not re-verified."""
    return (
        context.status_of(order_index) in (OrderStatus.VALIDATED, OrderStatus.PARTIALLY_FILLED)
        or same_address(context.caller, order.offerer)
    )


def offerer_has_code(order: AdvancedOrder, order_index: int, context: ScenarioContext) -> bool:
    return context.has_code(order.offerer)


def offerer_has_no_code(order: AdvancedOrder, order_index: int, context: ScenarioContext) -> bool:
    return not context.has_code(order.offerer)


def signature_is_not_65_bytes(order: AdvancedOrder, order_index: int, context: ScenarioContext) -> bool:
    return len(order.signature) != 65


def has_no_consideration(order: AdvancedOrder, order_index: int, context: ScenarioContext) -> bool:
    return not order.parameters.consideration


def has_no_offer(order: AdvancedOrder, order_index: int, context: ScenarioContext) -> bool:
    return not order.parameters.offer


def has_no_conduit_transfer(order: AdvancedOrder, order_index: int, context: ScenarioContext) -> bool:
    """No offer item is pulled through the order's conduit."""
    return all(item.item_type is ItemType.NATIVE for item in order.parameters.offer)


def disallows_partial_fills(order: AdvancedOrder, order_index: int, context: ScenarioContext) -> bool:
    return not order.order_type.allows_partial_fills


def allows_partial_fills(order: AdvancedOrder, order_index: int, context: ScenarioContext) -> bool:
    return order.order_type.allows_partial_fills


def is_not_partially_filled(order: AdvancedOrder, order_index: int, context: ScenarioContext) -> bool:
    return context.status_of(order_index) is not OrderStatus.PARTIALLY_FILLED


def caller_may_cancel(order: AdvancedOrder, order_index: int, context: ScenarioContext) -> bool:
    return same_address(context.caller, order.offerer) or same_address(
        context.caller, order.parameters.zone
    )


def has_only_criteria_items(order: AdvancedOrder, order_index: int, context: ScenarioContext) -> bool:
    return all(item.item_type.is_criteria_based for item in all_items(order))


def has_no_erc721_item(order: AdvancedOrder, order_index: int, context: ScenarioContext) -> bool:
    return not has_item_of_type(order, ItemType.ERC721)


def has_no_native_item(order: AdvancedOrder, order_index: int, context: ScenarioContext) -> bool:
    return not has_item_of_type(order, ItemType.NATIVE)


def has_no_native_or_erc20_item(order: AdvancedOrder, order_index: int, context: ScenarioContext) -> bool:
    return not has_item_of_type(order, ItemType.NATIVE, ItemType.ERC20)


def has_no_transferable_offer_item(order: AdvancedOrder, order_index: int, context: ScenarioContext) -> bool:
    return first_transferable_offer_item(order, context) is None


def has_no_transferable_consideration_item(
    order: AdvancedOrder, order_index: int, context: ScenarioContext
) -> bool:
    return first_transferable_consideration_item(order, context) is None


def has_no_transferable_item(order: AdvancedOrder, order_index: int, context: ScenarioContext) -> bool:
    return has_no_transferable_offer_item(
        order, order_index, context
    ) and has_no_transferable_consideration_item(order, order_index, context)


def zone_cannot_reject(order: AdvancedOrder, order_index: int, context: ScenarioContext) -> bool:
    """The zone is never consulted: open order, codeless zone, or zone is the caller."""
    zone = order.parameters.zone
    return (
        not order.order_type.is_restricted
        or not context.has_code(zone)
        or same_address(context.caller, zone)
    )


# ── Per criteria resolver ────────────────────────────────────────────────────


def _resolved_item(resolver: CriteriaResolver, context: ScenarioContext):
    if resolver.order_index >= len(context.orders):
        return None
    items = context.orders[resolver.order_index].items(resolver.side)
    if resolver.index >= len(items):
        return None
    return items[resolver.index]


def resolves_unavailable_order(
    resolver: CriteriaResolver, resolver_index: int, context: ScenarioContext
) -> bool:
    if resolver.order_index >= len(context.orders):
        return True
    return context.status_of(resolver.order_index) in (OrderStatus.CANCELLED, OrderStatus.FILLED)


def resolves_wildcard(resolver: CriteriaResolver, resolver_index: int, context: ScenarioContext) -> bool:
    item = _resolved_item(resolver, context)
    return item is None or item.identifier_or_criteria == 0


def resolves_merkle_root(resolver: CriteriaResolver, resolver_index: int, context: ScenarioContext) -> bool:
    item = _resolved_item(resolver, context)
    return item is None or item.identifier_or_criteria != 0


def is_not_offer_side(resolver: CriteriaResolver, resolver_index: int, context: ScenarioContext) -> bool:
    return resolver.side is not Side.OFFER


def is_not_consideration_side(
    resolver: CriteriaResolver, resolver_index: int, context: ScenarioContext
) -> bool:
    return resolver.side is not Side.CONSIDERATION


def resolves_contract_order(
    resolver: CriteriaResolver, resolver_index: int, context: ScenarioContext
) -> bool:
    if resolver.order_index >= len(context.orders):
        return True
    return context.orders[resolver.order_index].is_contract_order


# ── Default registry ─────────────────────────────────────────────────────────

EOA_SIGNATURE_FAILURES = (
    Failure.INVALID_SIGNATURE,
    Failure.INVALID_SIGNER_BAD_SIGNATURE,
    Failure.INVALID_SIGNER_MODIFIED_ORDER,
)
CONTRACT_SIGNATURE_FAILURES = (
    Failure.BAD_CONTRACT_SIGNATURE_BAD_SIGNATURE,
    Failure.BAD_CONTRACT_SIGNATURE_MODIFIED_ORDER,
    Failure.BAD_CONTRACT_SIGNATURE_MISSING_MAGIC,
)
CRITERIA_RESOLVER_FAILURES = (
    Failure.INVALID_PROOF_MERKLE,
    Failure.INVALID_PROOF_WILDCARD,
    Failure.ORDER_CRITERIA_RESOLVER_OUT_OF_RANGE,
    Failure.OFFER_CRITERIA_RESOLVER_OUT_OF_RANGE,
    Failure.CONSIDERATION_CRITERIA_RESOLVER_OUT_OF_RANGE,
    Failure.UNRESOLVED_OFFER_CRITERIA,
    Failure.UNRESOLVED_CONSIDERATION_CRITERIA,
)
FRACTION_FAILURES = (
    Failure.BAD_FRACTION_PARTIAL_CONTRACT_ORDER,
    Failure.BAD_FRACTION_NO_FILL,
    Failure.BAD_FRACTION_OVERFILL,
    Failure.PARTIAL_FILLS_NOT_ENABLED_FOR_ORDER,
    Failure.INEXACT_FRACTION,
    Failure.PANIC_PARTIAL_FILL_OVERFLOW,
)
EXECUTION_FAILURES = (
    Failure.INVALID_TIME_NOT_STARTED,
    Failure.INVALID_TIME_EXPIRED,
    Failure.INVALID_CONDUIT,
    Failure.MISSING_ITEM_AMOUNT_OFFER_ITEM,
    Failure.MISSING_ITEM_AMOUNT_CONSIDERATION_ITEM,
    Failure.INVALID_ERC721_TRANSFER_AMOUNT,
    Failure.UNUSED_ITEM_PARAMETERS_TOKEN,
    Failure.UNUSED_ITEM_PARAMETERS_IDENTIFIER,
    Failure.OFFER_ITEM_MISSING_APPROVAL,
    Failure.CALLER_MISSING_APPROVAL,
    Failure.NO_CONTRACT,
    Failure.INVALID_RESTRICTED_ORDER_REVERTS,
    Failure.INVALID_RESTRICTED_ORDER_INVALID_MAGIC_VALUE,
    Failure.INVALID_CONTRACT_ORDER_GENERATE_REVERTS,
    Failure.INVALID_CONTRACT_ORDER_RATIFY_REVERTS,
    Failure.CRITERIA_NOT_ENABLED_FOR_ITEM,
)


def register_default_filters(registry: FilterRegistry) -> FilterRegistry:
    """Register the rules covering every failure in the catalog."""

    # ── Whole-scenario gates ─────────────────────────────────────────────
    registry.with_generic(
        (
            *EOA_SIGNATURE_FAILURES,
            Failure.BAD_SIGNATURE_V,
            *CONTRACT_SIGNATURE_FAILURES,
            Failure.CONSIDERATION_LENGTH_NOT_EQUAL_TO_TOTAL_ORIGINAL_EXTRA_ITEMS,
            Failure.CONSIDERATION_LENGTH_NOT_EQUAL_TO_TOTAL_ORIGINAL_MISSING_ITEMS,
            Failure.MISSING_ORIGINAL_CONSIDERATION_ITEMS,
        ),
        ineligible_when_cancelling,
    )
    registry.with_generic(EXECUTION_FAILURES, ineligible_when_not_executing)
    registry.with_generic(FRACTION_FAILURES, ineligible_when_not_advanced)
    registry.with_generic(
        (
            Failure.INVALID_TIME_NOT_STARTED,
            Failure.INVALID_TIME_EXPIRED,
            Failure.INVALID_CONTRACT_ORDER_GENERATE_REVERTS,
            Failure.MISSING_ITEM_AMOUNT_OFFER_ITEM,
        ),
        ineligible_when_fulfill_available,
    )
    registry.with_generic(
        (Failure.ORDER_IS_CANCELLED, Failure.ORDER_ALREADY_FILLED),
        ineligible_when_status_is_skipped_or_cancelling,
    )
    registry.with_generic(Failure.CANNOT_CANCEL_ORDER, ineligible_when_not_cancelling)
    registry.with_generic(Failure.NO_SPECIFIED_ORDERS_AVAILABLE, ineligible_when_not_fulfill_available)
    registry.with_generic(
        (
            Failure.INVALID_FULFILLMENT_COMPONENT_DATA,
            Failure.MISSING_FULFILLMENT_COMPONENT_ON_AGGREGATION,
        ),
        ineligible_when_not_aggregating,
    )
    registry.with_generic(
        (
            Failure.OFFER_AND_CONSIDERATION_REQUIRED_ON_FULFILLMENT,
            Failure.MISMATCHED_FULFILLMENT_OFFER_AND_CONSIDERATION_COMPONENTS,
        ),
        ineligible_when_not_matching,
    )
    registry.with_generic(
        (*CRITERIA_RESOLVER_FAILURES, Failure.CRITERIA_NOT_ENABLED_FOR_ITEM),
        ineligible_when_no_criteria_resolvers_accepted,
    )
    registry.with_generic(Failure.INVALID_MSG_VALUE, ineligible_for_invalid_msg_value)
    registry.with_generic(
        Failure.INSUFFICIENT_NATIVE_TOKENS_SUPPLIED, ineligible_for_insufficient_native_tokens
    )

    # ── Signatures ───────────────────────────────────────────────────────
    registry.with_order(
        EOA_SIGNATURE_FAILURES,
        any_of(is_contract_order, is_unavailable, skips_signature_check, offerer_has_code),
    )
    registry.with_order(
        Failure.BAD_SIGNATURE_V,
        any_of(
            is_contract_order,
            is_unavailable,
            skips_signature_check,
            offerer_has_code,
            signature_is_not_65_bytes,
        ),
    )
    registry.with_order(
        CONTRACT_SIGNATURE_FAILURES,
        any_of(is_contract_order, is_unavailable, skips_signature_check, offerer_has_no_code),
    )

    # ── Consideration length ─────────────────────────────────────────────
    registry.with_order(
        Failure.CONSIDERATION_LENGTH_NOT_EQUAL_TO_TOTAL_ORIGINAL_EXTRA_ITEMS,
        any_of(is_not_contract_order, is_unavailable),
    )
    registry.with_order(
        Failure.CONSIDERATION_LENGTH_NOT_EQUAL_TO_TOTAL_ORIGINAL_MISSING_ITEMS,
        any_of(is_not_contract_order, is_unavailable, has_no_consideration),
    )
    registry.with_order(
        Failure.MISSING_ORIGINAL_CONSIDERATION_ITEMS, any_of(is_contract_order, is_unavailable)
    )

    # ── Time and conduit ─────────────────────────────────────────────────
    registry.with_order(
        (Failure.INVALID_TIME_NOT_STARTED, Failure.INVALID_TIME_EXPIRED),
        any_of(is_contract_order, is_unavailable),
    )
    registry.with_order(
        Failure.INVALID_CONDUIT, any_of(is_contract_order, is_unavailable, has_no_conduit_transfer)
    )

    # ── Fractions ────────────────────────────────────────────────────────
    registry.with_order(
        Failure.BAD_FRACTION_PARTIAL_CONTRACT_ORDER, any_of(is_not_contract_order, is_unavailable)
    )
    registry.with_order(
        (Failure.BAD_FRACTION_NO_FILL, Failure.BAD_FRACTION_OVERFILL),
        any_of(is_contract_order, is_unavailable),
    )
    registry.with_order(
        Failure.PARTIAL_FILLS_NOT_ENABLED_FOR_ORDER,
        any_of(is_contract_order, is_unavailable, allows_partial_fills),
    )
    registry.with_order(
        Failure.INEXACT_FRACTION, any_of(is_contract_order, is_unavailable, disallows_partial_fills)
    )
    registry.with_order(
        Failure.PANIC_PARTIAL_FILL_OVERFLOW,
        any_of(is_contract_order, disallows_partial_fills, is_not_partially_filled),
    )

    # ── Order status ─────────────────────────────────────────────────────
    registry.with_order(
        Failure.CANNOT_CANCEL_ORDER, any_of(is_contract_order, caller_may_cancel)
    )
    registry.with_order(
        (Failure.ORDER_IS_CANCELLED, Failure.ORDER_ALREADY_FILLED),
        any_of(is_contract_order, is_unavailable),
    )

    # ── Criteria ─────────────────────────────────────────────────────────
    registry.with_order(
        Failure.CRITERIA_NOT_ENABLED_FOR_ITEM,
        any_of(is_contract_order, is_unavailable, has_only_criteria_items),
    )
    registry.with_criteria_resolver(Failure.INVALID_PROOF_MERKLE, any_of(resolves_unavailable_order, resolves_wildcard))
    registry.with_criteria_resolver(
        Failure.INVALID_PROOF_WILDCARD, any_of(resolves_unavailable_order, resolves_merkle_root)
    )
    registry.with_criteria_resolver(
        Failure.ORDER_CRITERIA_RESOLVER_OUT_OF_RANGE, resolves_unavailable_order
    )
    registry.with_criteria_resolver(
        Failure.OFFER_CRITERIA_RESOLVER_OUT_OF_RANGE,
        any_of(resolves_unavailable_order, is_not_offer_side),
    )
    registry.with_criteria_resolver(
        Failure.CONSIDERATION_CRITERIA_RESOLVER_OUT_OF_RANGE,
        any_of(resolves_unavailable_order, is_not_consideration_side),
    )
    registry.with_criteria_resolver(
        Failure.UNRESOLVED_OFFER_CRITERIA,
        any_of(resolves_unavailable_order, resolves_contract_order, is_not_offer_side),
    )
    registry.with_criteria_resolver(
        Failure.UNRESOLVED_CONSIDERATION_CRITERIA,
        any_of(resolves_unavailable_order, resolves_contract_order, is_not_consideration_side),
    )

    # ── Item amounts and parameters ──────────────────────────────────────
    registry.with_order(
        Failure.MISSING_ITEM_AMOUNT_OFFER_ITEM, any_of(is_contract_order, is_unavailable, has_no_offer)
    )
    registry.with_order(
        Failure.MISSING_ITEM_AMOUNT_CONSIDERATION_ITEM,
        any_of(is_contract_order, is_unavailable, has_no_consideration),
    )
    registry.with_order(
        Failure.INVALID_ERC721_TRANSFER_AMOUNT,
        any_of(is_contract_order, is_unavailable, has_no_erc721_item),
    )
    registry.with_order(
        Failure.UNUSED_ITEM_PARAMETERS_TOKEN,
        any_of(is_contract_order, is_unavailable, has_no_native_item),
    )
    registry.with_order(
        Failure.UNUSED_ITEM_PARAMETERS_IDENTIFIER,
        any_of(is_contract_order, is_unavailable, has_no_native_or_erc20_item),
    )

    # ── Token transfers ──────────────────────────────────────────────────
    registry.with_order(
        Failure.OFFER_ITEM_MISSING_APPROVAL,
        any_of(is_contract_order, is_unavailable, has_no_transferable_offer_item),
    )
    registry.with_order(
        Failure.CALLER_MISSING_APPROVAL,
        any_of(is_unavailable, has_no_transferable_consideration_item),
    )
    registry.with_order(Failure.NO_CONTRACT, any_of(is_unavailable, has_no_transferable_item))

    # ── Zones and contract offerers ──────────────────────────────────────
    registry.with_order(
        (
            Failure.INVALID_RESTRICTED_ORDER_REVERTS,
            Failure.INVALID_RESTRICTED_ORDER_INVALID_MAGIC_VALUE,
        ),
        any_of(is_contract_order, is_unavailable, zone_cannot_reject),
    )
    registry.with_order(
        (
            Failure.INVALID_CONTRACT_ORDER_GENERATE_REVERTS,
            Failure.INVALID_CONTRACT_ORDER_RATIFY_REVERTS,
        ),
        is_not_contract_order,
    )

    return registry


def build_default_filter_registry() -> FilterRegistry:
    return register_default_filters(FilterRegistry())
