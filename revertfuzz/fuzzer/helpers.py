"""Item-level helpers shared by eligibility predicates and revert derivers."""

from __future__ import annotations

from revertfuzz.core.types import AdvancedOrder, Execution, ItemType, OfferItem
from revertfuzz.fuzzer.scenario import ScenarioContext


def same_address(a: str, b: str) -> bool:
    """Compare two hex addresses or bytes32 keys regardless of checksum case."""
    return a.lower() == b.lower()


def _matches(execution: Execution, item: OfferItem, participant: str, conduit_key: str) -> bool:
    return (
        same_address(execution.offerer, participant)
        and same_address(execution.conduit_key, conduit_key)
        and execution.item.item_type == item.item_type
        and same_address(execution.item.token, item.token)
    )


def is_exempt_from_transfer_failures(
    item: OfferItem,
    participant: str,
    conduit_key: str,
    context: ScenarioContext,
) -> bool:
    """Whether a transfer-failure injection cannot apply to ``item``.

    Native items never trigger a token transfer call. Items already covered
    by an expected explicit or implicit movement from ``participant`` through
    ``conduit_key`` with the same item type and token move through a path the
    injection does not touch.
    """
    if item.item_type is ItemType.NATIVE:
        return True

    for execution in context.expected_explicit_executions:
        if _matches(execution, item, participant, conduit_key):
            return True

    for execution in context.expected_implicit_executions:
        if _matches(execution, item, participant, conduit_key):
            return True

    return False


def first_transferable_offer_item(
    order: AdvancedOrder, context: ScenarioContext
) -> tuple[int, OfferItem] | None:
    """First offer item whose transfer an approval failure would break."""
    params = order.parameters
    for i, item in enumerate(params.offer):
        if not is_exempt_from_transfer_failures(item, params.offerer, params.conduit_key, context):
            return i, item
    return None


def first_transferable_consideration_item(
    order: AdvancedOrder, context: ScenarioContext
) -> tuple[int, OfferItem] | None:
    """First consideration item the caller must transfer itself."""
    for i, item in enumerate(order.parameters.consideration):
        if not is_exempt_from_transfer_failures(
            item, context.caller, context.fulfiller_conduit_key, context
        ):
            return i, item
    return None


def all_items(order: AdvancedOrder) -> list[OfferItem]:
    return [*order.parameters.offer, *order.parameters.consideration]


def has_item_of_type(order: AdvancedOrder, *item_types: ItemType) -> bool:
    return any(item.item_type in item_types for item in all_items(order))
