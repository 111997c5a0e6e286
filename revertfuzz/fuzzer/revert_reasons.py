"""Revert-reason derivers and the default failure detail set.

A deriver receives the scenario, the mutation state and the failure's
error selector, and returns the full revert payload: the selector followed
by the ABI-encoded error arguments. Derivers read the selected order after
the external mutation step has corrupted it in place, so arguments that
echo order fields (times, conduit key, tokens) reflect the mutated values.
"""

from __future__ import annotations

from typing import Any, Sequence

from eth_abi import encode
from eth_utils import to_bytes, to_checksum_address

from revertfuzz.core.types import AdvancedOrder, CriteriaResolver
from revertfuzz.fuzzer.details import FailureDetailRegistry
from revertfuzz.fuzzer.failures import Failure
from revertfuzz.fuzzer.helpers import (
    first_transferable_consideration_item,
    first_transferable_offer_item,
)
from revertfuzz.fuzzer.scenario import MutationState, ScenarioContext

# Values the mutation step writes for failures whose error echoes them.
BAD_SIGNATURE_V = 0xFF
INVALID_MSG_VALUE = 1
INVALID_ERC721_AMOUNT = 2
PANIC_ARITHMETIC_OVERFLOW = 0x11


def with_args(error_selector: bytes, types: Sequence[str], values: Sequence[Any]) -> bytes:
    """Selector followed by ABI-encoded arguments."""
    return error_selector + encode(list(types), list(values))


def _bytes32(value: str) -> bytes:
    return to_bytes(hexstr=value).rjust(32, b"\x00")


def _require_order(state: MutationState) -> tuple[AdvancedOrder, int]:
    if state.selected_order is None or state.selected_order_index is None:
        raise ValueError("Revert reason requires a selected order")
    return state.selected_order, state.selected_order_index


def _require_resolver(state: MutationState) -> CriteriaResolver:
    if state.selected_criteria_resolver is None:
        raise ValueError("Revert reason requires a selected criteria resolver")
    return state.selected_criteria_resolver


# ── Generic ──────────────────────────────────────────────────────────────────


def derive_invalid_msg_value(context: ScenarioContext, state: MutationState, error_selector: bytes) -> bytes:
    return with_args(error_selector, ["uint256"], [INVALID_MSG_VALUE])


def derive_missing_fulfillment_component(
    context: ScenarioContext, state: MutationState, error_selector: bytes
) -> bytes:
    # Offer-side components are the ones removed.
    return with_args(error_selector, ["uint8"], [0])


def derive_mismatched_components(
    context: ScenarioContext, state: MutationState, error_selector: bytes
) -> bytes:
    return with_args(error_selector, ["uint256"], [0])


# ── Per order ────────────────────────────────────────────────────────────────


def derive_bad_signature_v(context: ScenarioContext, state: MutationState, error_selector: bytes) -> bytes:
    return with_args(error_selector, ["uint8"], [BAD_SIGNATURE_V])


def derive_invalid_time(context: ScenarioContext, state: MutationState, error_selector: bytes) -> bytes:
    order, _ = _require_order(state)
    params = order.parameters
    return with_args(error_selector, ["uint256", "uint256"], [params.start_time, params.end_time])


def derive_invalid_conduit(context: ScenarioContext, state: MutationState, error_selector: bytes) -> bytes:
    """Echo the mutated conduit key and the conduit it resolves to.

    The harness must register the mutated key in ``context.conduits``
    before deriving; an unregistered key encodes the zero address.
    """
    order, _ = _require_order(state)
    key = order.parameters.conduit_key
    return with_args(
        error_selector,
        ["bytes32", "address"],
        [_bytes32(key), to_checksum_address(context.conduit_for(key))],
    )


def derive_order_hash(context: ScenarioContext, state: MutationState, error_selector: bytes) -> bytes:
    _, index = _require_order(state)
    return with_args(error_selector, ["bytes32"], [_bytes32(context.order_hash(index))])


def derive_partial_fill_overflow(
    context: ScenarioContext, state: MutationState, error_selector: bytes
) -> bytes:
    return with_args(error_selector, ["uint256"], [PANIC_ARITHMETIC_OVERFLOW])


def derive_invalid_erc721_amount(
    context: ScenarioContext, state: MutationState, error_selector: bytes
) -> bytes:
    return with_args(error_selector, ["uint256"], [INVALID_ERC721_AMOUNT])


_TRANSFER_FAILURE_TYPES = ["address", "address", "address", "uint256", "uint256"]


def derive_offer_item_missing_approval(
    context: ScenarioContext, state: MutationState, error_selector: bytes
) -> bytes:
    order, _ = _require_order(state)
    found = first_transferable_offer_item(order, context)
    if found is None:
        raise ValueError("Selected order has no transferable offer item")
    _, item = found
    return with_args(
        error_selector,
        _TRANSFER_FAILURE_TYPES,
        [
            to_checksum_address(item.token),
            to_checksum_address(order.offerer),
            to_checksum_address(context.recipient),
            item.identifier_or_criteria,
            item.start_amount,
        ],
    )


def derive_caller_missing_approval(
    context: ScenarioContext, state: MutationState, error_selector: bytes
) -> bytes:
    order, _ = _require_order(state)
    found = first_transferable_consideration_item(order, context)
    if found is None:
        raise ValueError("Selected order has no consideration item paid by the caller")
    _, item = found
    return with_args(
        error_selector,
        _TRANSFER_FAILURE_TYPES,
        [
            to_checksum_address(item.token),
            to_checksum_address(context.caller),
            to_checksum_address(item.recipient),
            item.identifier_or_criteria,
            item.start_amount,
        ],
    )


def derive_no_contract(context: ScenarioContext, state: MutationState, error_selector: bytes) -> bytes:
    order, _ = _require_order(state)
    found = first_transferable_offer_item(order, context) or first_transferable_consideration_item(
        order, context
    )
    if found is None:
        raise ValueError("Selected order has no transferable item")
    _, item = found
    return with_args(error_selector, ["address"], [to_checksum_address(item.token)])


# ── Per criteria resolver ────────────────────────────────────────────────────


def derive_order_criteria_resolver_out_of_range(
    context: ScenarioContext, state: MutationState, error_selector: bytes
) -> bytes:
    resolver = _require_resolver(state)
    return with_args(error_selector, ["uint8"], [int(resolver.side)])


def derive_unresolved_criteria(
    context: ScenarioContext, state: MutationState, error_selector: bytes
) -> bytes:
    resolver = _require_resolver(state)
    return with_args(error_selector, ["uint256", "uint256"], [resolver.order_index, resolver.index])


# ── Default registry ─────────────────────────────────────────────────────────

TRANSFER_FAILURE_SIGNATURE = "TokenTransferGenericFailure(address,address,address,uint256,uint256)"


def register_default_details(registry: FailureDetailRegistry) -> FailureDetailRegistry:
    """Register one failure detail for every failure in the catalog."""
    r = registry

    # Signatures
    r.with_order(Failure.INVALID_SIGNATURE, "InvalidSignature()")
    r.with_order(Failure.INVALID_SIGNER_BAD_SIGNATURE, "InvalidSigner()")
    r.with_order(Failure.INVALID_SIGNER_MODIFIED_ORDER, "InvalidSigner()")
    r.with_order(Failure.BAD_SIGNATURE_V, "BadSignatureV(uint8)", derive_bad_signature_v)
    r.with_order(Failure.BAD_CONTRACT_SIGNATURE_BAD_SIGNATURE, "BadContractSignature()")
    r.with_order(Failure.BAD_CONTRACT_SIGNATURE_MODIFIED_ORDER, "BadContractSignature()")
    r.with_order(Failure.BAD_CONTRACT_SIGNATURE_MISSING_MAGIC, "BadContractSignature()")

    # Consideration length
    r.with_order(
        Failure.CONSIDERATION_LENGTH_NOT_EQUAL_TO_TOTAL_ORIGINAL_EXTRA_ITEMS,
        "ConsiderationLengthNotEqualToTotalOriginal()",
    )
    r.with_order(
        Failure.CONSIDERATION_LENGTH_NOT_EQUAL_TO_TOTAL_ORIGINAL_MISSING_ITEMS,
        "ConsiderationLengthNotEqualToTotalOriginal()",
    )
    r.with_order(Failure.MISSING_ORIGINAL_CONSIDERATION_ITEMS, "MissingOriginalConsiderationItems()")

    # Time and conduit
    r.with_order(Failure.INVALID_TIME_NOT_STARTED, "InvalidTime(uint256,uint256)", derive_invalid_time)
    r.with_order(Failure.INVALID_TIME_EXPIRED, "InvalidTime(uint256,uint256)", derive_invalid_time)
    r.with_order(Failure.INVALID_CONDUIT, "InvalidConduit(bytes32,address)", derive_invalid_conduit)

    # Fractions
    r.with_order(Failure.BAD_FRACTION_PARTIAL_CONTRACT_ORDER, "BadFraction()")
    r.with_order(Failure.BAD_FRACTION_NO_FILL, "BadFraction()")
    r.with_order(Failure.BAD_FRACTION_OVERFILL, "BadFraction()")
    r.with_order(Failure.PARTIAL_FILLS_NOT_ENABLED_FOR_ORDER, "PartialFillsNotEnabledForOrder()")
    r.with_order(Failure.INEXACT_FRACTION, "InexactFraction()")
    r.with_order(Failure.PANIC_PARTIAL_FILL_OVERFLOW, "Panic(uint256)", derive_partial_fill_overflow)

    # Order status
    r.with_order(Failure.CANNOT_CANCEL_ORDER, "CannotCancelOrder()")
    r.with_order(Failure.ORDER_IS_CANCELLED, "OrderIsCancelled(bytes32)", derive_order_hash)
    r.with_order(Failure.ORDER_ALREADY_FILLED, "OrderAlreadyFilled(bytes32)", derive_order_hash)

    # Fulfillment aggregation
    r.with_generic(Failure.NO_SPECIFIED_ORDERS_AVAILABLE, "NoSpecifiedOrdersAvailable()")
    r.with_generic(Failure.INVALID_FULFILLMENT_COMPONENT_DATA, "InvalidFulfillmentComponentData()")
    r.with_generic(
        Failure.MISSING_FULFILLMENT_COMPONENT_ON_AGGREGATION,
        "MissingFulfillmentComponentOnAggregation(uint8)",
        derive_missing_fulfillment_component,
    )
    r.with_generic(
        Failure.OFFER_AND_CONSIDERATION_REQUIRED_ON_FULFILLMENT,
        "OfferAndConsiderationRequiredOnFulfillment()",
    )
    r.with_generic(
        Failure.MISMATCHED_FULFILLMENT_OFFER_AND_CONSIDERATION_COMPONENTS,
        "MismatchedFulfillmentOfferAndConsiderationComponents(uint256)",
        derive_mismatched_components,
    )

    # Native value
    r.with_generic(Failure.INVALID_MSG_VALUE, "InvalidMsgValue(uint256)", derive_invalid_msg_value)
    r.with_generic(Failure.INSUFFICIENT_NATIVE_TOKENS_SUPPLIED, "InsufficientNativeTokensSupplied()")

    # Criteria resolution
    r.with_order(Failure.CRITERIA_NOT_ENABLED_FOR_ITEM, "CriteriaNotEnabledForItem()")
    r.with_criteria_resolver(Failure.INVALID_PROOF_MERKLE, "InvalidProof()")
    r.with_criteria_resolver(Failure.INVALID_PROOF_WILDCARD, "InvalidProof()")
    r.with_criteria_resolver(
        Failure.ORDER_CRITERIA_RESOLVER_OUT_OF_RANGE,
        "OrderCriteriaResolverOutOfRange(uint8)",
        derive_order_criteria_resolver_out_of_range,
    )
    r.with_criteria_resolver(
        Failure.OFFER_CRITERIA_RESOLVER_OUT_OF_RANGE, "OfferCriteriaResolverOutOfRange()"
    )
    r.with_criteria_resolver(
        Failure.CONSIDERATION_CRITERIA_RESOLVER_OUT_OF_RANGE,
        "ConsiderationCriteriaResolverOutOfRange()",
    )
    r.with_criteria_resolver(
        Failure.UNRESOLVED_OFFER_CRITERIA,
        "UnresolvedOfferCriteria(uint256,uint256)",
        derive_unresolved_criteria,
    )
    r.with_criteria_resolver(
        Failure.UNRESOLVED_CONSIDERATION_CRITERIA,
        "UnresolvedConsiderationCriteria(uint256,uint256)",
        derive_unresolved_criteria,
    )

    # Item amounts and parameters
    r.with_order(Failure.MISSING_ITEM_AMOUNT_OFFER_ITEM, "MissingItemAmount()")
    r.with_order(Failure.MISSING_ITEM_AMOUNT_CONSIDERATION_ITEM, "MissingItemAmount()")
    r.with_order(
        Failure.INVALID_ERC721_TRANSFER_AMOUNT,
        "InvalidERC721TransferAmount(uint256)",
        derive_invalid_erc721_amount,
    )
    r.with_order(Failure.UNUSED_ITEM_PARAMETERS_TOKEN, "UnusedItemParameters()")
    r.with_order(Failure.UNUSED_ITEM_PARAMETERS_IDENTIFIER, "UnusedItemParameters()")

    # Token transfers
    r.with_order(
        Failure.OFFER_ITEM_MISSING_APPROVAL,
        TRANSFER_FAILURE_SIGNATURE,
        derive_offer_item_missing_approval,
    )
    r.with_order(
        Failure.CALLER_MISSING_APPROVAL,
        TRANSFER_FAILURE_SIGNATURE,
        derive_caller_missing_approval,
    )
    r.with_order(Failure.NO_CONTRACT, "NoContract(address)", derive_no_contract)

    # Zones and contract offerers
    r.with_order(
        Failure.INVALID_RESTRICTED_ORDER_REVERTS, "InvalidRestrictedOrder(bytes32)", derive_order_hash
    )
    r.with_order(
        Failure.INVALID_RESTRICTED_ORDER_INVALID_MAGIC_VALUE,
        "InvalidRestrictedOrder(bytes32)",
        derive_order_hash,
    )
    r.with_order(
        Failure.INVALID_CONTRACT_ORDER_GENERATE_REVERTS,
        "InvalidContractOrder(bytes32)",
        derive_order_hash,
    )
    r.with_order(
        Failure.INVALID_CONTRACT_ORDER_RATIFY_REVERTS,
        "InvalidContractOrder(bytes32)",
        derive_order_hash,
    )

    return registry


def build_default_detail_registry() -> FailureDetailRegistry:
    return register_default_details(FailureDetailRegistry())
