"""Catalog of every failure the fuzzer knows how to inject.

Each member is one distinct, testable revert condition of the system under
test. Member order is significant: the selector builds eligible lists in
this order, so reordering members changes which failure a recorded seed
replays to.
"""

from __future__ import annotations

from enum import Enum


class DerivationScope(str, Enum):
    """Shape of context a failure's applicability predicate needs."""

    GENERIC = "generic"
    PER_ORDER = "per_order"
    PER_CRITERIA_RESOLVER = "per_criteria_resolver"


class Failure(str, Enum):
    """Distinct ways a generated scenario can be made to revert."""

    # Signatures
    INVALID_SIGNATURE = "invalid_signature"
    INVALID_SIGNER_BAD_SIGNATURE = "invalid_signer_bad_signature"
    INVALID_SIGNER_MODIFIED_ORDER = "invalid_signer_modified_order"
    BAD_SIGNATURE_V = "bad_signature_v"
    BAD_CONTRACT_SIGNATURE_BAD_SIGNATURE = "bad_contract_signature_bad_signature"
    BAD_CONTRACT_SIGNATURE_MODIFIED_ORDER = "bad_contract_signature_modified_order"
    BAD_CONTRACT_SIGNATURE_MISSING_MAGIC = "bad_contract_signature_missing_magic"

    # Consideration length
    CONSIDERATION_LENGTH_NOT_EQUAL_TO_TOTAL_ORIGINAL_EXTRA_ITEMS = (
        "consideration_length_not_equal_to_total_original_extra_items"
    )
    CONSIDERATION_LENGTH_NOT_EQUAL_TO_TOTAL_ORIGINAL_MISSING_ITEMS = (
        "consideration_length_not_equal_to_total_original_missing_items"
    )
    MISSING_ORIGINAL_CONSIDERATION_ITEMS = "missing_original_consideration_items"

    # Time and conduit
    INVALID_TIME_NOT_STARTED = "invalid_time_not_started"
    INVALID_TIME_EXPIRED = "invalid_time_expired"
    INVALID_CONDUIT = "invalid_conduit"

    # Fractions
    BAD_FRACTION_PARTIAL_CONTRACT_ORDER = "bad_fraction_partial_contract_order"
    BAD_FRACTION_NO_FILL = "bad_fraction_no_fill"
    BAD_FRACTION_OVERFILL = "bad_fraction_overfill"
    PARTIAL_FILLS_NOT_ENABLED_FOR_ORDER = "partial_fills_not_enabled_for_order"
    INEXACT_FRACTION = "inexact_fraction"
    PANIC_PARTIAL_FILL_OVERFLOW = "panic_partial_fill_overflow"

    # Order status
    CANNOT_CANCEL_ORDER = "cannot_cancel_order"
    ORDER_IS_CANCELLED = "order_is_cancelled"
    ORDER_ALREADY_FILLED = "order_already_filled"

    # Fulfillment aggregation
    NO_SPECIFIED_ORDERS_AVAILABLE = "no_specified_orders_available"
    INVALID_FULFILLMENT_COMPONENT_DATA = "invalid_fulfillment_component_data"
    MISSING_FULFILLMENT_COMPONENT_ON_AGGREGATION = "missing_fulfillment_component_on_aggregation"
    OFFER_AND_CONSIDERATION_REQUIRED_ON_FULFILLMENT = "offer_and_consideration_required_on_fulfillment"
    MISMATCHED_FULFILLMENT_OFFER_AND_CONSIDERATION_COMPONENTS = (
        "mismatched_fulfillment_offer_and_consideration_components"
    )

    # Native value
    INVALID_MSG_VALUE = "invalid_msg_value"
    INSUFFICIENT_NATIVE_TOKENS_SUPPLIED = "insufficient_native_tokens_supplied"

    # Criteria resolution
    CRITERIA_NOT_ENABLED_FOR_ITEM = "criteria_not_enabled_for_item"
    INVALID_PROOF_MERKLE = "invalid_proof_merkle"
    INVALID_PROOF_WILDCARD = "invalid_proof_wildcard"
    ORDER_CRITERIA_RESOLVER_OUT_OF_RANGE = "order_criteria_resolver_out_of_range"
    OFFER_CRITERIA_RESOLVER_OUT_OF_RANGE = "offer_criteria_resolver_out_of_range"
    CONSIDERATION_CRITERIA_RESOLVER_OUT_OF_RANGE = "consideration_criteria_resolver_out_of_range"
    UNRESOLVED_OFFER_CRITERIA = "unresolved_offer_criteria"
    UNRESOLVED_CONSIDERATION_CRITERIA = "unresolved_consideration_criteria"

    # Item amounts and parameters
    MISSING_ITEM_AMOUNT_OFFER_ITEM = "missing_item_amount_offer_item"
    MISSING_ITEM_AMOUNT_CONSIDERATION_ITEM = "missing_item_amount_consideration_item"
    INVALID_ERC721_TRANSFER_AMOUNT = "invalid_erc721_transfer_amount"
    UNUSED_ITEM_PARAMETERS_TOKEN = "unused_item_parameters_token"
    UNUSED_ITEM_PARAMETERS_IDENTIFIER = "unused_item_parameters_identifier"

    # Token transfers
    OFFER_ITEM_MISSING_APPROVAL = "offer_item_missing_approval"
    CALLER_MISSING_APPROVAL = "caller_missing_approval"
    NO_CONTRACT = "no_contract"

    # Zones and contract offerers
    INVALID_RESTRICTED_ORDER_REVERTS = "invalid_restricted_order_reverts"
    INVALID_RESTRICTED_ORDER_INVALID_MAGIC_VALUE = "invalid_restricted_order_invalid_magic_value"
    INVALID_CONTRACT_ORDER_GENERATE_REVERTS = "invalid_contract_order_generate_reverts"
    INVALID_CONTRACT_ORDER_RATIFY_REVERTS = "invalid_contract_order_ratify_reverts"


ALL_FAILURES: tuple[Failure, ...] = tuple(Failure)

# Bit position of each failure in an ineligibility bitset.
FAILURE_INDEX: dict[Failure, int] = {failure: i for i, failure in enumerate(ALL_FAILURES)}
