"""Tests for failure details and expected revert payloads."""

from __future__ import annotations

import pytest
from eth_abi import encode
from eth_utils import function_signature_to_4byte_selector, to_checksum_address

from conftest import CALLER, CONDUIT, CONDUIT_KEY, ERC20_TOKEN, ERC721_TOKEN, OFFERER, ORDER_HASH, RECIPIENT
from revertfuzz.fuzzer.details import FailureDetailRegistry, selector_only
from revertfuzz.fuzzer.errors import (
    DuplicateFailureDetailError,
    FrozenRegistryError,
    MissingFailureDetailError,
    NoFailureDetailError,
    UnknownDerivationScopeError,
)
from revertfuzz.fuzzer.failures import ALL_FAILURES, DerivationScope, Failure
from revertfuzz.fuzzer.revert_reasons import build_default_detail_registry
from revertfuzz.fuzzer.scenario import MutationState


def _selector(signature: str) -> bytes:
    return function_signature_to_4byte_selector(signature)


@pytest.fixture
def details() -> FailureDetailRegistry:
    return build_default_detail_registry()


class TestDetailRegistry:
    """Registration and completeness."""

    def test_default_registry_is_complete(self, details):
        details.assert_complete()
        assert len(details) == len(ALL_FAILURES)

    def test_missing_detail_named(self):
        registry = FailureDetailRegistry()
        registry.with_generic(ALL_FAILURES[0], "InvalidSignature()")
        with pytest.raises(MissingFailureDetailError) as exc_info:
            registry.assert_complete()
        assert exc_info.value.failure is ALL_FAILURES[1]

    def test_duplicate_rejected(self):
        registry = FailureDetailRegistry()
        registry.with_order(Failure.INVALID_SIGNATURE, "InvalidSignature()")
        with pytest.raises(DuplicateFailureDetailError):
            registry.with_order(Failure.INVALID_SIGNATURE, "InvalidSignature()")

    def test_unknown_scope_rejected(self):
        with pytest.raises(UnknownDerivationScopeError):
            FailureDetailRegistry().register(Failure.INVALID_SIGNATURE, "bogus", "InvalidSignature()")

    def test_frozen_rejects_registration(self):
        registry = FailureDetailRegistry()
        registry.freeze()
        with pytest.raises(FrozenRegistryError):
            registry.with_generic(Failure.INVALID_MSG_VALUE, "InvalidMsgValue(uint256)")

    def test_lookup_of_unregistered_failure(self):
        with pytest.raises(NoFailureDetailError):
            FailureDetailRegistry().get(Failure.NO_CONTRACT)

    def test_detail_fields(self, details):
        detail = details.get(Failure.INVALID_TIME_EXPIRED)
        assert detail.name == "INVALID_TIME_EXPIRED"
        assert detail.scope is DerivationScope.PER_ORDER
        assert detail.error_selector == _selector("InvalidTime(uint256,uint256)")
        assert detail.mutation == "mutation_invalid_time_expired"

    def test_default_deriver_is_selector_only(self, details):
        assert details.get(Failure.INVALID_SIGNATURE).deriver is selector_only


class TestPayloads:
    """Expected revert payloads per failure."""

    def test_selector_only_payload(self, details, single_order_context):
        payload = details.derive_revert_reason(single_order_context, MutationState(), Failure.BAD_FRACTION_NO_FILL)
        assert payload == _selector("BadFraction()")
        assert len(payload) == 4

    def test_invalid_time_echoes_mutated_order(self, details, single_order_context):
        order = single_order_context.orders[0]
        order.parameters.start_time = single_order_context.timestamp + 100
        state = MutationState(selected_order=order, selected_order_index=0)

        payload = details.derive_revert_reason(single_order_context, state, Failure.INVALID_TIME_NOT_STARTED)

        assert payload == _selector("InvalidTime(uint256,uint256)") + encode(
            ["uint256", "uint256"], [1_600, 2_000]
        )

    def test_panic_payload(self, details, single_order_context):
        state = MutationState(selected_order=single_order_context.orders[0], selected_order_index=0)
        payload = details.derive_revert_reason(single_order_context, state, Failure.PANIC_PARTIAL_FILL_OVERFLOW)
        assert payload == bytes.fromhex("4e487b71") + (0x11).to_bytes(32, "big")

    def test_order_hash_payload(self, details, context_factory):
        context = context_factory(order_hashes=[ORDER_HASH])
        state = MutationState(selected_order=context.orders[0], selected_order_index=0)
        payload = details.derive_revert_reason(context, state, Failure.ORDER_IS_CANCELLED)
        assert payload == _selector("OrderIsCancelled(bytes32)") + bytes.fromhex("cd" * 32)

    def test_invalid_conduit_payload(self, details, context_factory, order_factory):
        order = order_factory(conduit_key=CONDUIT_KEY)
        context = context_factory(orders=[order], conduits={CONDUIT_KEY.upper().replace("0X", "0x"): CONDUIT})
        state = MutationState(selected_order=order, selected_order_index=0)
        payload = details.derive_revert_reason(context, state, Failure.INVALID_CONDUIT)
        assert payload == _selector("InvalidConduit(bytes32,address)") + encode(
            ["bytes32", "address"], [bytes.fromhex("ab" * 32), to_checksum_address(CONDUIT)]
        )

    def test_caller_missing_approval_payload(self, details, single_order_context):
        state = MutationState(selected_order=single_order_context.orders[0], selected_order_index=0)
        payload = details.derive_revert_reason(single_order_context, state, Failure.CALLER_MISSING_APPROVAL)
        expected_args = encode(
            ["address", "address", "address", "uint256", "uint256"],
            [
                to_checksum_address(ERC20_TOKEN),
                to_checksum_address(CALLER),
                to_checksum_address(OFFERER),
                0,
                100,
            ],
        )
        assert payload == _selector(
            "TokenTransferGenericFailure(address,address,address,uint256,uint256)"
        ) + expected_args

    def test_offer_item_missing_approval_payload(self, details, single_order_context):
        state = MutationState(selected_order=single_order_context.orders[0], selected_order_index=0)
        payload = details.derive_revert_reason(single_order_context, state, Failure.OFFER_ITEM_MISSING_APPROVAL)
        expected_args = encode(
            ["address", "address", "address", "uint256", "uint256"],
            [
                to_checksum_address(ERC721_TOKEN),
                to_checksum_address(OFFERER),
                to_checksum_address(RECIPIENT),
                7,
                1,
            ],
        )
        assert payload[4:] == expected_args

    def test_no_contract_payload(self, details, single_order_context):
        state = MutationState(selected_order=single_order_context.orders[0], selected_order_index=0)
        payload = details.derive_revert_reason(single_order_context, state, Failure.NO_CONTRACT)
        assert payload == _selector("NoContract(address)") + encode(
            ["address"], [to_checksum_address(ERC721_TOKEN)]
        )

    def test_unresolved_criteria_payload(self, details, criteria_context):
        resolver = criteria_context.criteria_resolvers[0]
        state = MutationState(selected_criteria_resolver=resolver, selected_criteria_resolver_index=0)
        payload = details.derive_revert_reason(criteria_context, state, Failure.UNRESOLVED_OFFER_CRITERIA)
        assert payload == _selector("UnresolvedOfferCriteria(uint256,uint256)") + encode(
            ["uint256", "uint256"], [0, 0]
        )

    def test_order_criteria_out_of_range_echoes_side(self, details, criteria_context):
        resolver = criteria_context.criteria_resolvers[0]
        state = MutationState(selected_criteria_resolver=resolver, selected_criteria_resolver_index=0)
        payload = details.derive_revert_reason(
            criteria_context, state, Failure.ORDER_CRITERIA_RESOLVER_OUT_OF_RANGE
        )
        assert payload[4:] == (0).to_bytes(32, "big")

    def test_order_deriver_requires_selected_order(self, details, single_order_context):
        with pytest.raises(ValueError):
            details.derive_revert_reason(single_order_context, MutationState(), Failure.INVALID_TIME_EXPIRED)

    def test_invalid_conduit_unregistered_key_encodes_zero_address(self, details, context_factory, order_factory):
        order = order_factory(conduit_key=CONDUIT_KEY)
        context = context_factory(orders=[order])
        state = MutationState(selected_order=order, selected_order_index=0)
        payload = details.derive_revert_reason(context, state, Failure.INVALID_CONDUIT)
        assert payload[4:] == bytes.fromhex("ab" * 32) + bytes(32)
