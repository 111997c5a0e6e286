"""Shared fixtures for the revertfuzz test suite."""

from __future__ import annotations

from typing import Any, Callable

import pytest

from revertfuzz.core.config import Settings
from revertfuzz.core.types import (
    AdvancedOrder,
    ConsiderationItem,
    CriteriaResolver,
    ItemType,
    OfferItem,
    OrderParameters,
    OrderType,
    Side,
)
from revertfuzz.fuzzer.engine import MutationEligibilityEngine
from revertfuzz.fuzzer.scenario import ScenarioContext

OFFERER = "0x1000000000000000000000000000000000000001"
CALLER = "0x2000000000000000000000000000000000000002"
ZONE = "0x3000000000000000000000000000000000000003"
ERC20_TOKEN = "0x4000000000000000000000000000000000000004"
ERC721_TOKEN = "0x5000000000000000000000000000000000000005"
RECIPIENT = "0x6000000000000000000000000000000000000006"
CONDUIT = "0x7000000000000000000000000000000000000007"
CONDUIT_KEY = "0x" + "ab" * 32
ORDER_HASH = "0x" + "cd" * 32


# ── Items & Orders ───────────────────────────────────────────────────────────


def erc721_offer(identifier: int = 7) -> OfferItem:
    return OfferItem(
        item_type=ItemType.ERC721,
        token=ERC721_TOKEN,
        identifier_or_criteria=identifier,
        start_amount=1,
        end_amount=1,
    )


def erc20_consideration(amount: int = 100, recipient: str = OFFERER) -> ConsiderationItem:
    return ConsiderationItem(
        item_type=ItemType.ERC20,
        token=ERC20_TOKEN,
        start_amount=amount,
        end_amount=amount,
        recipient=recipient,
    )


def native_consideration(amount: int = 10**18, recipient: str = OFFERER) -> ConsiderationItem:
    return ConsiderationItem(
        item_type=ItemType.NATIVE,
        start_amount=amount,
        end_amount=amount,
        recipient=recipient,
    )


def make_order(
    offer: list[OfferItem] | None = None,
    consideration: list[ConsiderationItem] | None = None,
    order_type: OrderType = OrderType.FULL_OPEN,
    offerer: str = OFFERER,
    zone: str = "0x0000000000000000000000000000000000000000",
    signature: bytes = b"\x01" * 65,
    **params: Any,
) -> AdvancedOrder:
    offer = [erc721_offer()] if offer is None else offer
    consideration = [erc20_consideration()] if consideration is None else consideration
    return AdvancedOrder(
        parameters=OrderParameters(
            offerer=offerer,
            zone=zone,
            offer=offer,
            consideration=consideration,
            order_type=order_type,
            start_time=1_000,
            end_time=2_000,
            total_original_consideration_items=len(consideration),
            **params,
        ),
        signature=signature,
    )


@pytest.fixture
def order_factory() -> Callable[..., AdvancedOrder]:
    """Return the order builder so tests can vary single fields."""
    return make_order


@pytest.fixture
def sample_order() -> AdvancedOrder:
    """One EOA-signed order offering an ERC721 for ERC20 payment."""
    return make_order()


@pytest.fixture
def criteria_order() -> AdvancedOrder:
    """Order offering an ERC721 by merkle criteria."""
    return make_order(
        offer=[
            OfferItem(
                item_type=ItemType.ERC721_WITH_CRITERIA,
                token=ERC721_TOKEN,
                identifier_or_criteria=int("11" * 32, 16),
            )
        ],
    )


# ── Contexts ─────────────────────────────────────────────────────────────────


@pytest.fixture
def context_factory() -> Callable[..., ScenarioContext]:
    """Build scenario contexts with sensible defaults."""

    def _build(orders: list[AdvancedOrder] | None = None, **overrides: Any) -> ScenarioContext:
        fields: dict[str, Any] = {
            "orders": [make_order()] if orders is None else orders,
            "caller": CALLER,
            "recipient": RECIPIENT,
            "timestamp": 1_500,
            "seed": 7,
        }
        fields.update(overrides)
        return ScenarioContext(**fields)

    return _build


@pytest.fixture
def single_order_context(context_factory) -> ScenarioContext:
    """One order, one non-native consideration item, no expected movements."""
    return context_factory()


@pytest.fixture
def criteria_context(context_factory, criteria_order) -> ScenarioContext:
    return context_factory(
        orders=[criteria_order],
        criteria_resolvers=[
            CriteriaResolver(order_index=0, side=Side.OFFER, index=0, identifier=3, criteria_proof=["0x" + "22" * 32]),
        ],
    )


# ── Engine ───────────────────────────────────────────────────────────────────


@pytest.fixture
def settings() -> Settings:
    return Settings()


@pytest.fixture
def engine(settings: Settings) -> MutationEligibilityEngine:
    """Engine with the default rule and detail registries."""
    return MutationEligibilityEngine.default(settings)
