"""Shared enums and protocol structures used across the engine.

These mirror the marketplace protocol's order model closely enough for
eligibility predicates and expected-revert derivation. They are plain
pydantic models and stay mutable: the external mutation step corrupts the
selected order in place, and revert-reason derivers read it afterwards.
"""

from __future__ import annotations

import enum

from pydantic import BaseModel, Field

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"
ZERO_BYTES32 = "0x" + "00" * 32


# ── Enums ────────────────────────────────────────────────────────────────────


class ItemType(int, enum.Enum):
    """Asset class of an offer or consideration item."""

    NATIVE = 0
    ERC20 = 1
    ERC721 = 2
    ERC1155 = 3
    ERC721_WITH_CRITERIA = 4
    ERC1155_WITH_CRITERIA = 5

    @property
    def is_criteria_based(self) -> bool:
        return self in (ItemType.ERC721_WITH_CRITERIA, ItemType.ERC1155_WITH_CRITERIA)


class OrderType(int, enum.Enum):
    """Fill and restriction semantics of an order."""

    FULL_OPEN = 0
    PARTIAL_OPEN = 1
    FULL_RESTRICTED = 2
    PARTIAL_RESTRICTED = 3
    CONTRACT = 4

    @property
    def allows_partial_fills(self) -> bool:
        return self in (OrderType.PARTIAL_OPEN, OrderType.PARTIAL_RESTRICTED)

    @property
    def is_restricted(self) -> bool:
        return self in (OrderType.FULL_RESTRICTED, OrderType.PARTIAL_RESTRICTED)


class Side(int, enum.Enum):
    """Which item array of an order a resolver or component points into."""

    OFFER = 0
    CONSIDERATION = 1


class OrderStatus(str, enum.Enum):
    """On-chain status of an order before the test transaction runs."""

    AVAILABLE = "available"
    VALIDATED = "validated"
    PARTIALLY_FILLED = "partially_filled"
    FILLED = "filled"
    CANCELLED = "cancelled"


class FulfillAction(str, enum.Enum):
    """Entry point the scenario calls on the system under test."""

    FULFILL_BASIC_ORDER = "fulfill_basic_order"
    FULFILL_ORDER = "fulfill_order"
    FULFILL_ADVANCED_ORDER = "fulfill_advanced_order"
    FULFILL_AVAILABLE_ORDERS = "fulfill_available_orders"
    FULFILL_AVAILABLE_ADVANCED_ORDERS = "fulfill_available_advanced_orders"
    MATCH_ORDERS = "match_orders"
    MATCH_ADVANCED_ORDERS = "match_advanced_orders"
    CANCEL = "cancel"
    VALIDATE = "validate"

    @property
    def is_fulfill_available(self) -> bool:
        return self in (
            FulfillAction.FULFILL_AVAILABLE_ORDERS,
            FulfillAction.FULFILL_AVAILABLE_ADVANCED_ORDERS,
        )

    @property
    def is_match(self) -> bool:
        return self in (FulfillAction.MATCH_ORDERS, FulfillAction.MATCH_ADVANCED_ORDERS)

    @property
    def is_advanced(self) -> bool:
        """Whether the caller supplies a numerator/denominator fraction."""
        return self in (
            FulfillAction.FULFILL_ADVANCED_ORDER,
            FulfillAction.FULFILL_AVAILABLE_ADVANCED_ORDERS,
            FulfillAction.MATCH_ADVANCED_ORDERS,
        )

    @property
    def accepts_criteria_resolvers(self) -> bool:
        return self in (
            FulfillAction.FULFILL_ADVANCED_ORDER,
            FulfillAction.FULFILL_AVAILABLE_ADVANCED_ORDERS,
            FulfillAction.MATCH_ADVANCED_ORDERS,
        )

    @property
    def executes_transfers(self) -> bool:
        return self not in (FulfillAction.CANCEL, FulfillAction.VALIDATE)


# ── Items ────────────────────────────────────────────────────────────────────


class OfferItem(BaseModel):
    """Item supplied by the offerer."""

    item_type: ItemType
    token: str = ZERO_ADDRESS
    identifier_or_criteria: int = 0
    start_amount: int = 1
    end_amount: int = 1


class ConsiderationItem(OfferItem):
    """Item the offerer expects to receive, with its recipient."""

    recipient: str = ZERO_ADDRESS


class ReceivedItem(BaseModel):
    """Item as it is actually moved during execution."""

    item_type: ItemType
    token: str = ZERO_ADDRESS
    identifier: int = 0
    amount: int = 0
    recipient: str = ZERO_ADDRESS


class Execution(BaseModel):
    """One expected asset movement.

    ``offerer`` is the account the item is pulled from and ``conduit_key``
    the conduit routing key the movement uses.
    """

    item: ReceivedItem
    offerer: str
    conduit_key: str = ZERO_BYTES32


# ── Orders ───────────────────────────────────────────────────────────────────


class OrderParameters(BaseModel):
    """Signed body of an order."""

    offerer: str
    zone: str = ZERO_ADDRESS
    offer: list[OfferItem] = Field(default_factory=list)
    consideration: list[ConsiderationItem] = Field(default_factory=list)
    order_type: OrderType = OrderType.FULL_OPEN
    start_time: int = 0
    end_time: int = 2**256 - 1
    zone_hash: str = ZERO_BYTES32
    salt: int = 0
    conduit_key: str = ZERO_BYTES32
    total_original_consideration_items: int = 0


class AdvancedOrder(BaseModel):
    """Order plus the fill fraction, signature and extra data of one call."""

    parameters: OrderParameters
    numerator: int = 1
    denominator: int = 1
    signature: bytes = b""
    extra_data: bytes = b""

    @property
    def offerer(self) -> str:
        return self.parameters.offerer

    @property
    def order_type(self) -> OrderType:
        return self.parameters.order_type

    @property
    def is_contract_order(self) -> bool:
        return self.parameters.order_type is OrderType.CONTRACT

    def items(self, side: Side) -> list[OfferItem]:
        if side is Side.OFFER:
            return list(self.parameters.offer)
        return list(self.parameters.consideration)


class CriteriaResolver(BaseModel):
    """Resolves one criteria-based item to a concrete token identifier."""

    order_index: int = Field(ge=0)
    side: Side
    index: int = Field(ge=0)
    identifier: int = 0
    criteria_proof: list[str] = Field(default_factory=list)
