"""Per-test-case scenario state and the mutation addressing state."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator

from revertfuzz.core.types import (
    ZERO_ADDRESS,
    ZERO_BYTES32,
    AdvancedOrder,
    CriteriaResolver,
    Execution,
    FulfillAction,
    OrderStatus,
)


class Bitset:
    """Grow-only set of small non-negative integers backed by an int mask.

    Bits can only be set, never cleared.
    """

    __slots__ = ("_bits",)

    def __init__(self) -> None:
        self._bits = 0

    def set(self, index: int) -> None:
        if index < 0:
            raise ValueError(f"Bit index must be non-negative, got {index}")
        self._bits |= 1 << index

    def __contains__(self, index: object) -> bool:
        return isinstance(index, int) and index >= 0 and bool(self._bits >> index & 1)

    def __len__(self) -> int:
        return bin(self._bits).count("1")

    def __iter__(self) -> Iterator[int]:
        bits, index = self._bits, 0
        while bits:
            if bits & 1:
                yield index
            bits >>= 1
            index += 1

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Bitset):
            return NotImplemented
        return self._bits == other._bits

    def __repr__(self) -> str:
        return f"Bitset({sorted(self)})"

    @property
    def mask(self) -> int:
        return self._bits


@dataclass
class ScenarioContext:
    """Mutable state of one generated test case.

    Built by the scenario generator, narrowed by the evaluator and the
    selectors, then read-only for mutation application and revert checking.
    ``order_statuses`` and ``order_hashes`` are aligned with ``orders``;
    missing entries read as available / zero hash.
    """

    orders: list[AdvancedOrder] = field(default_factory=list)
    criteria_resolvers: list[CriteriaResolver] = field(default_factory=list)
    caller: str = ZERO_ADDRESS
    fulfiller_conduit_key: str = ZERO_BYTES32
    recipient: str = ZERO_ADDRESS
    action: FulfillAction = FulfillAction.FULFILL_ADVANCED_ORDER
    value: int = 0
    timestamp: int = 0
    order_statuses: list[OrderStatus] = field(default_factory=list)
    order_hashes: list[str] = field(default_factory=list)
    accounts_with_code: frozenset[str] = frozenset()
    conduits: dict[str, str] = field(default_factory=dict)
    expected_explicit_executions: list[Execution] = field(default_factory=list)
    expected_implicit_executions: list[Execution] = field(default_factory=list)
    seed: int = 0

    ineligible_failures: Bitset = field(default_factory=Bitset)
    ineligible_orders: Bitset = field(default_factory=Bitset)
    ineligible_criteria_resolvers: Bitset = field(default_factory=Bitset)

    def __post_init__(self) -> None:
        self.accounts_with_code = frozenset(a.lower() for a in self.accounts_with_code)
        self.conduits = {key.lower(): conduit for key, conduit in self.conduits.items()}

    # ── Lookups used by predicates and derivers ──────────────────────────

    def status_of(self, order_index: int) -> OrderStatus:
        if order_index < len(self.order_statuses):
            return self.order_statuses[order_index]
        return OrderStatus.AVAILABLE

    def order_hash(self, order_index: int) -> str:
        if order_index < len(self.order_hashes):
            return self.order_hashes[order_index]
        return ZERO_BYTES32

    def has_code(self, account: str) -> bool:
        return account.lower() in self.accounts_with_code

    def conduit_for(self, conduit_key: str) -> str:
        """Conduit address for a key, or the zero address when unknown."""
        return self.conduits.get(conduit_key.lower(), ZERO_ADDRESS)


@dataclass
class MutationState:
    """Addressing state of the target chosen for one mutation."""

    selected_order: AdvancedOrder | None = None
    selected_order_index: int | None = None
    selected_criteria_resolver: CriteriaResolver | None = None
    selected_criteria_resolver_index: int | None = None

    @property
    def is_empty(self) -> bool:
        return self.selected_order is None and self.selected_criteria_resolver is None
