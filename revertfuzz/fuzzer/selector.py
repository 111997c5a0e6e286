"""Seeded selection among eligible failures, orders and criteria resolvers.

Every draw builds a fresh ``random.Random`` from ``seed ^ separator`` and
takes a single ``getrandbits`` value reduced modulo the eligible count. The
reduction keeps a small bias toward low indices when the count does not
divide the draw range; it is kept as-is so recorded seeds keep replaying to
the same failure and target.

Failure and target selection share the same derived stream, so for a given
seed both consume the same first draw.
"""

from __future__ import annotations

import logging
import random
from typing import Sequence, TypeVar

from revertfuzz.core.config import get_settings
from revertfuzz.core.types import AdvancedOrder, CriteriaResolver
from revertfuzz.fuzzer.eligibility import eligible_failures
from revertfuzz.fuzzer.errors import (
    NoEligibleCriteriaResolverError,
    NoEligibleFailureError,
    NoEligibleOrderError,
)
from revertfuzz.fuzzer.failures import Failure
from revertfuzz.fuzzer.scenario import Bitset, ScenarioContext

logger = logging.getLogger(__name__)

T = TypeVar("T")


def derive_rng(seed: int, separator: int | None = None) -> random.Random:
    """Selection PRNG for a scenario seed."""
    if separator is None:
        separator = get_settings().selection_domain_separator
    return random.Random(seed ^ separator)


def draw_index(seed: int, count: int, separator: int | None = None, bits: int | None = None) -> int:
    """Pick an index in ``range(count)`` from the seed's selection stream."""
    if count <= 0:
        raise ValueError("Cannot draw from an empty range")
    if bits is None:
        bits = get_settings().selection_draw_bits
    return derive_rng(seed, separator).getrandbits(bits) % count


def _eligible_indices(total: int, ineligible: Bitset) -> list[int]:
    return [i for i in range(total) if i not in ineligible]


def _pick(seed: int, candidates: Sequence[T], separator: int | None) -> T:
    return candidates[draw_index(seed, len(candidates), separator)]


def select_eligible_failure(context: ScenarioContext, separator: int | None = None) -> Failure:
    """Choose one failure not marked ineligible for the scenario."""
    eligible = eligible_failures(context)
    if not eligible:
        raise NoEligibleFailureError()

    failure = _pick(context.seed, eligible, separator)
    logger.info(
        "Selected failure %s",
        failure.name,
        extra={"seed": context.seed, "failure": failure.value, "eligible_count": len(eligible)},
    )
    return failure


def select_eligible_order(
    context: ScenarioContext, separator: int | None = None
) -> tuple[AdvancedOrder, int]:
    """Choose one order not marked ineligible, with its index."""
    eligible = _eligible_indices(len(context.orders), context.ineligible_orders)
    if not eligible:
        raise NoEligibleOrderError()

    index = _pick(context.seed, eligible, separator)
    logger.debug(
        "Selected order %d",
        index,
        extra={"seed": context.seed, "order_index": index, "eligible_count": len(eligible)},
    )
    return context.orders[index], index


def select_eligible_criteria_resolver(
    context: ScenarioContext, separator: int | None = None
) -> tuple[CriteriaResolver, int]:
    """Choose one criteria resolver not marked ineligible, with its index."""
    eligible = _eligible_indices(
        len(context.criteria_resolvers), context.ineligible_criteria_resolvers
    )
    if not eligible:
        raise NoEligibleCriteriaResolverError()

    index = _pick(context.seed, eligible, separator)
    logger.debug(
        "Selected criteria resolver %d",
        index,
        extra={"seed": context.seed, "resolver_index": index, "eligible_count": len(eligible)},
    )
    return context.criteria_resolvers[index], index
