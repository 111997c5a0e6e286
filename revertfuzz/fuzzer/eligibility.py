"""Eligibility rules, the rule registry and the scenario evaluator.

A rule pairs a set of failures with one predicate. The predicate answers
"is this failure *inapplicable* here?" and its signature depends on scope:

    GenericRule            (context) -> bool
    OrderRule              (order, order_index, context) -> bool
    CriteriaResolverRule   (resolver, resolver_index, context) -> bool

Several failures may share a rule, and one failure may be covered by
several rules; any single rule is enough to exclude it. The evaluator ORs
exclusions into the scenario's bitsets, so the outcome does not depend on
the order rules were registered in.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, ClassVar, Iterable, Union

from revertfuzz.core.types import AdvancedOrder, CriteriaResolver
from revertfuzz.fuzzer.errors import (
    FrozenRegistryError,
    MissingCoverageError,
    NoRuleFoundError,
    UnknownDerivationScopeError,
)
from revertfuzz.fuzzer.failures import ALL_FAILURES, FAILURE_INDEX, DerivationScope, Failure
from revertfuzz.fuzzer.scenario import ScenarioContext

logger = logging.getLogger(__name__)

GenericPredicate = Callable[[ScenarioContext], bool]
OrderPredicate = Callable[[AdvancedOrder, int, ScenarioContext], bool]
CriteriaResolverPredicate = Callable[[CriteriaResolver, int, ScenarioContext], bool]


# ── Rules ────────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class GenericRule:
    """Rule evaluated once against the whole scenario."""

    failures: frozenset[Failure]
    predicate: GenericPredicate
    scope: ClassVar[DerivationScope] = DerivationScope.GENERIC

    def excludes(self, context: ScenarioContext) -> bool:
        return bool(self.predicate(context))


@dataclass(frozen=True)
class OrderRule:
    """Rule evaluated against each order of the scenario."""

    failures: frozenset[Failure]
    predicate: OrderPredicate
    scope: ClassVar[DerivationScope] = DerivationScope.PER_ORDER

    def is_ineligible(self, order_index: int, context: ScenarioContext) -> bool:
        return bool(self.predicate(context.orders[order_index], order_index, context))

    def excludes(self, context: ScenarioContext) -> bool:
        # No order can host the failure; vacuously true without orders.
        return all(self.is_ineligible(i, context) for i in range(len(context.orders)))


@dataclass(frozen=True)
class CriteriaResolverRule:
    """Rule evaluated against each criteria resolver of the scenario."""

    failures: frozenset[Failure]
    predicate: CriteriaResolverPredicate
    scope: ClassVar[DerivationScope] = DerivationScope.PER_CRITERIA_RESOLVER

    def is_ineligible(self, resolver_index: int, context: ScenarioContext) -> bool:
        return bool(
            self.predicate(context.criteria_resolvers[resolver_index], resolver_index, context)
        )

    def excludes(self, context: ScenarioContext) -> bool:
        return all(
            self.is_ineligible(i, context) for i in range(len(context.criteria_resolvers))
        )


EligibilityRule = Union[GenericRule, OrderRule, CriteriaResolverRule]

_RULE_TYPES: dict[DerivationScope, type] = {
    DerivationScope.GENERIC: GenericRule,
    DerivationScope.PER_ORDER: OrderRule,
    DerivationScope.PER_CRITERIA_RESOLVER: CriteriaResolverRule,
}


def _as_failure_set(failures: Failure | Iterable[Failure]) -> frozenset[Failure]:
    if isinstance(failures, Failure):
        return frozenset((failures,))
    return frozenset(failures)


# ── Registry ─────────────────────────────────────────────────────────────────


class FilterRegistry:
    """Ordered collection of eligibility rules.

    Built once at suite start, then frozen and shared read-only by every
    test case.
    """

    def __init__(self) -> None:
        self._rules: list[EligibilityRule] = []
        self._frozen = False

    def register_rule(
        self,
        failures: Failure | Iterable[Failure],
        scope: DerivationScope,
        predicate: Callable[..., bool],
    ) -> EligibilityRule:
        """Append one rule covering ``failures`` with the given scope."""
        if self._frozen:
            raise FrozenRegistryError("FilterRegistry")
        rule_type = _RULE_TYPES.get(scope) if isinstance(scope, DerivationScope) else None
        if rule_type is None:
            raise UnknownDerivationScopeError(scope)
        rule = rule_type(failures=_as_failure_set(failures), predicate=predicate)
        self._rules.append(rule)
        return rule

    def with_generic(
        self, failures: Failure | Iterable[Failure], predicate: GenericPredicate
    ) -> EligibilityRule:
        return self.register_rule(failures, DerivationScope.GENERIC, predicate)

    def with_order(
        self, failures: Failure | Iterable[Failure], predicate: OrderPredicate
    ) -> EligibilityRule:
        return self.register_rule(failures, DerivationScope.PER_ORDER, predicate)

    def with_criteria_resolver(
        self, failures: Failure | Iterable[Failure], predicate: CriteriaResolverPredicate
    ) -> EligibilityRule:
        return self.register_rule(failures, DerivationScope.PER_CRITERIA_RESOLVER, predicate)

    def freeze(self) -> None:
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    @property
    def rules(self) -> tuple[EligibilityRule, ...]:
        return tuple(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    def covered_failures(self) -> set[Failure]:
        covered: set[Failure] = set()
        for rule in self._rules:
            covered |= rule.failures
        return covered

    def rules_for(self, failure: Failure) -> list[EligibilityRule]:
        return [rule for rule in self._rules if failure in rule.failures]

    def assert_coverage(self, failures: Iterable[Failure] = ALL_FAILURES) -> None:
        """Fail on the first failure (in catalog order) with no rule."""
        covered = self.covered_failures()
        for failure in failures:
            if failure not in covered:
                raise MissingCoverageError(failure)

    def first_rule_for(
        self, failure: Failure, scope: DerivationScope | None = None
    ) -> EligibilityRule:
        """Return the first registered rule covering ``failure``.

        When ``scope`` is given only rules of that scope are considered.
        """
        for rule in self._rules:
            if failure in rule.failures and (scope is None or rule.scope is scope):
                return rule
        raise NoRuleFoundError(failure, scope)


# ── Evaluation ───────────────────────────────────────────────────────────────


def evaluate(rules: Iterable[EligibilityRule], context: ScenarioContext) -> None:
    """Mark every failure no rule-target in the scenario can host."""
    for rule in rules:
        if not rule.excludes(context):
            continue
        for failure in rule.failures:
            context.ineligible_failures.set(FAILURE_INDEX[failure])
        logger.debug(
            "Rule excludes %d failure(s)",
            len(rule.failures),
            extra={"seed": context.seed, "scope": rule.scope.value},
        )


def mark_ineligible_orders(context: ScenarioContext, rule: OrderRule) -> None:
    """Mark each order the rule's predicate rejects."""
    for i in range(len(context.orders)):
        if rule.is_ineligible(i, context):
            context.ineligible_orders.set(i)


def mark_ineligible_criteria_resolvers(context: ScenarioContext, rule: CriteriaResolverRule) -> None:
    """Mark each criteria resolver the rule's predicate rejects."""
    for i in range(len(context.criteria_resolvers)):
        if rule.is_ineligible(i, context):
            context.ineligible_criteria_resolvers.set(i)


def eligible_failures(context: ScenarioContext) -> list[Failure]:
    """Failures not yet marked ineligible, in catalog order."""
    return [f for f in ALL_FAILURES if FAILURE_INDEX[f] not in context.ineligible_failures]
