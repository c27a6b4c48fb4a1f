"""Free-shipping rule evaluation.

A rule is a checklist of optional bounds. Absent bounds always pass; a rule
applies when its scope matches and every present bound holds.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from shipquote.services.domain import ShippingRule


@dataclass(frozen=True)
class CartFacts:
    """Values a rule is evaluated against."""
    method_code: str
    zone_code: str
    subtotal: int
    weight_g: int
    item_count: int


BoundCheck = Callable[[ShippingRule, CartFacts], bool]


def _at_least(bound: Optional[int], value: int) -> bool:
    return bound is None or value >= bound


def _at_most(bound: Optional[int], value: int) -> bool:
    return bound is None or value <= bound


BOUND_CHECKS: tuple[BoundCheck, ...] = (
    lambda r, f: _at_least(r.min_subtotal, f.subtotal),
    lambda r, f: _at_most(r.max_subtotal, f.subtotal),
    lambda r, f: _at_least(r.min_weight, f.weight_g),
    lambda r, f: _at_most(r.max_weight, f.weight_g),
    lambda r, f: _at_least(r.min_items, f.item_count),
)


def in_scope(rule: ShippingRule, facts: CartFacts) -> bool:
    """Empty or missing allow-lists do not restrict the rule."""
    if rule.method_codes and facts.method_code not in rule.method_codes:
        return False
    if rule.zone_codes and facts.zone_code not in rule.zone_codes:
        return False
    return True


def bounds_hold(rule: ShippingRule, facts: CartFacts) -> bool:
    return all(check(rule, facts) for check in BOUND_CHECKS)


def rule_applies(rule: ShippingRule, facts: CartFacts) -> bool:
    return rule.is_active and in_scope(rule, facts) and bounds_hold(rule, facts)


def matching_rule(rules: Sequence[ShippingRule], facts: CartFacts) -> Optional[ShippingRule]:
    """First applicable rule by descending priority, or None."""
    for rule in sorted(rules, key=lambda r: -r.priority):
        if rule_applies(rule, facts):
            return rule
    return None
