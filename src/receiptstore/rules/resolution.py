from __future__ import annotations

from ..models import PaymentMethod, ReceiptCategory
from .loader import ResolutionRules, RuleSet


def resolve_label(label: str | None, rules: ResolutionRules) -> str:
    if label is None:
        return rules.default
    haystack = label.lower()
    for rule in rules.rules:
        if any(needle in haystack for needle in rule.contains_any):
            return rule.value
    return rules.default


def resolve_payment_method(label: str | None, ruleset: RuleSet) -> PaymentMethod:
    return PaymentMethod(resolve_label(label, ruleset.payment_methods))


def resolve_category(label: str | None, ruleset: RuleSet) -> ReceiptCategory:
    return ReceiptCategory(resolve_label(label, ruleset.categories))
