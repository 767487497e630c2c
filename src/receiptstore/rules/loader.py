from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

import yaml

from ..models import PaymentMethod, ReceiptCategory


DEFAULT_RULES_DIR = Path(__file__).resolve().parent / "defaults"


@dataclass(frozen=True, slots=True)
class ResolutionRule:
    value: str
    contains_any: list[str]


@dataclass(frozen=True, slots=True)
class ResolutionRules:
    rules: list[ResolutionRule]
    default: str


@dataclass(frozen=True, slots=True)
class RuleSet:
    payment_methods: ResolutionRules
    categories: ResolutionRules

    @classmethod
    def load_from_dir(cls, rules_dir: Path) -> "RuleSet":
        payment_methods = _load_yaml(rules_dir / "payment_methods.yml")
        categories = _load_yaml(rules_dir / "categories.yml")

        return cls(
            payment_methods=_resolution_rules(payment_methods, PaymentMethod, rules_dir / "payment_methods.yml"),
            categories=_resolution_rules(categories, ReceiptCategory, rules_dir / "categories.yml"),
        )

    @classmethod
    def default(cls) -> "RuleSet":
        return cls.load_from_dir(DEFAULT_RULES_DIR)


def _resolution_rules(data: dict | None, enum_cls: type[Enum], path: Path) -> ResolutionRules:
    allowed = {member.value for member in enum_cls}

    default = str((data or {}).get("default") or next(iter(enum_cls)).value)
    if default not in allowed:
        raise ValueError(f"Unknown {enum_cls.__name__} default {default!r} in {path}.")

    # Keep file order: the first matching rule wins.
    rules: list[ResolutionRule] = []
    for rule in ((data or {}).get("rules") or []):
        value = str(rule["value"])
        if value not in allowed:
            raise ValueError(f"Unknown {enum_cls.__name__} value {value!r} in {path}.")
        rules.append(
            ResolutionRule(
                value=value,
                contains_any=[str(v).lower() for v in (rule.get("contains_any") or []) if str(v)],
            )
        )
    return ResolutionRules(rules=rules, default=default)


def _load_yaml(path: Path) -> dict | None:
    if not path.exists():
        raise FileNotFoundError(str(path))
    data = yaml.safe_load(path.read_text(encoding="utf-8"))
    if data is None:
        return None
    if not isinstance(data, dict):
        raise ValueError(f"Expected a YAML mapping at {path}, got {type(data).__name__}.")
    return data
