"""
Speed rules: map a diff line to the interval between revealed characters.

Rules are matched in declared order and the first match wins. A rule
either names an absolute interval or a speed multiplier applied to the
base interval (interval = base / multiplier).
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Any

from .errors import InvalidSpeedRuleError
from .models import DiffLine, DiffLineKind

# KINDS[>=MIN][<=MAX]:VALUE, bounds inclusive, e.g. "removed:x2", "added,context>=80:15ms", "*<=4:5ms"
_RULE_PATTERN = re.compile(
    r"^(?P<kinds>\*|[a-z]+(?:,[a-z]+)*)"
    r"(?:>=(?P<min>\d+))?"
    r"(?:<=(?P<max>\d+))?"
    r":(?P<value>x\d+(?:\.\d+)?|\d+(?:\.\d+)?ms)$"
)


@dataclass(frozen=True)
class SpeedRule:
    """A predicate over a diff line and the interval it resolves to."""

    kinds: frozenset[DiffLineKind] = frozenset()
    min_length: int | None = None
    max_length: int | None = None
    interval_ms: float | None = None
    multiplier: float | None = None

    def __post_init__(self):
        if (self.interval_ms is None) == (self.multiplier is None):
            raise InvalidSpeedRuleError("exactly one of interval_ms or multiplier is required")
        if self.interval_ms is not None and self.interval_ms < 0:
            raise InvalidSpeedRuleError("interval_ms cannot be negative")
        if self.multiplier is not None and self.multiplier <= 0:
            raise InvalidSpeedRuleError("multiplier must be positive")
        if (
            self.min_length is not None
            and self.max_length is not None
            and self.min_length > self.max_length
        ):
            raise InvalidSpeedRuleError("min_length cannot exceed max_length")

    def matches(self, line: DiffLine) -> bool:
        if self.kinds and line.kind not in self.kinds:
            return False
        length = len(line.text)
        if self.min_length is not None and length < self.min_length:
            return False
        if self.max_length is not None and length > self.max_length:
            return False
        return True

    def interval(self, base_ms: float) -> float:
        if self.interval_ms is not None:
            return self.interval_ms
        return base_ms / self.multiplier

    @classmethod
    def parse(cls, text: str) -> SpeedRule:
        """Parse the compact form used on the command line and in env vars."""
        match = _RULE_PATTERN.match(text.strip().lower())
        if match is None:
            raise InvalidSpeedRuleError(rule=text)

        kinds = _parse_kinds(match.group("kinds").split(","), text)
        value = match.group("value")
        return cls(
            kinds=kinds,
            min_length=int(match.group("min")) if match.group("min") else None,
            max_length=int(match.group("max")) if match.group("max") else None,
            interval_ms=float(value[:-2]) if value.endswith("ms") else None,
            multiplier=float(value[1:]) if value.startswith("x") else None,
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SpeedRule:
        """Build a rule from a YAML/TOML table."""
        unknown = set(data) - {"kinds", "min_length", "max_length", "interval_ms", "multiplier"}
        if unknown:
            raise InvalidSpeedRuleError(f"unknown keys {sorted(unknown)}", rule=str(data))
        raw_kinds = data.get("kinds") or []
        if isinstance(raw_kinds, str):
            raw_kinds = raw_kinds.split(",")
        return cls(
            kinds=_parse_kinds(raw_kinds, str(data)),
            min_length=data.get("min_length"),
            max_length=data.get("max_length"),
            interval_ms=data.get("interval_ms"),
            multiplier=data.get("multiplier"),
        )

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {"kinds": sorted(kind.value for kind in self.kinds)}
        if self.min_length is not None:
            d["min_length"] = self.min_length
        if self.max_length is not None:
            d["max_length"] = self.max_length
        if self.interval_ms is not None:
            d["interval_ms"] = self.interval_ms
        if self.multiplier is not None:
            d["multiplier"] = self.multiplier
        return d


def _parse_kinds(names: Iterable[str], rule: str) -> frozenset[DiffLineKind]:
    kinds = set()
    for name in names:
        name = name.strip().lower()
        if name in ("", "*"):
            continue
        try:
            kinds.add(DiffLineKind(name))
        except ValueError:
            raise InvalidSpeedRuleError(f"unknown line kind {name!r}", rule=rule) from None
    return frozenset(kinds)


class SpeedRuleSet:
    """Ordered speed rules with a base interval fallback."""

    def __init__(self, base_ms: float, rules: Sequence[SpeedRule] = ()):
        if base_ms < 0:
            raise ValueError("base_ms cannot be negative")
        self.base_ms = base_ms
        self.rules: tuple[SpeedRule, ...] = tuple(rules)

    def resolve(self, line: DiffLine) -> float:
        """Interval in milliseconds between characters of *line*."""
        for rule in self.rules:
            if rule.matches(line):
                return rule.interval(self.base_ms)
        return self.base_ms

    def __len__(self) -> int:
        return len(self.rules)

    def __repr__(self) -> str:
        return f"SpeedRuleSet(base_ms={self.base_ms}, rules={len(self.rules)})"


__all__ = ["SpeedRule", "SpeedRuleSet"]
