"""Finding models shared by the rule catalogs and reporting layers."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from functools import reduce
from typing import Iterable, List, Sequence


class Severity(str, Enum):
    """Severity grades, ordered ``ok < warn < critical``."""

    OK = "ok"
    WARN = "warn"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return _RANK[self]

    @property
    def color(self) -> str:
        """Return the traffic-light alias used by the upstream migration docs."""

        return _COLORS[self]

    @classmethod
    def from_value(cls, value: str) -> "Severity":
        """Parse a severity name or its colour alias."""

        normalized = str(value).strip().lower()
        for severity in cls:
            if normalized in (severity.value, severity.color):
                return severity
        raise ValueError(f"Unknown severity: {value!r}")


_RANK = {
    Severity.OK: 0,
    Severity.WARN: 1,
    Severity.CRITICAL: 2,
}

_COLORS = {
    Severity.OK: "green",
    Severity.WARN: "yellow",
    Severity.CRITICAL: "red",
}


def worse(a: Severity, b: Severity) -> Severity:
    """Return whichever severity ranks higher."""

    return a if a.rank >= b.rank else b


def combine(severities: Iterable[Severity]) -> Severity:
    """Fold ``worse`` over ``severities``, starting from ``Severity.OK``."""

    return reduce(worse, severities, Severity.OK)


@dataclass(slots=True)
class Finding:
    """The outcome of evaluating one rule."""

    title: str
    severity: Severity
    messages: List[str] = field(default_factory=list)
    doc_url: str = ""

    @classmethod
    def build(
        cls,
        severity_if_any: Severity,
        title: str,
        messages: Sequence[str],
        doc_url: str,
    ) -> "Finding":
        """Create a finding whose severity drops to ``OK`` when nothing was flagged."""

        collected = [message for message in messages if message]
        severity = severity_if_any if collected else Severity.OK
        return cls(title=title, severity=severity, messages=collected, doc_url=doc_url)

    @property
    def passed(self) -> bool:
        return not self.messages
