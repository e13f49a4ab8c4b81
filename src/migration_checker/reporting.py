"""Report sinks that receive section and finding events during an evaluation."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, List, MutableMapping

from .models import Finding, Severity, combine

_MARKERS = {
    Severity.OK: "[ok]",
    Severity.WARN: "[warn]",
    Severity.CRITICAL: "[critical]",
}


class Reporter(ABC):
    """Receives ``start_section`` / ``result`` events in evaluation order."""

    @abstractmethod
    def start_section(self, kind: str, title: str) -> None:
        """Open a new section; following results belong to it."""

    @abstractmethod
    def result(self, finding: Finding) -> None:
        """Record the finding of one rule."""


@dataclass(slots=True)
class Section:
    kind: str
    title: str
    findings: List[Finding] = field(default_factory=list)

    @property
    def severity(self) -> Severity:
        return combine(finding.severity for finding in self.findings)


class ReportCollector(Reporter):
    """Reporter that keeps every event so it can be rendered afterwards."""

    def __init__(self) -> None:
        self.sections: List[Section] = []

    def start_section(self, kind: str, title: str) -> None:
        self.sections.append(Section(kind=kind, title=title))

    def result(self, finding: Finding) -> None:
        if not self.sections:
            self.start_section("cluster", "Cluster")
        self.sections[-1].findings.append(finding)

    # ------------------------------------------------------------------
    @property
    def severity(self) -> Severity:
        return combine(section.severity for section in self.sections)

    def counts_by_severity(self) -> dict[str, int]:
        counts: MutableMapping[Severity, int] = {severity: 0 for severity in Severity}
        for section in self.sections:
            for finding in section.findings:
                counts[finding.severity] += 1
        return {severity.value: count for severity, count in counts.items()}

    def to_dict(self) -> dict[str, Any]:
        return {
            "summary": {
                "severity": self.severity.value,
                "counts": self.counts_by_severity(),
            },
            "sections": [
                {
                    "kind": section.kind,
                    "title": section.title,
                    "severity": section.severity.value,
                    "findings": [_serialize_finding(finding) for finding in section.findings],
                }
                for section in self.sections
            ],
        }

    def render_text(self, *, verbose: bool = False) -> str:
        """Render sections as plain text; passing rules are listed only when ``verbose``."""

        if not self.sections:
            return "No nodes evaluated."

        lines: List[str] = []
        for section in self.sections:
            lines.append(f"{section.kind.title()} {section.title}: {section.severity.value}")
            for finding in section.findings:
                if finding.passed and not verbose:
                    continue
                lines.append(f"  {_MARKERS[finding.severity]} {finding.title}")
                for message in finding.messages:
                    for line in message.splitlines():
                        lines.append(f"      - {line}")
                if finding.messages and finding.doc_url:
                    lines.append(f"      see {finding.doc_url}")
            lines.append("")

        lines.append(f"Cluster result: {self.severity.value}")
        return "\n".join(lines)


def _serialize_finding(finding: Finding) -> dict[str, Any]:
    return {
        "title": finding.title,
        "severity": finding.severity.value,
        "messages": list(finding.messages),
        "doc_url": finding.doc_url,
    }


__all__ = ["ReportCollector", "Reporter", "Section"]
