"""Bookkeeping for unfolding runs.

Every rewrite performed by :class:`~unternary.transform.ConditionalUnfolder`
is recorded as a :class:`RewriteRecord`.  The :class:`UnfoldReport` aggregates
those records per file and :class:`UnfoldReporter` renders them as text, JSON
or a markdown table so the command line tool can summarise a batch run.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence

REWRITE_IF_CHAIN = "if-chain"
REWRITE_EARLY_RETURN = "early-return"
REWRITE_SWITCH = "switch"


@dataclass(frozen=True)
class RewriteRecord:
    """A single statement that was replaced.

    ``trigger`` names the shape that was matched (``conditional``,
    ``logical`` or ``return``), ``kind`` the rendering that replaced it.
    ``depth`` is the guard depth of the decision tree and ``statements`` the
    number of top level statements spliced in.
    """

    kind: str
    trigger: str
    line: int
    statements: int
    depth: int

    def to_line(self) -> str:
        noun = "statement" if self.statements == 1 else "statements"
        return (
            f"- line {self.line}: {self.trigger} -> {self.kind} "
            f"({self.statements} {noun}, depth {self.depth})"
        )

    def to_dict(self) -> Dict[str, object]:
        return {
            "kind": self.kind,
            "trigger": self.trigger,
            "line": self.line,
            "statements": self.statements,
            "depth": self.depth,
        }


@dataclass(frozen=True)
class RefusalRecord:
    line: int
    base: str
    reason: str

    def to_dict(self) -> Dict[str, object]:
        return {"line": self.line, "base": self.base, "reason": self.reason}


class UnfoldReport:
    """Collect rewrite records for a single source file (or a merged batch)."""

    def __init__(self, name: Optional[str] = None) -> None:
        self.name = name
        self.passes = 0
        self._records: List[RewriteRecord] = []
        self._refusals: List[RefusalRecord] = []

    def register(self, record: RewriteRecord) -> None:
        self._records.append(record)

    def register_refusal(self, refusal: RefusalRecord) -> None:
        self._refusals.append(refusal)

    def register_many(self, records: Iterable[RewriteRecord]) -> None:
        for record in records:
            self.register(record)

    @property
    def records(self) -> List[RewriteRecord]:
        return list(self._records)

    @property
    def refusals(self) -> List[RefusalRecord]:
        return list(self._refusals)

    def total_rewrites(self) -> int:
        return len(self._records)

    def count_by_kind(self) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        for record in self._records:
            counts[record.kind] = counts.get(record.kind, 0) + 1
        return dict(sorted(counts.items()))

    def count_by_trigger(self) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        for record in self._records:
            counts[record.trigger] = counts.get(record.trigger, 0) + 1
        return dict(sorted(counts.items()))

    def deepest(self, limit: int = 5) -> List[RewriteRecord]:
        records = sorted(self._records, key=lambda item: item.depth, reverse=True)
        return records[:limit]

    def to_dict(self, *, record_limit: int = 200) -> Dict[str, object]:
        return {
            "name": self.name,
            "passes": self.passes,
            "total_rewrites": self.total_rewrites(),
            "by_kind": self.count_by_kind(),
            "by_trigger": self.count_by_trigger(),
            "records": [record.to_dict() for record in self._records[:record_limit]],
            "refused_switches": [refusal.to_dict() for refusal in self._refusals],
        }

    def summary_lines(self, limit: int = 5) -> List[str]:
        if not self._records and not self._refusals:
            return []
        title = self.name or "unfold summary"
        lines = [f"- {title}: {self.total_rewrites()} rewrites in {self.passes} passes"]
        for kind, count in self.count_by_kind().items():
            lines.append(f"  - {kind}: {count}")
        deepest = self.deepest(limit)
        if deepest:
            lines.append("  - deepest chains:")
            for record in deepest:
                lines.append(f"    * {record.to_line().lstrip('- ')}")
        if self._refusals:
            lines.append(f"  - refused switches: {len(self._refusals)}")
        return lines


def merge_reports(reports: Sequence[UnfoldReport], name: str = "all inputs") -> UnfoldReport:
    """Return a report containing the records of all ``reports``."""

    merged = UnfoldReport(name)
    for report in reports:
        merged.register_many(report._records)
        for refusal in report._refusals:
            merged.register_refusal(refusal)
        merged.passes = max(merged.passes, report.passes)
    return merged


class UnfoldReporter:
    """Render one or more :class:`UnfoldReport` objects."""

    def __init__(self, reports: Sequence[UnfoldReport]) -> None:
        self._reports = list(reports)

    def as_text(self, *, limit: int = 5) -> str:
        merged = merge_reports(self._reports)
        lines = ["conditional unfolding report"]
        lines.append(f"files: {len(self._reports)}")
        lines.append(f"total rewrites: {merged.total_rewrites()}")
        for report in self._reports:
            section = report.summary_lines(limit=limit)
            if section:
                lines.extend(section)
        if merged.total_rewrites() == 0:
            lines.append("- no statements rewritten")
        return "\n".join(lines)

    def as_json(self) -> str:
        merged = merge_reports(self._reports)
        payload = {
            "total_rewrites": merged.total_rewrites(),
            "by_kind": merged.count_by_kind(),
            "by_trigger": merged.count_by_trigger(),
            "files": [report.to_dict() for report in self._reports],
        }
        return json.dumps(payload, indent=2, sort_keys=True)

    def as_markdown_table(self) -> str:
        rows = ["| file | rewrites | if-chain | early-return | switch |", "| --- | --- | --- | --- | --- |"]
        for report in self._reports:
            counts = report.count_by_kind()
            rows.append(
                f"| {report.name or '-'} | {report.total_rewrites()} | "
                f"{counts.get(REWRITE_IF_CHAIN, 0)} | {counts.get(REWRITE_EARLY_RETURN, 0)} | "
                f"{counts.get(REWRITE_SWITCH, 0)} |"
            )
        return "\n".join(rows)


__all__ = [
    "REWRITE_IF_CHAIN",
    "REWRITE_EARLY_RETURN",
    "REWRITE_SWITCH",
    "RewriteRecord",
    "RefusalRecord",
    "UnfoldReport",
    "UnfoldReporter",
    "merge_reports",
]
