import threading
from collections import Counter
from typing import Dict, Iterator, List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

Severity = Literal["low", "medium", "high", "critical"]

SEVERITY_ORDER: Dict[str, int] = {"low": 0, "medium": 1, "high": 2, "critical": 3}
SEVERITIES_DESC: Tuple[str, ...] = ("critical", "high", "medium", "low")
BLOCKING_SEVERITIES = {"critical", "high"}


def severity_rank(severity: str) -> int:
    return SEVERITY_ORDER[severity]


class Finding(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    file_path: str
    line_number: int = Field(ge=1)
    severity: Severity
    description: str
    code_snippet: str = ""
    category: str = Field(min_length=1)


class FindingCollector:
    """Append-only store of the findings produced by one scan run.

    Appends are serialized with a lock so per-file workers may report from
    several threads; every query works on a snapshot and never mutates.
    """

    def __init__(self) -> None:
        self._findings: List[Finding] = []
        self._lock = threading.Lock()

    def add(self, finding: Finding) -> None:
        with self._lock:
            self._findings.append(finding)

    def extend(self, findings) -> None:
        with self._lock:
            self._findings.extend(findings)

    def snapshot(self) -> Tuple[Finding, ...]:
        with self._lock:
            return tuple(self._findings)

    def __len__(self) -> int:
        return len(self.snapshot())

    def __iter__(self) -> Iterator[Finding]:
        return iter(self.snapshot())

    def count_by_severity(self) -> Dict[str, int]:
        counts = {s: 0 for s in SEVERITIES_DESC}
        for f in self.snapshot():
            counts[f.severity] += 1
        return counts

    def by_severity(self, severity: str) -> List[Finding]:
        return [f for f in self.snapshot() if f.severity == severity]

    def group_by_category(self, severity: Optional[str] = None) -> Dict[str, int]:
        # Counter keeps first-seen order, and sorted() is stable, so ties stay put
        counts = Counter(
            f.category for f in self.snapshot() if severity is None or f.severity == severity
        )
        return dict(sorted(counts.items(), key=lambda kv: -kv[1]))

    def sorted_by_severity(self) -> List[Finding]:
        return sorted(self.snapshot(), key=lambda f: -severity_rank(f.severity))

    def has_blocking(self) -> bool:
        return any(f.severity in BLOCKING_SEVERITIES for f in self.snapshot())
