from __future__ import annotations

import enum
from collections import Counter
from dataclasses import dataclass, field


class FileStatus(enum.Enum):
    WRITTEN = "written"
    NO_TEXT = "no_text"
    EXISTS = "exists"
    NO_MATCH = "no_match"
    SKIPPED_EXISTING = "skipped_existing"
    SKIPPED_NO_METADATA = "skipped_no_metadata"
    LOOKUP_ERROR = "lookup_error"
    WRITE_ERROR = "write_error"
    READ_ERROR = "read_error"
    FAILED = "failed"


MATCHED = {FileStatus.WRITTEN, FileStatus.NO_TEXT, FileStatus.EXISTS}
SKIPPED = {FileStatus.SKIPPED_EXISTING, FileStatus.SKIPPED_NO_METADATA}
ERRORED = {FileStatus.LOOKUP_ERROR, FileStatus.WRITE_ERROR, FileStatus.READ_ERROR, FileStatus.FAILED}


@dataclass(frozen=True)
class FileResult:
    file_path: str
    status: FileStatus
    message: str = ""


@dataclass
class RunReport:
    counts: Counter = field(default_factory=Counter)
    errors: list[FileResult] = field(default_factory=list)
    cancelled: bool = False

    def add(self, result: FileResult) -> None:
        self.counts[result.status] += 1
        if result.status in ERRORED:
            self.errors.append(result)

    def count(self, status: FileStatus) -> int:
        return self.counts[status]

    @property
    def total(self) -> int:
        return sum(self.counts.values())

    @property
    def matched(self) -> int:
        return sum(self.counts[s] for s in MATCHED)

    @property
    def skipped(self) -> int:
        return sum(self.counts[s] for s in SKIPPED)

    @property
    def errored(self) -> int:
        return sum(self.counts[s] for s in ERRORED)

    def summary_lines(self) -> list[str]:
        lines = [
            f"Processed {self.total} file(s): {self.matched} matched, "
            f"{self.count(FileStatus.NO_MATCH)} not found, {self.skipped} skipped, {self.errored} errored"
        ]
        for status in FileStatus:
            n = self.counts[status]
            if n:
                lines.append(f"  {status.value}: {n}")
        if self.cancelled:
            lines.append("Run was interrupted before all files were processed.")
        return lines
