from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from remover_core.analysis.blocks import AnalysisIssue


class ResultStatus(Enum):
    SUCCESS = "success"
    SUCCESS_WITH_REVIEW = "success_with_review"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass
class ProcessingResult:
    file_path: str
    status: ResultStatus
    blocks_removed: int = 0
    blocks_flagged_for_review: int = 0
    preview: Optional[str] = None
    errors: List[str] = field(default_factory=list)
    issues: List[AnalysisIssue] = field(default_factory=list)

    @classmethod
    def success(cls, file_path, blocks_removed, blocks_flagged, issues, preview=None):
        status = ResultStatus.SUCCESS_WITH_REVIEW if blocks_flagged > 0 else ResultStatus.SUCCESS
        return cls(
            file_path=file_path,
            status=status,
            blocks_removed=blocks_removed,
            blocks_flagged_for_review=blocks_flagged,
            issues=list(issues),
            preview=preview,
        )

    @classmethod
    def failed(cls, file_path, errors):
        return cls(file_path=file_path, status=ResultStatus.FAILED, errors=list(errors))

    @classmethod
    def skipped(cls, file_path, reason):
        return cls(file_path=file_path, status=ResultStatus.SKIPPED, errors=[reason])

    @property
    def is_failed(self) -> bool:
        return self.status is ResultStatus.FAILED

    def to_dict(self, include_preview: bool = False) -> dict:
        data = {
            "file_path": self.file_path,
            "status": self.status.value,
            "blocks_removed": self.blocks_removed,
            "blocks_flagged_for_review": self.blocks_flagged_for_review,
            "errors": list(self.errors),
            "issues": [{"line": i.line, "message": i.message} for i in self.issues],
        }
        if include_preview:
            data["preview"] = self.preview
        return data
