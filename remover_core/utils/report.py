import json
from datetime import datetime, timezone
from typing import List

from remover_core.results import ProcessingResult


def build_report(results: List[ProcessingResult]) -> dict:
    return {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "total_files": len(results),
        "blocks_cleaned": sum(r.blocks_removed for r in results),
        "blocks_flagged": sum(r.blocks_flagged_for_review for r in results),
        "files_failed": sum(1 for r in results if r.is_failed),
        "files": [
            {
                "file_path": r.file_path,
                "status": r.status.value,
                "blocks_removed": r.blocks_removed,
                "blocks_flagged_for_review": r.blocks_flagged_for_review,
                "issues": [{"line": i.line, "message": i.message} for i in r.issues],
            }
            for r in results
        ],
    }


def write_report(path: str, results: List[ProcessingResult]) -> dict:
    report = build_report(results)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(report, f, indent=2)
    return report
