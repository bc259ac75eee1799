"""Exit codes for the cond-remover command line."""


class ExitCodes:

    SUCCESS = 0
    FILES_FAILED = 1
    REVIEW_REQUIRED = 2

    @classmethod
    def get_description(cls, code: int) -> str:
        descriptions = {
            cls.SUCCESS: "Success - all files processed",
            cls.FILES_FAILED: "One or more files failed and were left unchanged",
            cls.REVIEW_REQUIRED: "Blocks were flagged for manual review (--fail-on-review)",
        }
        return descriptions.get(code, f"Unknown exit code: {code}")

    @classmethod
    def for_run(cls, results, fail_on_review: bool = False) -> int:
        if any(r.is_failed for r in results):
            return cls.FILES_FAILED
        if fail_on_review and sum(r.blocks_flagged_for_review for r in results) > 0:
            return cls.REVIEW_REQUIRED
        return cls.SUCCESS
