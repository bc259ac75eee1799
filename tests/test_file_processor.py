"""File-level processing: BOM, line endings, backups, generated files, failures."""

import os
from dataclasses import replace
from pathlib import Path

from remover_core import remover
from remover_core.remover import discover_files, process_file, process_files
from remover_core.results import ResultStatus
from remover_core.utils.orphan_detector import OrphanedDirective
from remover_core.core.directives import DirectiveKind

SIMPLE = "#if NET8_0_OR_GREATER\nA();\n#else\nB();\n#endif\n"
COMPLEX = "#if NET8_0_OR_GREATER && WINDOWS\nA();\n#endif\n"


class TestProcessFile:
    """process_file never raises; every outcome is a ProcessingResult."""

    def test_rewrites_in_place(self, write_cs, options):
        path = write_cs("a.cs", SIMPLE)
        result = process_file(path, options)
        assert result.status is ResultStatus.SUCCESS
        assert result.blocks_removed == 1
        assert result.preview is None
        assert Path(path).read_text(encoding="utf-8") == "A();\n"

    def test_dry_run_leaves_file(self, write_cs, options):
        path = write_cs("a.cs", SIMPLE)
        result = process_file(path, replace(options, dry_run=True))
        assert result.preview == "A();\n"
        assert Path(path).read_text(encoding="utf-8") == SIMPLE

    def test_review_status(self, write_cs, options):
        path = write_cs("a.cs", COMPLEX)
        result = process_file(path, options)
        assert result.status is ResultStatus.SUCCESS_WITH_REVIEW
        assert result.blocks_flagged_for_review == 1
        assert "NET8_REVIEW_REQUIRED" in Path(path).read_text(encoding="utf-8")

    def test_untouched_file_not_rewritten(self, write_cs, options):
        code = "class C  \n{\n}\n"
        path = write_cs("a.cs", code)
        result = process_file(path, options)
        assert result.status is ResultStatus.SUCCESS
        assert Path(path).read_text(encoding="utf-8") == code

    def test_bom_preserved(self, write_cs, options):
        path = write_cs("a.cs", SIMPLE, bom=True)
        process_file(path, options)
        assert Path(path).read_bytes() == b"\xef\xbb\xbfA();\n"

    def test_bom_in_preview(self, write_cs, options):
        path = write_cs("a.cs", SIMPLE, bom=True)
        result = process_file(path, replace(options, dry_run=True))
        assert result.preview == "\ufeffA();\n"

    def test_crlf_preserved(self, write_cs, options):
        path = write_cs("a.cs", SIMPLE.replace("\n", "\r\n"))
        process_file(path, options)
        assert Path(path).read_bytes() == b"A();\r\n"

    def test_blank_lines_collapsed(self, write_cs, options):
        code = "A();\n\n#if NET8_0_OR_GREATER\n\n#endif\n\nB();   \n"
        path = write_cs("a.cs", code)
        process_file(path, options)
        assert Path(path).read_text(encoding="utf-8") == "A();\n\nB();\n"

    def test_generated_file_skipped(self, write_cs, options):
        path = write_cs("Model.g.cs", SIMPLE)
        result = process_file(path, options)
        assert result.status is ResultStatus.SKIPPED
        assert result.errors == ["Generated file"]
        assert Path(path).read_text(encoding="utf-8") == SIMPLE

    def test_generated_header_skipped(self, write_cs, options):
        path = write_cs("a.cs", "// <auto-generated />\n" + SIMPLE)
        assert process_file(path, options).status is ResultStatus.SKIPPED

    def test_include_generated(self, write_cs, options):
        path = write_cs("Model.g.cs", SIMPLE)
        result = process_file(path, replace(options, include_generated=True))
        assert result.status is ResultStatus.SUCCESS

    def test_invalid_utf8_fails(self, tmp_path, options):
        path = tmp_path / "bad.cs"
        path.write_bytes(b"class C { \xff }\n")
        result = process_file(str(path), options)
        assert result.status is ResultStatus.FAILED
        assert result.errors[0].startswith("Unexpected error: ")

    def test_backup_removed_after_success(self, write_cs, options):
        path = write_cs("a.cs", SIMPLE)
        process_file(path, replace(options, create_backup=True))
        assert not os.path.exists(path + ".bak")

    def test_orphans_fail_and_restore(self, write_cs, options, monkeypatch):
        path = write_cs("a.cs", SIMPLE)
        monkeypatch.setattr(
            remover, "detect",
            lambda text: [OrphanedDirective(DirectiveKind.ENDIF, 3, "#endif without matching #if")],
        )
        result = process_file(path, replace(options, create_backup=True))
        assert result.status is ResultStatus.FAILED
        assert result.errors == ["Orphaned directive at line 3: #endif without matching #if"]
        assert Path(path).read_text(encoding="utf-8") == SIMPLE

    def test_unexpected_error_restores_backup(self, write_cs, options, monkeypatch):
        path = write_cs("a.cs", SIMPLE)

        def boom(text, opts):
            Path(path).write_text("garbage", encoding="utf-8")
            raise RuntimeError("kaput")

        monkeypatch.setattr(remover, "process_text", boom)
        result = process_file(path, replace(options, create_backup=True))
        assert result.errors == ["Unexpected error: kaput"]
        assert Path(path).read_text(encoding="utf-8") == SIMPLE


class TestDiscoverFiles:
    """*.cs discovery with build-output and generated-name exclusions."""

    def test_directory_walk(self, write_cs, tmp_path):
        write_cs("a.cs", "")
        write_cs("sub/b.cs", "")
        write_cs("obj/c.cs", "")
        write_cs("bin/Debug/d.cs", "")
        write_cs("e.g.cs", "")
        write_cs("notes.txt", "")
        found = discover_files(str(tmp_path))
        names = sorted(os.path.relpath(f, tmp_path) for f in found)
        assert names == ["a.cs", os.path.join("sub", "b.cs")]

    def test_generated_included_on_request(self, write_cs, tmp_path):
        write_cs("e.g.cs", "")
        assert len(discover_files(str(tmp_path), include_generated=True)) == 1

    def test_single_file(self, write_cs):
        path = write_cs("x.cs", "")
        assert discover_files(path) == [path]


class TestProcessFiles:
    """Sequential and process-pool runs give the same results in input order."""

    def test_sequential_callback(self, write_cs, options):
        files = [write_cs("a.cs", SIMPLE), write_cs("b.cs", COMPLEX)]
        seen = []
        results = process_files(files, options, on_result=seen.append)
        assert [r.file_path for r in results] == files
        assert seen == results

    def test_parallel(self, write_cs, options):
        files = [write_cs("a.cs", SIMPLE), write_cs("b.cs", COMPLEX), write_cs("c.cs", SIMPLE)]
        results = process_files(files, replace(options, parallel=True), max_workers=2)
        assert [r.file_path for r in results] == files
        assert [r.status for r in results] == [
            ResultStatus.SUCCESS,
            ResultStatus.SUCCESS_WITH_REVIEW,
            ResultStatus.SUCCESS,
        ]
        assert Path(files[0]).read_text(encoding="utf-8") == "A();\n"
