"""
Tests for codegen common helpers — headers, guarded I/O and conflicts.
"""

from pathlib import Path

import pytest

from stackgen.core.models.stack import Stack
from stackgen.core.models.template import GeneratedFile
from stackgen.core.services.codegen_common import (
    HEADER,
    HEADER_V0,
    CodegenIOError,
    ConflictError,
    ManualCodeExistsError,
    has_stackgen_header,
    list_stack_gen_files,
    load_generated_code,
    prepend_gen_hcl_header,
    prepend_header,
    remove_stack_generated_files,
    write_generated_code,
)
from stackgen.core.services.codegen_conflicts import (
    StringSet,
    check_generated_files_conflicts,
)


def _stack(path: Path) -> Stack:
    return Stack(abs_path=path, path="/stack", name="stack")


# ── Headers ─────────────────────────────────────────────────────


class TestHeaders:
    @pytest.mark.parametrize("content, owned", [
        (f"{HEADER}\n\nlocals {{}}\n", True),
        (f"{HEADER_V0}\n\nlocals {{}}\n", True),
        (HEADER, True),
        (f"{HEADER}trailing", True),
        (f" {HEADER}\n", False),
        (f"# comment\n{HEADER}\n", False),
        ("locals {}\n", False),
        ("", False),
    ])
    def test_has_stackgen_header(self, content, owned):
        assert has_stackgen_header(content.encode()) is owned

    def test_prepend_header(self):
        assert prepend_header("locals {}\n") == f"{HEADER}\n\nlocals {{}}\n"

    def test_prepend_gen_hcl_header(self):
        assert prepend_gen_hcl_header("/stackgen.yml", "x\n") == (
            f"{HEADER}\n"
            "// STACKGEN: originated from generate_hcl block on /stackgen.yml\n"
            "\n"
            "x\n"
        )


# ── Guarded read / write ────────────────────────────────────────


class TestLoadGeneratedCode:
    def test_missing_file(self, tmp_path: Path):
        assert load_generated_code(tmp_path / "nope.tf") == ("", False)

    def test_generated_file(self, tmp_path: Path):
        target = tmp_path / "gen.tf"
        target.write_text(f"{HEADER}\n\nx\n")
        assert load_generated_code(target) == (f"{HEADER}\n\nx\n", True)

    def test_manual_file(self, tmp_path: Path):
        target = tmp_path / "main.tf"
        target.write_text("locals {}\n")
        with pytest.raises(ManualCodeExistsError) as exc_info:
            load_generated_code(target)
        assert exc_info.value.path == target
        assert "manually defined code found" in str(exc_info.value)

    def test_undecodable_generated_file(self, tmp_path: Path):
        target = tmp_path / "gen.tf"
        target.write_bytes(HEADER.encode() + b"\n\xff\xfe\n")

        code, found = load_generated_code(target)

        assert found
        assert code.startswith(HEADER)
        assert code != f"{HEADER}\n\n"


class TestWriteGeneratedCode:
    def test_creates_file(self, tmp_path: Path):
        target = tmp_path / "gen.tf"
        write_generated_code(target, f"{HEADER}\n\nx\n")
        assert target.read_text() == f"{HEADER}\n\nx\n"

    def test_overwrites_generated_file(self, tmp_path: Path):
        target = tmp_path / "gen.tf"
        target.write_text(f"{HEADER_V0}\n\nold\n")
        write_generated_code(target, f"{HEADER}\n\nnew\n")
        assert target.read_text() == f"{HEADER}\n\nnew\n"

    def test_refuses_manual_file(self, tmp_path: Path):
        target = tmp_path / "main.tf"
        target.write_bytes(b"manual\r\n")
        with pytest.raises(ManualCodeExistsError):
            write_generated_code(target, f"{HEADER}\n\nnew\n")
        assert target.read_bytes() == b"manual\r\n"

    def test_missing_parent_dir(self, tmp_path: Path):
        with pytest.raises(CodegenIOError):
            write_generated_code(tmp_path / "missing" / "gen.tf", f"{HEADER}\n")


# ── Listing / removal ───────────────────────────────────────────


class TestStackGenFiles:
    def _populate(self, directory: Path) -> None:
        (directory / "b_gen.tf").write_text(f"{HEADER}\n\nb\n")
        (directory / "a_gen.tf").write_text(f"{HEADER_V0}\n\na\n")
        (directory / "manual.tf").write_text("manual\n")
        (directory / "sub").mkdir()
        (directory / "sub" / "nested.tf").write_text(f"{HEADER}\n")

    def test_list_is_sorted_and_non_recursive(self, tmp_path: Path):
        self._populate(tmp_path)
        assert list_stack_gen_files(_stack(tmp_path)) == ["a_gen.tf", "b_gen.tf"]

    def test_list_missing_dir(self, tmp_path: Path):
        with pytest.raises(CodegenIOError):
            list_stack_gen_files(_stack(tmp_path / "missing"))

    def test_remove_yields_bodies(self, tmp_path: Path):
        self._populate(tmp_path)

        removed = dict(remove_stack_generated_files(_stack(tmp_path)))

        assert removed == {
            "a_gen.tf": f"{HEADER_V0}\n\na\n".encode(),
            "b_gen.tf": f"{HEADER}\n\nb\n".encode(),
        }
        assert sorted(p.name for p in tmp_path.iterdir()) == ["manual.tf", "sub"]
        assert (tmp_path / "sub" / "nested.tf").exists()

    def test_remove_keeps_raw_bytes(self, tmp_path: Path):
        body = HEADER.encode() + b"\n\xff\xfe\n"
        (tmp_path / "gen.tf").write_bytes(body)

        removed = dict(remove_stack_generated_files(_stack(tmp_path)))

        assert removed == {"gen.tf": body}
        assert not (tmp_path / "gen.tf").exists()


# ── Conflicts ───────────────────────────────────────────────────


class TestStringSet:
    def test_operations(self):
        s = StringSet("b", "a", "b")
        assert len(s) == 2
        assert s.has("a")
        s.add("c")
        s.remove("a")
        s.remove("missing")
        assert s.slice() == ["b", "c"]


class TestConflicts:
    def test_unique_names_pass(self):
        check_generated_files_conflicts([
            GeneratedFile(name="a.tf", body="x"),
            GeneratedFile(name="b.tf"),
        ])

    def test_duplicate_name_fails_even_when_empty(self):
        with pytest.raises(ConflictError, match="'a.tf'"):
            check_generated_files_conflicts([
                GeneratedFile(name="a.tf", body="x"),
                GeneratedFile(name="a.tf"),
            ])
