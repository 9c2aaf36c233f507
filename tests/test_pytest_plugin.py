"""Tests for the pytest golden-file helpers."""

import os

import pytest

from failfast_golden.compare.stream import GoldenMismatch
from failfast_golden.pytest_plugin import GoldenFiles, fail_test

REPORT_TEST = """
def test_report(golden):
    with golden.open("report.txt") as out:
        out.write(b"total: 4\\n")
"""

OPEN_ONLY_TEST = """
def test_report(golden):
    golden.open("report.txt")
"""


class FakeRunfiles:
    def __init__(self, root):
        self.root = root

    def Rlocation(self, path):
        return os.path.join(self.root, path)


def make_files(tmp_path, fail_fast, messages):
    golden_dir = tmp_path / "golden"
    golden_dir.mkdir(exist_ok=True)
    return GoldenFiles(str(golden_dir), str(tmp_path / "silver"), fail_fast, fail=messages.append)


def test_fail_test_fails_without_traceback():
    with pytest.raises(pytest.fail.Exception) as excinfo:
        fail_test("< a\n> b\n")
    assert "< a\n> b\n" in str(excinfo.value)


def test_compare_mode_match(tmp_path):
    messages = []
    files = make_files(tmp_path, True, messages)
    (tmp_path / "golden" / "report.txt").write_bytes(b"total: 3\n")
    out = files.open("report.txt")
    out.write(b"total: 3\n")
    files.close_all()
    assert messages == []
    assert (tmp_path / "silver" / "report.txt").read_bytes() == b"total: 3\n"


def test_compare_mode_mismatch(tmp_path):
    messages = []
    files = make_files(tmp_path, True, messages)
    (tmp_path / "golden" / "report.txt").write_bytes(b"total: 3\n")
    with files.open("report.txt") as out:
        out.write(b"total: 4\n")
    assert messages == ["< total: 3\n> total: 4\n"]


def test_missing_output_detected_at_teardown(tmp_path):
    messages = []
    files = make_files(tmp_path, True, messages)
    (tmp_path / "golden" / "report.txt").write_bytes(b"total: 3\n")
    files.open("report.txt")
    files.close_all()
    assert messages == ["< total: 3\n"]


def test_record_mode_writes_golden(tmp_path):
    messages = []
    files = make_files(tmp_path, False, messages)
    (tmp_path / "golden" / "report.txt").write_bytes(b"total: 3\n")
    with files.open("sub/report.txt") as out:
        out.write(b"total: 4\n")
    with files.open("report.txt") as out:
        out.write(b"total: 4\n")
    assert (tmp_path / "golden" / "report.txt").read_bytes() == b"total: 4\n"
    assert (tmp_path / "golden" / "sub" / "report.txt").read_bytes() == b"total: 4\n"
    assert messages == []


def test_close_all_closes_remaining_streams_after_failure(tmp_path):
    files = GoldenFiles(str(tmp_path / "golden"), str(tmp_path / "silver"), True, fail=None)
    (tmp_path / "golden").mkdir()
    (tmp_path / "golden" / "a.txt").write_bytes(b"trailing")
    (tmp_path / "golden" / "b.txt").write_bytes(b"kept\n")
    first = files.open("a.txt")
    second = files.open("b.txt")
    second.write(b"kept\n")
    with pytest.raises(GoldenMismatch):
        files.close_all()
    assert first.silver.closed
    assert second.silver.closed
    assert (tmp_path / "silver" / "b.txt").read_bytes() == b"kept\n"


def test_relative_golden_dir_resolves_through_runfiles(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    root = tmp_path / "runfiles"
    (root / "pkg" / "golden").mkdir(parents=True)
    (root / "pkg" / "golden" / "report.txt").write_bytes(b"total: 3\n")
    messages = []
    files = GoldenFiles(
        os.path.join("pkg", "golden"),
        str(tmp_path / "silver"),
        True,
        fail=messages.append,
        runfiles_ctx=FakeRunfiles(str(root)),
    )
    assert files.golden_path("report.txt") == os.path.join(str(root), "pkg/golden/report.txt")
    with files.open("report.txt") as out:
        out.write(b"total: 3\n")
    assert messages == []


@pytest.fixture
def inner(pytester, monkeypatch):
    monkeypatch.delenv("GOLDEN_REGENERATE", raising=False)
    monkeypatch.delenv("TEST_UNDECLARED_OUTPUTS_DIR", raising=False)
    pytester.makepyfile(test_report=REPORT_TEST)
    return pytester


def run_inner(pytester, *args):
    return pytester.runpytest("-p", "failfast_golden.pytest_plugin", *args)


class TestGoldenFixture:
    def test_mismatch_fails_with_diff(self, inner):
        (inner.path / "golden").mkdir()
        (inner.path / "golden" / "report.txt").write_bytes(b"total: 3\n")
        result = run_inner(inner)
        result.assert_outcomes(failed=1)
        result.stdout.fnmatch_lines(["*Golden mismatch:*", "*< total: 3*", "*> total: 4*"])

    def test_match_passes(self, inner):
        (inner.path / "golden").mkdir()
        (inner.path / "golden" / "report.txt").write_bytes(b"total: 4\n")
        run_inner(inner).assert_outcomes(passed=1)

    def test_missing_output_fails_at_teardown(self, inner):
        (inner.path / "golden").mkdir()
        (inner.path / "golden" / "report.txt").write_bytes(b"total: 3\n")
        inner.makepyfile(test_report=OPEN_ONLY_TEST)
        result = run_inner(inner)
        result.assert_outcomes(passed=1, errors=1)
        result.stdout.fnmatch_lines(["*< total: 3*"])

    def test_silver_goes_to_bazel_outputs(self, inner, monkeypatch):
        outputs = inner.path / "outputs"
        monkeypatch.setenv("TEST_UNDECLARED_OUTPUTS_DIR", str(outputs))
        (inner.path / "golden").mkdir()
        (inner.path / "golden" / "report.txt").write_bytes(b"total: 4\n")
        run_inner(inner).assert_outcomes(passed=1)
        assert (outputs / "report.txt").read_bytes() == b"total: 4\n"

    def test_regenerate_option_writes_golden(self, inner):
        run_inner(inner, "--regenerate-golden").assert_outcomes(passed=1)
        assert (inner.path / "golden" / "report.txt").read_bytes() == b"total: 4\n"
        run_inner(inner).assert_outcomes(passed=1)

    def test_regenerate_env_writes_golden(self, inner, monkeypatch):
        monkeypatch.setenv("GOLDEN_REGENERATE", "1")
        run_inner(inner).assert_outcomes(passed=1)
        assert (inner.path / "golden" / "report.txt").read_bytes() == b"total: 4\n"

    def test_golden_dir_ini(self, inner):
        inner.makeini("[pytest]\ngolden_dir = expected\n")
        run_inner(inner, "--regenerate-golden").assert_outcomes(passed=1)
        assert (inner.path / "expected" / "report.txt").read_bytes() == b"total: 4\n"
        assert not (inner.path / "golden").exists()
