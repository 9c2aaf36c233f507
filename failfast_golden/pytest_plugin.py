"""pytest integration for fail-fast golden files.

Provides:
- ``golden`` fixture: ``golden.open(name)`` returns a silver stream checked
  against ``<test dir>/<golden_dir>/<name>``
- ``--regenerate-golden`` flag: write golden files instead of comparing
- ``golden_dir`` ini key (default ``golden``)

Usage::

    def test_report(golden):
        with golden.open("report.txt") as out:
            out.write(render_report().encode("utf-8"))
"""

import os

import pytest

from failfast_golden.snapshot.silver import fail_fast_from_env, new_silver, resolve_golden_path, resolve_silver_dir


def pytest_addoption(parser):
    group = parser.getgroup("golden")
    group.addoption(
        "--regenerate-golden",
        action="store_true",
        default=False,
        help="Write golden files from test output instead of comparing against them.",
    )
    parser.addini("golden_dir", "Golden file directory, relative to each test module.", default="golden")


def fail_test(message):
    pytest.fail("Golden mismatch:\n" + message, pytrace=False)


class GoldenFiles:
    """Opens silver streams for one test, all sharing a golden and silver directory.

    Golden references are looked up through Bazel runfiles when ``golden_dir``
    is relative. In record mode the silver stream writes the golden file itself.
    """

    def __init__(self, golden_dir, silver_dir, fail_fast, fail=fail_test, runfiles_ctx=None):
        self.golden_dir = golden_dir
        self.silver_dir = silver_dir
        self.fail_fast = fail_fast
        self._fail = fail
        self._runfiles_ctx = runfiles_ctx
        self._streams = []

    def golden_path(self, name):
        return resolve_golden_path(os.path.join(self.golden_dir, name), self._runfiles_ctx)

    def silver_path(self, name):
        if not self.fail_fast:
            return os.path.join(self.golden_dir, name)
        return os.path.join(self.silver_dir, name)

    def open(self, name):
        stream = new_silver(self.golden_path(name), self.silver_path(name), self.fail_fast, fail=self._fail)
        self._streams.append(stream)
        return stream

    def close_all(self):
        """Close every stream, then re-raise the first close-time failure."""
        streams, self._streams = self._streams, []
        error = None
        for stream in streams:
            try:
                stream.close()
            except BaseException as exc:  # pytest.fail raises outside Exception
                if error is None:
                    error = exc
        if error is not None:
            raise error


@pytest.fixture
def golden(request, tmp_path):
    golden_dir = os.path.join(os.path.dirname(str(request.path)), request.config.getini("golden_dir"))
    silver_dir = resolve_silver_dir(default=str(tmp_path / "silver"))
    fail_fast = fail_fast_from_env() and not request.config.getoption("regenerate_golden")
    files = GoldenFiles(golden_dir, silver_dir, fail_fast)
    yield files
    files.close_all()
