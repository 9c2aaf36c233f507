"""Opens silver output streams in compare or record mode."""

import io
import os

from runfiles import runfiles

from failfast_golden.compare.stream import CompareStream

REGENERATE_ENV = "GOLDEN_REGENERATE"
_TRUTHY = ("1", "true", "yes", "on")


def new_silver(golden_path, silver_path, fail_fast, fail=None):
    """Return a writable byte stream for ``silver_path``.

    With ``fail_fast`` the stream compares every write against ``golden_path``
    and fails at the first divergence. Otherwise it only records silver, which
    can then be copied onto the golden file.
    """
    parent = os.path.dirname(silver_path)
    if parent:
        os.makedirs(parent, exist_ok=True)
    if not fail_fast:
        return open(silver_path, "wb")
    golden = empty_or_file_source(golden_path)
    try:
        silver = open(silver_path, "wb")
    except OSError:
        golden.close()
        raise
    return CompareStream(golden, silver, fail=fail, close_streams=True)


def empty_or_file_source(golden_path):
    if os.path.isfile(golden_path):
        return open(golden_path, "rb")
    return io.BytesIO(b"")


def fail_fast_from_env(environ=None):
    if environ is None:
        environ = os.environ
    value = environ.get(REGENERATE_ENV, "")
    return value.strip().lower() not in _TRUTHY


def resolve_silver_dir(environ=None, default=None):
    if environ is None:
        environ = os.environ
    base_dir = environ.get("TEST_UNDECLARED_OUTPUTS_DIR")
    if base_dir:
        return base_dir
    if default:
        return default
    return os.path.join(os.getcwd(), "silver")


def resolve_golden_path(path, runfiles_ctx=None):
    """Resolve a golden reference, looking up relative keys in Bazel runfiles.

    A reference that cannot be found is returned unchanged; opening it later
    yields an empty golden source.
    """
    if os.path.isabs(path) or os.path.exists(path):
        return path
    if runfiles_ctx is None:
        runfiles_ctx = runfiles.Create()
    if runfiles_ctx is None:
        return path
    location = runfiles_ctx.Rlocation(path.replace(os.sep, "/"))
    if location and os.path.exists(location):
        return location
    return path
