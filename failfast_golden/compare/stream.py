"""Golden comparator that fails as soon as a differing silver byte is written.

Silver bytes are compared against the golden reference while they are being
written, so a test fails at the first divergent byte with the lines leading up
to it, instead of after the whole output has been produced.

Usage::

    with CompareStream(open(golden_path, "rb"), open(silver_path, "wb"), close_streams=True) as out:
        out.write(b"...")

To (re)generate a golden file, write silver without comparing and copy it
onto the golden file (see ``failfast_golden.snapshot``).
"""

import sys

from failfast_golden.compare import context
from failfast_golden.compare import render

NO_DIFF = -1
PAST_DIFF_BYTES = 50
CLOSE_PROBE_BYTES = 200


class GoldenMismatch(AssertionError):
    """Raised when silver output diverges from the golden reference."""

    def __init__(self, diff, position):
        self.diff = diff
        self.position = position
        super().__init__(diff)


def first_diff_index(golden, silver):
    length = len(golden)
    if len(silver) != length:
        return min(length, len(silver))
    for index in range(length):
        if golden[index] != silver[index]:
            return index
    return NO_DIFF


def read_fully(source, size):
    """Read up to ``size`` bytes, retrying short reads until EOF."""
    chunks = []
    need = size
    while need > 0:
        chunk = source.read(need)
        if not chunk:
            break
        chunks.append(chunk)
        need -= len(chunk)
    return b"".join(chunks)


class CompareStream:
    """Writable byte sink that mirrors writes to ``silver`` and checks them against ``golden``.

    ``golden`` needs ``read(n)``, ``silver`` needs ``write``, ``flush`` and
    ``close``. On the first divergence ``fail`` is called once with the
    rendered diff; without one, :class:`GoldenMismatch` is raised. After that
    the stream only forwards to ``silver``.
    """

    def __init__(self, golden, silver, fail=None, close_streams=False):
        self.golden = golden
        self.silver = silver
        self.pos = 0
        self.failed_at = None
        self.closed = False
        self._fail = fail
        self._close_streams = close_streams
        self._gbuf = bytearray()
        self._sbuf = bytearray()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        if exc_type is None:
            self.close()
        else:
            self.closed = True
            self._close_underlying()

    @property
    def failed(self):
        return self.failed_at is not None

    @property
    def golden_seen(self):
        return bytes(self._gbuf)

    @property
    def silver_seen(self):
        return bytes(self._sbuf)

    def writable(self):
        return True

    def write_byte(self, b):
        self._check_open()
        data = bytes((b,))
        if self.failed:
            self.silver.write(data)
            return
        gb = self.golden.read(1)
        self._sbuf += data
        self.silver.write(data)
        if not gb:
            self._handle_diff(self.pos + 1)
            return
        self._gbuf += gb
        self.pos += 1
        if gb != data:
            self._read_past_diff()
            self._handle_diff(self.pos)

    def write(self, block):
        self._check_open()
        data = bytes(block)
        if self.failed:
            self.silver.write(data)
            return len(data)
        oldpos = self.pos
        gblock = read_fully(self.golden, len(data))
        self._gbuf += gblock
        self._sbuf += data
        self.pos += len(gblock)
        self.silver.write(data)
        if len(gblock) < len(data):
            # A short golden block is reported where the block started.
            self._handle_diff(oldpos + 1)
            return len(data)
        d = first_diff_index(gblock, data)
        if d != NO_DIFF:
            self._read_past_diff()
            self._handle_diff(oldpos + d + 1)
        return len(data)

    def writelines(self, blocks):
        for block in blocks:
            self.write(block)

    def flush(self):
        self.silver.flush()

    def close(self):
        """Fail if the golden reference has bytes that silver never wrote."""
        if self.closed:
            return
        self.closed = True
        try:
            if not self.failed:
                self._check_trailing()
        finally:
            self._close_underlying()

    def diff_context(self, position):
        target = position - 1
        glines = context.context_lines(self._gbuf, target)
        slines = context.context_lines(self._sbuf, target)
        return render.render_diff(glines, slines)

    def _check_trailing(self):
        try:
            trailing = self.golden.read(CLOSE_PROBE_BYTES)
        except OSError as exc:
            print("[golden] ignoring error reading golden source at close: {}".format(exc), file=sys.stderr)
            return
        if trailing:
            self._gbuf += trailing
            self._handle_diff(self.pos + 1)

    def _read_past_diff(self):
        # Golden may be read ahead for context; silver never is.
        self._gbuf += self.golden.read(PAST_DIFF_BYTES)

    def _handle_diff(self, position):
        self.failed_at = position
        message = self.diff_context(position)
        if self._fail is None:
            raise GoldenMismatch(message, position)
        self._fail(message)

    def _check_open(self):
        if self.closed:
            raise ValueError("I/O operation on closed file.")

    def _close_underlying(self):
        if not self._close_streams:
            return
        try:
            self.silver.close()
        finally:
            self.golden.close()
