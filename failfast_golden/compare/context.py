"""Trailing context windows over accumulated stream bytes."""

ENCODING = "utf-8"
MAX_BACK_LINES = 5
MAX_BACK_BYTES = 500


def extract_context(buf, target, max_back_lines=MAX_BACK_LINES, max_back_bytes=MAX_BACK_BYTES):
    """Return the bytes of ``buf`` from a bounded point before ``target`` to its end.

    The window starts at most ``max_back_lines`` complete lines before the line
    holding ``target`` and never more than ``max_back_bytes`` bytes before it.
    Everything accumulated after ``target`` is kept.
    """
    if not buf:
        return b""
    target = max(0, min(target, len(buf)))
    end = target
    for _ in range(max_back_lines + 1):
        newline = buf.rfind(b"\n", 0, end)
        if newline == -1:
            start = 0
            break
        end = newline
    else:
        start = end + 1
    if target - start > max_back_bytes:
        start = target - max_back_bytes
    return bytes(buf[start:])


def split_lines(data, encoding=ENCODING):
    text = data.decode(encoding, errors="replace")
    if not text:
        return []
    lines = text.split("\n")
    if text.endswith("\n"):
        lines.pop()
    return lines


def context_lines(buf, target, max_back_lines=MAX_BACK_LINES, max_back_bytes=MAX_BACK_BYTES):
    return split_lines(extract_context(buf, target, max_back_lines, max_back_bytes))
