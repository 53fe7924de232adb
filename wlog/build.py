"""
Build replay logs: one URI per line, or the request target of each line of a
Common Log Format access log, written as URI\\0URI\\0...
Input lines are bytes; targets are copied through without re-encoding.
"""
import os
import re
import tempfile
from typing import Iterable, Iterator

from wlog.diagnostics import log
from wlog.reader import TERMINATOR
from wlog.splitter import SENTINEL

# host ident user [date] "METHOD target PROTO" status size
_CLF_REQUEST = re.compile(rb'^\S+ \S+ \S+ \[[^\]]*\] "(?P<method>[A-Z]+) (?P<target>\S+)(?: [^"]*)?"')


def _as_bytes(value) -> bytes:
    if isinstance(value, str):
        return value.encode("utf-8", "surrogateescape")
    return bytes(value)


def iter_uris_from_lines(lines: Iterable[bytes]) -> Iterator[bytes]:
    for line in lines:
        uri = _as_bytes(line).strip()
        if uri and not uri.startswith(b"#"):
            yield uri


def iter_uris_from_clf(lines: Iterable[bytes], methods: set[str] | None = None) -> Iterator[bytes]:
    """Yield request targets from CLF lines; unparseable lines are skipped."""
    wanted = {_as_bytes(m) for m in methods} if methods else None
    for lineno, line in enumerate(lines, start=1):
        line = _as_bytes(line).strip()
        if not line:
            continue
        m = _CLF_REQUEST.match(line)
        if not m:
            log(f"wlog build: skipping line {lineno}: not a CLF request", "debug")
            continue
        if wanted and m.group("method") not in wanted:
            continue
        yield m.group("target")


def encode_record(target, header=None) -> bytes:
    """One record with its terminator. header is raw escape-grammar text."""
    target = _as_bytes(target)
    if TERMINATOR in target or not target:
        raise ValueError(f"invalid target {target!r}: must be non-empty and contain no NUL")
    if header is None:
        return target + TERMINATOR
    header = _as_bytes(header)
    if TERMINATOR in header or SENTINEL in header:
        raise ValueError(f"invalid header {header!r}: must not contain NUL or \\x01")
    return header + SENTINEL + target + TERMINATOR


def write_log(path: str, targets: Iterable, headers: Iterable | None = None) -> int:
    """
    Write records to path; headers, when given, pairs with targets. Returns
    record count. The log is written to a temporary file and renamed into
    place, so a failure leaves no partial log behind.
    """
    count = 0
    fd, tmp_path = tempfile.mkstemp(prefix=".wlog-", dir=os.path.dirname(os.path.abspath(path)))
    try:
        with os.fdopen(fd, "wb") as f:
            if headers is None:
                for target in targets:
                    f.write(encode_record(target))
                    count += 1
            else:
                for target, header in zip(targets, headers):
                    f.write(encode_record(target, header))
                    count += 1
        os.chmod(tmp_path, 0o644)
        os.replace(tmp_path, path)
    except Exception:
        os.unlink(tmp_path)
        raise
    return count
