r"""
Backslash escape grammar shared by --add-header and embedded log headers.

  \\   backslash          \a   LF
  \r   CR                 \n   CR LF
  \0-\9  byte from the octal digits starting there
Anything else is passed through literally with a warning.
"""
from wlog.diagnostics import log

_BACKSLASH = 0x5C
_OCTAL = b"01234567"
_SIMPLE = {
    ord("\\"): b"\\",
    ord("a"): b"\n",
    ord("r"): b"\r",
    ord("n"): b"\r\n",
}


def _octal_run(data: bytes, start: int) -> tuple[int, int]:
    """Parse the octal digits at data[start:]; return (value, index after run)."""
    end = start
    while end < len(data) and data[end] in _OCTAL:
        end += 1
    if end == start:
        return 0, start
    return int(data[start:end], 8) & 0xFF, end


def unescape(raw, source: str = "--add-header") -> bytes:
    """Decode raw (bytes or str) into a newly allocated bytes object."""
    if isinstance(raw, str):
        raw = raw.encode("utf-8", "surrogateescape")
    data = bytes(raw)
    nul = data.find(b"\0")
    if nul != -1:
        data = data[:nul]
    out = bytearray()
    i = 0
    n = len(data)
    while i < n:
        ch = data[i]
        i += 1
        if ch != _BACKSLASH:
            out.append(ch)
            continue
        if i >= n:
            log(f"wlog: ignoring trailing backslash in {source}", "warn")
            break
        ch = data[i]
        i += 1
        if ch in _SIMPLE:
            out += _SIMPLE[ch]
        elif 0x30 <= ch <= 0x39:
            # \8 and \9 start no octal run: a NUL is emitted and the digit
            # is then copied on the next pass
            value, i = _octal_run(data, i - 1)
            out.append(value)
        else:
            log(f"wlog: ignoring unknown escape sequence `\\{chr(ch)}' in {source}", "warn")
            out.append(ch)
    return bytes(out)


def decode(raw, source: str = "--add-header") -> tuple[bytes, int]:
    decoded = unescape(raw, source)
    return decoded, len(decoded)
