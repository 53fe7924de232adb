"""
Split one log record into its request target and optional embedded header
block: HEADERS \\x01 TARGET.
"""
from dataclasses import dataclass

SENTINEL = b"\x01"


@dataclass(frozen=True)
class SplitRecord:
    target: bytes
    header: bytes | None = None


def split_record(record: bytes, embedded_headers: bool) -> SplitRecord:
    """
    With embedded headers disabled, or no sentinel present, the whole record
    is the target. Otherwise the header is everything before the first
    sentinel and the target is everything after it, later sentinels included.
    """
    if not embedded_headers:
        return SplitRecord(target=record)
    i = record.find(SENTINEL)
    if i == -1:
        return SplitRecord(target=record)
    return SplitRecord(target=record[i + 1:], header=record[:i])
