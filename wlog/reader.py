"""
Read-only memory map of a NUL-delimited request log and a cursor-based record
scanner with wraparound. The mapping is never written; records are returned as
fresh bytes objects sliced out of it.
"""
import mmap
import os
from typing import NamedTuple

from wlog.errors import EmptyLogError, LogOpenError

TERMINATOR = b"\0"


class LogBuffer:
    """The whole log file mapped with ACCESS_READ for the life of a generator."""

    def __init__(self, path: str, data: mmap.mmap):
        self.path = path
        self._map = data

    @classmethod
    def open(cls, path: str) -> "LogBuffer":
        try:
            fd = os.open(path, os.O_RDONLY)
        except OSError as exc:
            raise LogOpenError(f"can't open {path}: {exc.strerror}") from exc
        try:
            size = os.fstat(fd).st_size
            if size == 0:
                raise EmptyLogError(f"file {path} is empty")
            try:
                data = mmap.mmap(fd, size, access=mmap.ACCESS_READ)
            except (OSError, ValueError) as exc:
                raise LogOpenError(f"can't mmap {path}: {exc}") from exc
        finally:
            os.close(fd)
        return cls(path, data)

    @property
    def size(self) -> int:
        return len(self._map)

    @property
    def closed(self) -> bool:
        return self._map.closed

    def find(self, sub: bytes, start: int) -> int:
        return self._map.find(sub, start)

    def __getitem__(self, key):
        return self._map[key]

    def __len__(self) -> int:
        return len(self._map)

    def close(self) -> None:
        if not self._map.closed:
            self._map.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()
        return False


class RecordRead(NamedTuple):
    data: bytes
    cursor: int
    wrapped: bool


class LogReader:
    """Scans records out of a LogBuffer. The cursor is owned by the caller."""

    def __init__(self, buffer: LogBuffer):
        self.buffer = buffer

    @property
    def end(self) -> int:
        return len(self.buffer)

    def next_record(self, cursor: int) -> RecordRead:
        """
        Return the record starting at cursor (terminator excluded), the cursor
        just past its terminator, and whether the scan had to wrap to 0 first.
        """
        wrapped = False
        if cursor >= self.end:
            cursor = 0
            wrapped = True
        stop = self.buffer.find(TERMINATOR, cursor)
        if stop == -1:
            return RecordRead(self.buffer[cursor:self.end], self.end, wrapped)
        return RecordRead(self.buffer[cursor:stop], stop + 1, wrapped)

    def iter_records(self):
        """Yield every record once, in file order, empty ones included."""
        cursor = 0
        while cursor < self.end:
            data, cursor, _ = self.next_record(cursor)
            yield data
