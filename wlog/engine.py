"""
Minimal request-issuing engine seam: a Call request object, an event registry
with a graceful-shutdown signal, and the LoadGenerator base class generators
plug into. Connections, timing and statistics live elsewhere.
"""
import abc
from dataclasses import dataclass, field
from typing import Any, Callable

EV_CALL_NEW = "call_new"

Handler = Callable[[str, Any], None]


@dataclass
class Call:
    """One outgoing request: target plus extra header bytes in append order."""
    call_id: int
    target: bytes | None = None
    headers: list[bytes] = field(default_factory=list)

    def set_target(self, data: bytes, length: int | None = None) -> None:
        self.target = bytes(data if length is None else data[:length])

    def append_header(self, data: bytes, length: int | None = None) -> None:
        self.headers.append(bytes(data if length is None else data[:length]))

    @property
    def header_block(self) -> bytes:
        return b"".join(self.headers)


class Engine:
    """
    Dispatches events to registered handlers. request_shutdown() stops new
    calls from being admitted; the call being built when it fires still goes out.
    """
    def __init__(self, extra_headers: list[bytes] | None = None):
        self._handlers: dict[str, list[Handler]] = {}
        self.extra_headers = list(extra_headers or [])
        self.stopping = False
        self.issued: list[Call] = []
        self._next_id = 0

    def register_handler(self, event: str, handler: Handler) -> None:
        self._handlers.setdefault(event, []).append(handler)

    def fire(self, event: str, obj: Any) -> None:
        for handler in self._handlers.get(event, []):
            handler(event, obj)

    def request_shutdown(self) -> None:
        self.stopping = True

    def new_call(self) -> Call:
        """Build one call: global headers first, then call_new handlers."""
        self._next_id += 1
        call = Call(call_id=self._next_id)
        for header in self.extra_headers:
            call.append_header(header)
        self.fire(EV_CALL_NEW, call)
        self.issued.append(call)
        return call

    def run(self, generator: "LoadGenerator", num_calls: int | None = None) -> list[Call]:
        """Dry run: issue calls until num_calls or shutdown. Returns issued calls."""
        generator.init(self)
        generator.start()
        try:
            while not self.stopping and (num_calls is None or len(self.issued) < num_calls):
                self.new_call()
        finally:
            generator.stop()
        return self.issued


class LoadGenerator(abc.ABC):
    """A pluggable request generator. init() then start(); stop() when done."""

    description = ""

    @abc.abstractmethod
    def init(self, engine: Engine) -> None:
        """Acquire resources and register event handlers on engine."""
        pass

    def start(self) -> None:
        pass

    @abc.abstractmethod
    def stop(self) -> None:
        """Release resources."""
        pass

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.stop()
        return False
