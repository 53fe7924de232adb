"""
Replay generator: recreate a workload from a captured request log.

The log is a concatenation of NUL-terminated request targets:

    URI1\\0URI2\\0...URIn\\0

With embedded HTTP headers enabled each record may carry its own header block
ahead of a control-A byte, written in the --add-header escape grammar:

    headers\\x01URI1\\0headers\\x01URI2\\0...

Headers belong to a single request and never accumulate. Without looping the
engine is asked to stop once the log has been replayed; with looping the log
repeats forever.
"""
import enum

from wlog.diagnostics import enabled, log
from wlog.engine import EV_CALL_NEW, Call, Engine, LoadGenerator
from wlog.errors import GeneratorStateError, NoValidRecordsError
from wlog.escape import decode
from wlog.reader import LogBuffer, LogReader
from wlog.splitter import split_record


class State(enum.Enum):
    UNINITIALIZED = "uninitialized"
    READY = "ready"
    STOPPED = "stopped"


class WlogGenerator(LoadGenerator):
    description = "Generates URIs based on a predetermined list"

    def __init__(
        self,
        log_path: str | None = None,
        loop: bool = False,
        embedded_headers: bool = False,
        verbose: bool = False,
        on_shutdown=None,
    ):
        self.log_path = log_path
        self.loop = loop
        self.embedded_headers = embedded_headers
        self.verbose = verbose
        self.shutdown_requested = False
        self.state = State.UNINITIALIZED
        self.cursor = 0
        self._buffer: LogBuffer | None = None
        self._reader: LogReader | None = None
        self._shutdown = on_shutdown

    @classmethod
    def from_settings(cls, settings) -> "WlogGenerator":
        return cls(
            settings.file,
            loop=settings.loop,
            embedded_headers=settings.embedded_headers,
            verbose=settings.verbose > 0,
        )

    def initialize(self, log_path: str | None = None, loop: bool | None = None, embedded_headers: bool | None = None) -> None:
        """Map the log read-only and reset the cursor. Raises LogOpenError / EmptyLogError."""
        if self.state is not State.UNINITIALIZED:
            raise GeneratorStateError(f"initialize() called while {self.state.value}")
        if log_path is not None:
            self.log_path = log_path
        if loop is not None:
            self.loop = loop
        if embedded_headers is not None:
            self.embedded_headers = embedded_headers
        if not self.log_path:
            raise ValueError("log_path is required")
        self._buffer = LogBuffer.open(self.log_path)
        self._reader = LogReader(self._buffer)
        self.cursor = 0
        self.state = State.READY
        log(f"wlog: mapped {self.log_path} ({self._buffer.size} bytes)", "debug")

    def produce_next(self) -> tuple[bytes, bytes | None]:
        """
        Return (target, decoded_header) for the next non-empty record. The
        header is None when the record carries none or it decodes to nothing.
        """
        if self.state is not State.READY:
            raise GeneratorStateError(f"produce_next() called while {self.state.value}")
        did_wrap = False
        while True:
            data, self.cursor, wrapped = self._reader.next_record(self.cursor)
            if wrapped:
                if did_wrap:
                    raise NoValidRecordsError(f"{self.log_path} does not contain any valid URIs")
                did_wrap = True
                # The current request still goes out; the engine just stops
                # admitting new ones.
                if not self.loop:
                    self.shutdown_requested = True
                    if self._shutdown is not None:
                        self._shutdown()
            record = split_record(data, self.embedded_headers)
            if record.target:
                break
        header = None
        if record.header is not None:
            header, header_len = decode(record.header, source="embedded http headers")
            if enabled("debug"):
                log(f"wlog: generated http headers [{header!r}] uri [{record.target!r}]", "debug")
            if not header_len:
                header = None
        if self.verbose:
            log(f"wlog: accessing URI `{record.target.decode('latin-1')}'", "info")
        return record.target, header

    def finalize(self) -> None:
        if self._buffer is not None:
            self._buffer.close()
        self._buffer = None
        self._reader = None
        self.state = State.STOPPED

    def on_call_new(self, event: str, call: Call) -> None:
        target, header = self.produce_next()
        if header is not None:
            call.append_header(header)
        call.set_target(target)

    # LoadGenerator interface

    def attach(self, engine: Engine) -> None:
        self._shutdown = engine.request_shutdown
        engine.register_handler(EV_CALL_NEW, self.on_call_new)

    def init(self, engine: Engine) -> None:
        self.initialize()
        self.attach(engine)

    def stop(self) -> None:
        self.finalize()
