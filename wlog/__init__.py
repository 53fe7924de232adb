"""
wlog: replay a captured NUL-delimited request log as a request stream.
Use WlogGenerator.attach(engine) to drive it from an Engine's call_new events.
"""
from wlog.engine import Call, Engine, LoadGenerator
from wlog.errors import (
    ConfigError,
    EmptyLogError,
    GeneratorStateError,
    LogOpenError,
    NoValidRecordsError,
    WlogError,
)
from wlog.escape import decode, unescape
from wlog.generator import WlogGenerator
from wlog.reader import LogBuffer, LogReader
from wlog.splitter import SENTINEL, SplitRecord, split_record

__all__ = [
    "Call",
    "ConfigError",
    "EmptyLogError",
    "Engine",
    "GeneratorStateError",
    "LoadGenerator",
    "LogBuffer",
    "LogOpenError",
    "LogReader",
    "NoValidRecordsError",
    "SENTINEL",
    "SplitRecord",
    "WlogError",
    "WlogGenerator",
    "decode",
    "split_record",
    "unescape",
]
