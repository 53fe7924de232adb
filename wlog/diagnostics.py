"""
Side channel for warnings and verbose output. Everything goes to stderr so the
replay output on stdout stays clean.
"""
import sys

LOG_LEVEL = "info"
LOG_ORDER = {"debug": 10, "info": 20, "warn": 25, "error": 30}


def set_log_level(level: str) -> None:
    global LOG_LEVEL
    if level not in LOG_ORDER:
        raise ValueError(f"unknown log level: {level}")
    LOG_LEVEL = level


def enabled(level: str) -> bool:
    return LOG_ORDER[level] >= LOG_ORDER[LOG_LEVEL]


def log(message, level="info"):
    if not enabled(level):
        return
    print(message, file=sys.stderr)
