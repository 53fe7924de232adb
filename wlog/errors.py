"""
Fatal conditions carry the process exit code the CLI terminates with.
"""

EXIT_OK = 0
EXIT_UNKNOWN = 1
EXIT_CONFIG = 2
EXIT_LOG_OPEN = 3
EXIT_LOG_EMPTY = 4
EXIT_NO_RECORDS = 5


class WlogError(Exception):
    code = EXIT_UNKNOWN

    def __init__(self, message, code=None):
        super().__init__(message)
        if code is not None:
            self.code = code


class ConfigError(WlogError):
    code = EXIT_CONFIG


class LogOpenError(WlogError, OSError):
    code = EXIT_LOG_OPEN


class EmptyLogError(WlogError):
    code = EXIT_LOG_EMPTY


class NoValidRecordsError(WlogError):
    code = EXIT_NO_RECORDS


class GeneratorStateError(RuntimeError):
    """produce_next() called before initialize() or after finalize()."""
