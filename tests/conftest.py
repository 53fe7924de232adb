import pytest

from wlog import diagnostics


@pytest.fixture(autouse=True)
def _reset_log_level():
    diagnostics.set_log_level("info")
    yield
    diagnostics.set_log_level("info")


@pytest.fixture
def make_log(tmp_path):
    """Write raw bytes to a log file and return its path."""
    counter = {"n": 0}

    def _make(data: bytes, name: str | None = None) -> str:
        counter["n"] += 1
        path = tmp_path / (name or f"uris_{counter['n']}.wlog")
        path.write_bytes(data)
        return str(path)

    return _make
