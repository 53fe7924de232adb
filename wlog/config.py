"""
Replay configuration: YAML files and the --wlog y,FILE option.

wlog:
  file: uris.wlog
  loop: false
  embedded_http_headers: false
add_header: ["X-Run: 7\\n"]
num_calls: null
verbose: 0
"""
import os
from dataclasses import dataclass, field

import yaml

from wlog.errors import ConfigError
from wlog.escape import unescape

_TRUE = {"y", "yes", "1", "true", "on"}
_FALSE = {"n", "no", "0", "false", "off"}


@dataclass
class WlogSettings:
    file: str
    loop: bool = False
    embedded_headers: bool = False
    add_header: list[str] = field(default_factory=list)
    num_calls: int | None = None
    verbose: int = 0

    def extra_headers(self) -> list[bytes]:
        return [unescape(h) for h in self.add_header]


def _parse_flag(value, name):
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ConfigError(f"{name} must be a boolean (y/n), got {value!r}")


def parse_wlog_option(value: str) -> tuple[bool, str]:
    """Parse the `--wlog loop,file` form, e.g. `y,uris.wlog`."""
    flag, sep, path = str(value).partition(",")
    if not sep or not path:
        raise ConfigError(f"--wlog expects LOOP,FILE (e.g. y,uris.wlog), got {value!r}")
    return _parse_flag(flag, "--wlog loop flag"), path


def _normalize_config(payload):
    cfg = dict(payload or {})
    wlog = cfg.get("wlog") or {}
    if isinstance(wlog, str):
        loop, path = parse_wlog_option(wlog)
        wlog = {"file": path, "loop": loop}
    cfg["wlog"] = dict(wlog)
    cfg["wlog"].setdefault("loop", False)
    cfg["wlog"].setdefault("embedded_http_headers", False)
    headers = cfg.get("add_header")
    if headers is None:
        headers = []
    elif isinstance(headers, str):
        headers = [headers]
    cfg["add_header"] = headers
    cfg.setdefault("num_calls", None)
    cfg.setdefault("verbose", 0)
    return cfg


def _validate_config(cfg):
    wlog = cfg["wlog"]
    if not isinstance(wlog, dict):
        raise ConfigError("wlog must be a mapping or a LOOP,FILE string")
    if not wlog.get("file"):
        raise ConfigError("wlog.file is required")
    wlog["loop"] = _parse_flag(wlog["loop"], "wlog.loop")
    wlog["embedded_http_headers"] = _parse_flag(wlog["embedded_http_headers"], "wlog.embedded_http_headers")
    if not isinstance(cfg["add_header"], list) or not all(isinstance(h, str) for h in cfg["add_header"]):
        raise ConfigError("add_header must be a string or a list of strings")
    num_calls = cfg["num_calls"]
    if num_calls is not None and (not isinstance(num_calls, int) or isinstance(num_calls, bool) or num_calls < 0):
        raise ConfigError("num_calls must be a non-negative integer")
    verbose = cfg["verbose"]
    if isinstance(verbose, bool):
        cfg["verbose"] = int(verbose)
    elif not isinstance(verbose, int) or verbose < 0:
        raise ConfigError("verbose must be a non-negative integer")
    return cfg


def load_config(path: str) -> dict:
    if not os.path.isfile(path):
        raise ConfigError(f"config not found: {path}")
    with open(path, "r") as f:
        try:
            payload = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"invalid YAML in {path}: {exc}") from exc
    if not isinstance(payload, dict):
        raise ConfigError(f"{path} must contain a mapping")
    return _validate_config(_normalize_config(payload))


def settings_from_config(cfg: dict) -> WlogSettings:
    cfg = _validate_config(_normalize_config(cfg))
    wlog = cfg["wlog"]
    return WlogSettings(
        file=str(wlog["file"]),
        loop=wlog["loop"],
        embedded_headers=wlog["embedded_http_headers"],
        add_header=list(cfg["add_header"]),
        num_calls=cfg["num_calls"],
        verbose=cfg["verbose"],
    )
