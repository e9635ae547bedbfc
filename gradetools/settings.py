import configparser
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

DEFAULT_BASE_URL = "https://powerschool.sas.edu.sg"
DEFAULT_STORE_FILE = "~/.gradetools.json"
DEFAULT_TIMEOUT = 30.0


@dataclass
class Settings:
    base_url: str = DEFAULT_BASE_URL
    store_file: Path = Path(DEFAULT_STORE_FILE).expanduser()
    timeout: float = DEFAULT_TIMEOUT


def _find_config_file() -> Optional[Path]:
    repo_root = Path(__file__).resolve().parents[1]
    cwd = Path.cwd()
    candidates = [
        cwd / "config.ini",
        repo_root / "config.ini",
        cwd / "config.example.ini",
        repo_root / "config.example.ini",
    ]
    for candidate in candidates:
        if candidate.exists():
            return candidate
    return None


def _config_values():
    config = configparser.ConfigParser()
    path = _find_config_file()
    if path is not None:
        config.read(path, encoding="utf-8")
    base_url = config.get("powerschool", "base_url", fallback="").strip()
    timeout = config.get("powerschool", "timeout", fallback="").strip()
    store_file = config.get("storage", "file", fallback="").strip()
    return base_url, timeout, store_file


def _to_timeout(value: str) -> Optional[float]:
    if not value:
        return None
    try:
        timeout = float(value)
    except ValueError:
        raise ValueError(f"Invalid timeout: {value!r}")
    if timeout <= 0:
        raise ValueError(f"Timeout must be positive: {value!r}")
    return timeout


def load_settings(
    base_url: Optional[str] = None,
    store_file: Optional[str] = None,
    timeout: Optional[float] = None,
) -> Settings:
    """Resolve settings: arguments, then environment, then config.ini."""
    config_url, config_timeout, config_store = _config_values()

    resolved_url = (
        base_url or os.getenv("GRADETOOLS_BASE_URL", "") or config_url or DEFAULT_BASE_URL
    )
    resolved_store = (
        store_file
        or os.getenv("GRADETOOLS_STORE_FILE", "")
        or config_store
        or DEFAULT_STORE_FILE
    )
    resolved_timeout = timeout
    if resolved_timeout is None:
        resolved_timeout = (
            _to_timeout(os.getenv("GRADETOOLS_TIMEOUT", "").strip())
            or _to_timeout(config_timeout)
            or DEFAULT_TIMEOUT
        )

    return Settings(
        base_url=resolved_url.rstrip("/"),
        store_file=Path(resolved_store).expanduser(),
        timeout=resolved_timeout,
    )
