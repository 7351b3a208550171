"""Log files written by the client daemon."""

from __future__ import annotations

import os
import sys
from datetime import datetime
from pathlib import Path
from typing import IO

# Maximum number of client log files kept on disk.
MAX_CLIENT_LOG_FILES = 25


def _user_cache_dir() -> Path:
    if sys.platform.startswith("win"):
        local = os.environ.get("LocalAppData", "")
        if not local:
            raise OSError("%LocalAppData% is not defined")
        return Path(local)
    if sys.platform == "darwin":
        home = os.environ.get("HOME", "")
        if not home:
            raise OSError("$HOME is not defined")
        return Path(home) / "Library" / "Caches"
    xdg = os.environ.get("XDG_CACHE_HOME", "")
    if xdg:
        if not os.path.isabs(xdg):
            raise OSError("path in $XDG_CACHE_HOME is relative")
        return Path(xdg)
    home = os.environ.get("HOME", "")
    if not home:
        raise OSError("neither $XDG_CACHE_HOME nor $HOME are defined")
    return Path(home) / ".cache"


def client_log_dir() -> Path:
    """Return the directory where client log files are stored."""
    return _user_cache_dir() / "mieru"


def _prepare(log_dir: str | os.PathLike | None) -> Path:
    directory = Path(log_dir) if log_dir is not None else client_log_dir()
    directory.mkdir(mode=0o755, parents=True, exist_ok=True)
    return directory


def new_client_log_file(log_dir: str | os.PathLike | None = None) -> IO[str]:
    """Open a new log file named after the current time and process id."""
    directory = _prepare(log_dir)
    stamp = datetime.now().strftime("%Y%m%d_%H%M")
    path = directory / f"{stamp}_{os.getpid()}.log"
    try:
        fd = os.open(path, os.O_WRONLY | os.O_APPEND | os.O_CREAT, 0o644)
    except OSError as exc:
        raise OSError(f"failed to create client log file {path}: {exc}") from exc
    return os.fdopen(fd, "a", encoding="utf-8")


def remove_old_client_log_files(log_dir: str | os.PathLike | None = None) -> list[Path]:
    """Delete the oldest log files beyond the limit; return what was deleted."""
    directory = _prepare(log_dir)
    log_files = sorted(
        entry.name
        for entry in os.scandir(directory)
        if not entry.is_dir() and entry.name.endswith(".log")
    )
    excess = len(log_files) - MAX_CLIENT_LOG_FILES
    removed = []
    for name in log_files[: max(excess, 0)]:
        path = directory / name
        path.unlink()
        removed.append(path)
    return removed