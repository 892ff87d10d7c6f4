"""
Frozen-aware path resolver for the catalog SKU engine.

Provides stable, portable paths whether the app runs:
  - From the IDE / source tree (development)
  - As a PyInstaller frozen executable (production)

Rules
-----
* base_dir    → directory of the executable (frozen) or project root (dev)
* data_dir    → base_dir/data    (portable first); fallback %APPDATA%/CatalogSku/data
* logs_dir    → base_dir/logs    (portable first); fallback %APPDATA%/CatalogSku/logs
* exports_dir → data_dir/exports

NEVER use os.getcwd() or relative Path("...") strings in runtime code;
always call one of the functions below.
"""

import os
import sys
from pathlib import Path

APP_DIR_NAME = "CatalogSku"


def _get_base_dir() -> Path:
    if getattr(sys, "frozen", False):
        return Path(sys.executable).resolve().parent
    # Dev: src/utils/paths.py -> project root
    return Path(__file__).resolve().parent.parent.parent


def _try_writable(path: Path) -> bool:
    """
    Return True if *path* can be created and used as a writable directory.

    Uses a canary-file probe so permission issues are detected up front.
    """
    try:
        path.mkdir(parents=True, exist_ok=True)
        canary = path / ".write_probe"
        canary.touch()
        canary.unlink()
        return True
    except OSError:
        return False


def _appdata_dir(sub: str) -> Path:
    """Return %APPDATA%/CatalogSku/<sub> (Windows) or ~/CatalogSku/<sub>."""
    appdata = os.environ.get("APPDATA") or str(Path.home())
    return Path(appdata) / APP_DIR_NAME / sub


def _portable_dir(sub: str) -> Path:
    primary = _get_base_dir() / sub
    if _try_writable(primary):
        return primary
    fallback = _appdata_dir(sub)
    fallback.mkdir(parents=True, exist_ok=True)
    return fallback


def get_base_dir() -> Path:
    return _get_base_dir()


def get_data_dir() -> Path:
    """
    Portable data directory.

    Priority:
      1. <base_dir>/data
      2. %APPDATA%/CatalogSku/data  ← fallback if base_dir is read-only
    """
    return _portable_dir("data")


def get_logs_dir() -> Path:
    return _portable_dir("logs")


def get_exports_dir() -> Path:
    """Default destination for CSV / Excel exports."""
    path = get_data_dir() / "exports"
    path.mkdir(parents=True, exist_ok=True)
    return path
