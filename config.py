"""
Project configuration and constants.
"""
from pathlib import Path
import json
import logging
from typing import Optional

from src.domain.header_repair import SKU_HEADER
from src.domain.models import SkuSettings
from src.repositories import DEFAULT_COLUMN_WIDTH, MIN_COLUMN_WIDTH
from src.utils.paths import get_base_dir, get_data_dir, get_exports_dir

# Project root (exe dir when frozen, repo root in dev)
PROJECT_ROOT = get_base_dir()

# Data directory: portable (next to exe) with %APPDATA% fallback
DATA_DIR = get_data_dir()
EXPORTS_DIR = get_exports_dir()

SETTINGS_FILE = DATA_DIR / "settings.json"

# SKU composition defaults (can be overridden via settings.json)
DEFAULT_DELIMITER = "-"
DEFAULT_PREFIX = ""
DEFAULT_SUFFIX = ""

# Edit history
MAX_HISTORY_DEPTH = 100

logger = logging.getLogger(__name__)


# ============================================================
# SKU Settings Management
# ============================================================

def _load_settings_file(path: Path) -> dict:
    if path.exists():
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
                if isinstance(data, dict):
                    return data
        except (json.JSONDecodeError, IOError) as e:
            logger.warning(f"Cannot read {path.name}, using defaults: {e}")
    return {}


def get_sku_settings(path: Optional[Path] = None) -> SkuSettings:
    """
    Get SKU formatting settings from the "sku" section of settings.json.

    Missing file, corrupt JSON or missing keys fall back to the defaults.
    """
    section = _load_settings_file(path or SETTINGS_FILE).get('sku', {})
    if not isinstance(section, dict):
        section = {}

    return SkuSettings(
        delimiter=str(section.get('delimiter', DEFAULT_DELIMITER)),
        prefix=str(section.get('prefix', DEFAULT_PREFIX)),
        suffix=str(section.get('suffix', DEFAULT_SUFFIX)),
    )


def set_sku_settings(settings: SkuSettings, path: Optional[Path] = None) -> bool:
    """
    Save SKU formatting settings into settings.json.

    Other keys already in the file are preserved.

    Returns:
        True if successful, False otherwise
    """
    path = path or SETTINGS_FILE
    data = _load_settings_file(path)

    section = data.get('sku')
    if not isinstance(section, dict):
        section = {}
    section.update({
        'delimiter': settings.delimiter,
        'prefix': settings.prefix,
        'suffix': settings.suffix,
    })
    data['sku'] = section

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2)
        return True
    except IOError as e:
        logger.error(f"Cannot write SKU settings to {path}: {e}")
        return False
