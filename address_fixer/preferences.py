"""Saved configuration: one JSON record under a well-known storage key."""

import logging
from pathlib import Path

from pydantic import ValidationError

from .config import PREFERENCES_DIR, STORAGE_KEY
from .models import SavedConfig

logger = logging.getLogger(__name__)


def _config_path() -> Path:
    return PREFERENCES_DIR / f"{STORAGE_KEY}.json"


def load_config() -> SavedConfig | None:
    """Return the saved config, or ``None`` if absent or unreadable."""
    path = _config_path()
    if not path.exists():
        return None
    try:
        return SavedConfig.model_validate_json(path.read_text(encoding="utf-8"))
    except (OSError, ValidationError) as e:
        logger.warning("Ignoring unreadable saved config %s: %s", path, e)
        return None


def save_config(config: SavedConfig) -> None:
    PREFERENCES_DIR.mkdir(parents=True, exist_ok=True)
    _config_path().write_text(config.model_dump_json(), encoding="utf-8")
    logger.info("Saved config (%s mode)", config.mode)


def clear_config() -> None:
    _config_path().unlink(missing_ok=True)
