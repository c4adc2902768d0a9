"""Configuration storage for termdrop."""

import json
from dataclasses import asdict, dataclass
from pathlib import Path

CONFIG_DIR = Path.home() / ".config" / "termdrop"
CONFIG_FILE = CONFIG_DIR / "config.json"


@dataclass
class Config:
    """Defaults used by the command-line front end."""

    viewport_size: int = 10
    debounce_ms: int = 300

    @property
    def debounce_seconds(self) -> float:
        return self.debounce_ms / 1000


def _positive_int(value, default: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        return default
    return value


def load_config() -> Config:
    """Load configuration from disk.

    Returns:
        Config object with loaded settings, or defaults if no config exists.
        Missing or invalid values fall back to their defaults.
    """
    if not CONFIG_FILE.exists():
        return Config()

    try:
        with open(CONFIG_FILE, "r") as f:
            data = json.load(f)
    except (json.JSONDecodeError, OSError):
        return Config()

    if not isinstance(data, dict):
        return Config()

    defaults = Config()
    return Config(
        viewport_size=_positive_int(data.get("viewport_size"), defaults.viewport_size),
        debounce_ms=_positive_int(data.get("debounce_ms"), defaults.debounce_ms),
    )


def save_config(config: Config) -> None:
    """Save configuration to disk.

    Args:
        config: Config object to save.
    """
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)

    with open(CONFIG_FILE, "w") as f:
        json.dump(asdict(config), f, indent=2)
