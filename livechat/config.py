"""Configuration management for livechat via ~/.config/livechat.yaml."""

from pathlib import Path

import yaml

CONFIG_PATH = Path.home() / ".config" / "livechat.yaml"

# Terminal rows; the list is measured in text rows, not pixels
DEFAULT_SCROLL_THRESHOLD = 4

_config: dict = {}
_loaded: bool = False


def _load_config() -> dict:
    """Load config from disk, creating with defaults if missing."""
    global _config, _loaded
    if _loaded:
        return _config

    if CONFIG_PATH.exists():
        with open(CONFIG_PATH) as f:
            _config = yaml.safe_load(f) or {}
    else:
        _config = {}

    # Ensure scroll section with defaults
    created = False
    scroll = _config["scroll"] = _config.get("scroll") or {}
    if "threshold" not in scroll:
        scroll["threshold"] = DEFAULT_SCROLL_THRESHOLD
        created = True
    if "smooth" not in scroll:
        scroll["smooth"] = True
        created = True
    _config["identity"] = _config.get("identity") or {}
    if created:
        _save_config()

    _loaded = True
    return _config


def _save_config() -> None:
    """Write config to disk."""
    if not _config:
        return
    CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
    with open(CONFIG_PATH, "w") as f:
        yaml.dump(_config, f, default_flow_style=False)


def reset() -> None:
    """Forget the cached config so the next read goes back to disk."""
    global _config, _loaded
    _config = {}
    _loaded = False


def get_scroll_threshold() -> float:
    """Rows from the bottom within which the list keeps following new messages."""
    value = _load_config()["scroll"]["threshold"]
    if not isinstance(value, (int, float)) or value < 0:
        return DEFAULT_SCROLL_THRESHOLD
    return value


def get_smooth_scroll() -> bool:
    """Check if scrolling to new messages is animated."""
    return bool(_load_config()["scroll"]["smooth"])


def get_last_email() -> str:
    """Email used for the last successful sign-in, or empty string."""
    return _load_config()["identity"].get("last_email") or ""


def set_last_email(email: str) -> None:
    """Remember the email to pre-fill on the login form."""
    _load_config()["identity"]["last_email"] = email
    _save_config()
