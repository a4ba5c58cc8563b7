"""
Configuration management for the Fabula Ultima importer.

Handles storage and lookup of the rulebook PDF location.
"""

import json
import logging
import os
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

PDF_ENV_VAR = "FABULA_PDF"


def get_config_dir() -> Path:
    """Get the configuration directory, creating it if needed."""
    # Use XDG_CONFIG_HOME if set, otherwise ~/.config
    config_home = os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config")
    config_dir = Path(config_home) / "fabula-import"
    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir


def get_config_path() -> Path:
    """Get the path to the config file."""
    return get_config_dir() / "config.json"


def load_config() -> dict:
    """Load configuration from disk."""
    config_path = get_config_path()
    if config_path.exists():
        try:
            with open(config_path) as f:
                return json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            logger.warning("Ignoring unreadable config %s: %s", config_path, e)
            return {}
    return {}


def save_config(config: dict) -> None:
    """Save configuration to disk."""
    config_path = get_config_path()
    with open(config_path, "w") as f:
        json.dump(config, f, indent=2)


def get_pdf_path() -> Optional[str]:
    """
    Get the rulebook PDF path from the environment or config.

    Priority:
    1. FABULA_PDF environment variable
    2. Stored config file
    """
    env_path = os.environ.get(PDF_ENV_VAR)
    if env_path:
        return env_path

    config = load_config()
    return config.get("pdf_path")


def set_pdf_path(pdf_path: str) -> None:
    """Store the rulebook PDF path in config."""
    config = load_config()
    config["pdf_path"] = str(Path(pdf_path).expanduser().resolve())
    save_config(config)


def clear_pdf_path() -> None:
    """Remove the stored PDF path."""
    config = load_config()
    config.pop("pdf_path", None)
    save_config(config)
