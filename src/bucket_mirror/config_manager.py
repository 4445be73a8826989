"""User configuration file management."""

from pathlib import Path
from typing import Any, Dict, Optional

import yaml

CONFIG_DIR_NAME = ".bucket-mirror"
CONFIG_FILE_NAME = "config.yaml"


def get_config_path() -> Path:
    """Return the path of the user config file (~/.bucket-mirror/config.yaml)."""
    return Path.home() / CONFIG_DIR_NAME / CONFIG_FILE_NAME


def load_config(config_path: Path) -> Optional[Dict[str, Any]]:
    """
    Load configuration from a YAML file.
    
    Args:
        config_path: Path to the config file
        
    Returns:
        The parsed mapping, or None if the file doesn't exist or is empty
        
    Raises:
        yaml.YAMLError: If the file is not valid YAML
    """
    if not config_path.exists():
        return None
    
    with open(config_path, "r") as f:
        return yaml.safe_load(f)


def save_config(config_path: Path, config_data: Dict[str, Any]) -> None:
    """Save configuration to a YAML file, creating the parent directory if needed."""
    config_path.parent.mkdir(parents=True, exist_ok=True)
    
    with open(config_path, "w") as f:
        yaml.safe_dump(config_data, f, default_flow_style=False, sort_keys=False)
