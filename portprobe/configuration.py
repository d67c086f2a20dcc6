# portprobe/configuration.py

"""
Configuration loader for portprobe.

Handles loading settings from portprobe.yaml. If the file doesn't exist,
it creates one with default values.
"""

import logging
import sys
import yaml
from typing import Dict, Any, Optional

# This dictionary holds the default structure and values for our config.
# It will be used to generate the initial portprobe.yaml.
DEFAULT_CONFIG: Dict[str, Any] = {
    'probe_timeout_seconds': 1,
    'max_workers': 512,
    'udp_payload': 'test',
    'export_directory': '.',
    # 0 derives the page size from the terminal height
    'page_size': 0,
    'show_all_by_default': False,
    'language': 'System',
    'log_level': 'WARNING',
}

_HEADER = (
    "# portprobe Configuration File\n"
    "# You can edit these settings. The scanner will use them on next launch.\n\n"
)

def get_config_path() -> str:
    """Returns the path to the config file."""
    return "portprobe.yaml"

def _write(config: Dict[str, Any], config_path: str):
    with open(config_path, 'w') as f:
        f.write(_HEADER)
        yaml.dump(config, f, sort_keys=False, default_flow_style=False, indent=2)

def save_config(config: Dict[str, Any], path: Optional[str] = None):
    """Saves the provided configuration dictionary to the config file."""
    config_path = path or get_config_path()
    try:
        _write(config, config_path)
    except IOError as e:
        logging.error(f"Could not write config file to '{config_path}': {e}")

def validate_config(config: Dict[str, Any]) -> Dict[str, Any]:
    """Rejects values the scanner cannot run with."""
    timeout = config.get('probe_timeout_seconds')
    if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
        raise ValueError(f"probe_timeout_seconds must be a positive number, got {timeout!r}")
    workers = config.get('max_workers')
    if isinstance(workers, bool) or not isinstance(workers, int) or workers < 1:
        raise ValueError(f"max_workers must be a positive integer, got {workers!r}")
    page_size = config.get('page_size')
    if isinstance(page_size, bool) or not isinstance(page_size, int) or page_size < 0:
        raise ValueError(f"page_size must be zero or a positive integer, got {page_size!r}")
    if not isinstance(config.get('udp_payload'), str):
        raise ValueError("udp_payload must be a string")
    return config

def load_or_create_config(path: Optional[str] = None) -> Dict[str, Any]:
    """
    Loads configuration from the config file.

    If the file doesn't exist, it creates it with default values.
    If the file is invalid, it reports the error and exits.
    """
    config_path = path or get_config_path()
    try:
        with open(config_path, 'r') as f:
            user_config = yaml.safe_load(f)

        # Merge user config with defaults to ensure all keys are present
        config = DEFAULT_CONFIG.copy()
        if isinstance(user_config, dict):
            config.update(user_config)
        return validate_config(config)

    except FileNotFoundError:
        logging.info(f"Configuration file not found. Creating '{config_path}' with default settings.")
        try:
            _write(DEFAULT_CONFIG, config_path)
        except IOError as e:
            # A read-only working directory should not stop a scan
            logging.warning(f"Could not write default config file to '{config_path}': {e}")
        return DEFAULT_CONFIG.copy()

    except yaml.YAMLError as e:
        print(f"FATAL: Error parsing '{config_path}': {e}", file=sys.stderr)
        sys.exit(1)

    except ValueError as e:
        print(f"FATAL: Invalid setting in '{config_path}': {e}", file=sys.stderr)
        sys.exit(1)
