"""
Configuration loading for the league rating tools.
"""

import json
import os
import logging
from typing import Dict, Optional

logger = logging.getLogger(__name__)

DEFAULT_CONFIG = {
    "database_path": "league.db",
    "tau": 0.5,                       # Glicko-2 system constant
    "convergence_tolerance": 0.000001,
    "max_iterations": 100,            # Volatility solver cap
    "max_deviation": 350.0,           # RD ceiling for inactive players
    "csv_delimiter": ",",
    "csv_has_header": False,
    "request_timeout": 30,            # Seconds, for match files loaded by URL
}

CONFIG_FILE = "league_config.json"


def load_config(config_path: Optional[str] = None) -> Dict:
    """
    Load configuration from file, merged over DEFAULT_CONFIG.

    A missing default config file means defaults; an explicitly named file
    that is missing or unreadable is an error.
    """
    config = dict(DEFAULT_CONFIG)
    path = config_path or CONFIG_FILE

    if not os.path.exists(path):
        if config_path:
            raise FileNotFoundError(f"Config file not found: {config_path}")
        return config

    with open(path, 'r', encoding='utf-8') as f:
        file_config = json.load(f)
    if not isinstance(file_config, dict):
        raise ValueError(f"Config file {path} must contain a JSON object")

    unknown = set(file_config) - set(DEFAULT_CONFIG)
    if unknown:
        logger.warning(f"Ignoring unknown config keys in {path}: {sorted(unknown)}")
    config.update({k: v for k, v in file_config.items() if k in DEFAULT_CONFIG})
    logger.debug(f"Loaded config from {path}")
    return config
