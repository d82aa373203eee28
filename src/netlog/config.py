"""
Net Log Configuration Management
Handles persistent settings for the net log tools
"""

import json
import logging
import os
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Optional

from utils.paths import NetLogPaths

logger = logging.getLogger(__name__)

# Environment overrides
ENV_DB_PATH = "NETLOG_DB"
ENV_LOG_LEVEL = "NETLOG_LOG_LEVEL"


@dataclass
class NetLogConfig:
    """Net log settings"""

    db_path: str = ""  # Empty = default data dir
    log_level: str = "INFO"
    log_file: str = ""  # Empty = console only

    # Callsign directory
    lookup_enabled: bool = True
    lookup_timeout: float = 10.0
    lookup_cache: bool = True

    # Seconds to wait for queued writes on shutdown
    flush_timeout: float = 5.0

    def get_db_path(self) -> Path:
        env_path = os.environ.get(ENV_DB_PATH)
        if env_path:
            return Path(env_path).expanduser()
        if self.db_path:
            return Path(self.db_path).expanduser()
        return NetLogPaths.get_database_file()

    def get_log_level(self) -> int:
        level_name = os.environ.get(ENV_LOG_LEVEL) or self.log_level
        return getattr(logging, level_name.upper(), logging.INFO)

    @classmethod
    def get_config_path(cls) -> Path:
        """Get the configuration file path"""
        return NetLogPaths.get_config_file()

    @classmethod
    def load(cls, path: Optional[Path] = None) -> 'NetLogConfig':
        """Load configuration from file, falling back to defaults"""
        config_path = path or cls.get_config_path()

        if not config_path.exists():
            logger.info("No net log config found, using defaults")
            return cls()

        try:
            with open(config_path, 'r') as f:
                data = json.load(f)

            config = cls(**{k: v for k, v in data.items() if k in cls.__dataclass_fields__})
            logger.info(f"Loaded net log config from {config_path}")
            return config

        except (OSError, ValueError, TypeError) as e:
            logger.error(f"Failed to load net log config: {e}")
            return cls()

    def save(self, path: Optional[Path] = None) -> bool:
        """Save configuration to file"""
        config_path = path or self.get_config_path()

        try:
            config_path.parent.mkdir(parents=True, exist_ok=True)
            with open(config_path, 'w') as f:
                json.dump(asdict(self), f, indent=2)

            logger.info(f"Saved net log config to {config_path}")
            return True

        except OSError as e:
            logger.error(f"Failed to save net log config: {e}")
            return False
