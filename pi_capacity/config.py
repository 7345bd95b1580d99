"""
Configuration for the PI Capacity Planner.

Loaded from config/config.yaml and overridden by environment variables.
"""

import os
from typing import Optional

import yaml

from .models import DEFAULT_MULTI_TEAM_ROLES


class Config:
    """Load configuration from config.yaml and environment."""

    def __init__(self, config_path: Optional[str] = None):
        self.config_path = config_path or os.getenv("PI_CAPACITY_CONFIG", "config/config.yaml")
        self.config = {}

        if os.path.exists(self.config_path):
            with open(self.config_path) as f:
                self.config = yaml.safe_load(f) or {}

        # Override with environment variables
        self._load_env()

    def _load_env(self):
        """Load configuration from environment variables."""
        env_mapping = {
            "PI_DATA_FILE": ("data", "file"),
            "LOG_LEVEL": ("logging", "level"),
            "MULTI_TEAM_ROLES": ("roles", "multi_team"),
        }

        for env_var, (section, key) in env_mapping.items():
            value = os.getenv(env_var)
            if value:
                if section not in self.config:
                    self.config[section] = {}
                if key == "multi_team":
                    value = [role.strip() for role in value.split(",") if role.strip()]
                self.config[section][key] = value

    def get(self, section: str, key: str, default=None):
        """Get configuration value."""
        return self.config.get(section, {}).get(key, default)

    def set(self, section: str, key: str, value):
        self.config.setdefault(section, {})[key] = value

    @property
    def data_file(self) -> str:
        return self.get("data", "file", "capacity-data.json")

    @property
    def log_level(self) -> str:
        return str(self.get("logging", "level", "INFO")).upper()

    @property
    def multi_team_roles(self) -> tuple[str, ...]:
        return tuple(self.get("roles", "multi_team", DEFAULT_MULTI_TEAM_ROLES))

    @property
    def default_iteration_weeks(self) -> int:
        return int(self.get("pi", "iteration_duration_weeks", 2))


config = Config()
