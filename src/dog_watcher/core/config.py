#!/usr/bin/env python3
"""
Configuration management for Dog Watcher
Loads the YAML config file, merges it over defaults and applies environment overrides
"""

import os
import tempfile
from typing import Dict, Any, Optional, List
from pathlib import Path
from dataclasses import dataclass, field

import yaml

from .errors import ConfigurationError

LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']

# environment variable -> dotted config key
ENV_OVERRIDES = {
    'LOG_LEVEL': 'core.log_level',
    'DATADOG_API_KEY': 'datadog.api_key',
    'DATADOG_APP_KEY': 'datadog.app_key',
}


def as_bool(value: Any) -> bool:
    """Interpret booleans stored either natively or as 'true'/'false' strings"""
    if isinstance(value, str):
        return value.strip().lower() in ('true', 'yes', '1', 'on')
    return bool(value)


class Config:
    """Configuration manager with YAML support, defaults and validation"""

    def __init__(self, config_dir: Optional[str] = None, environ: Optional[Dict[str, str]] = None):
        self.environ = os.environ if environ is None else environ
        self.config_dir = Path(
            config_dir or self.environ.get('DOG_WATCHER_CONFIG_DIR') or os.path.expanduser("~/.dog_watcher")
        ).expanduser()
        self.config_file = self.config_dir / "config.yaml"

        self._config: Dict[str, Any] = {}

        self.load_config()

    def get_default_config(self) -> Dict[str, Any]:
        """Get default configuration values"""
        return {
            'core': {
                'log_level': 'INFO',
                'log_file': str(self.config_dir / 'dog_watcher.log'),
            },
            'git': {
                'repo_url': '',
                'remote': 'origin',
                'branch': 'master',
                'executable': 'git',
                'author_name': '',
                'author_email': '',
            },
            'backup': {
                'commit_message': 'Automatic backup from {IP}',
                'send_event_on_noop': False,
                'lock_file': str(Path(tempfile.gettempdir()) / 'dog-watcher.lock'),
            },
            'datadog': {
                'api_key': '',
                'app_key': '',
                'api_url': 'https://api.datadoghq.com/api/v1',
                'timeout': 30,
                'event_tags': ['dog-watcher'],
            },
        }

    def load_config(self):
        """Load configuration from file, defaults and environment"""
        file_config: Dict[str, Any] = {}
        if self.config_file.exists():
            try:
                with open(self.config_file, 'r') as f:
                    file_config = yaml.safe_load(f) or {}
            except (OSError, yaml.YAMLError) as e:
                raise ConfigurationError(f"Failed to load config {self.config_file}: {e}") from e

            if not isinstance(file_config, dict):
                raise ConfigurationError(f"Config {self.config_file} must be a YAML mapping")

        self._config = self._merge_configs(self.get_default_config(), file_config)

        for env_name, key in ENV_OVERRIDES.items():
            value = self.environ.get(env_name)
            if value:
                self._set_nested_value(self._config, key.split('.'), value)

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value with dot notation support"""
        value = self._get_nested_value(self._config, key.split('.'))
        return value if value is not None else default

    def _get_nested_value(self, config_dict: Dict[str, Any], keys: list) -> Any:
        """Get nested configuration value"""
        current = config_dict
        for key in keys:
            if isinstance(current, dict) and key in current:
                current = current[key]
            else:
                return None
        return current

    def _set_nested_value(self, config_dict: Dict[str, Any], keys: list, value: Any):
        """Set nested configuration value"""
        current = config_dict
        for key in keys[:-1]:
            if key not in current or not isinstance(current[key], dict):
                current[key] = {}
            current = current[key]
        current[keys[-1]] = value

    def _merge_configs(self, default: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Recursively merge configuration dictionaries"""
        merged = default.copy()

        for key, value in override.items():
            if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
                merged[key] = self._merge_configs(merged[key], value)
            else:
                merged[key] = value

        return merged

    def validate_config(self) -> tuple[bool, list[str]]:
        """Validate current configuration"""
        errors = []

        log_level = str(self.get('core.log_level', 'INFO')).upper()
        if log_level not in LOG_LEVELS:
            errors.append(f"Invalid log level: {log_level}")

        if not self.get('git.repo_url'):
            errors.append("git.repo_url is required")

        if not self.get('datadog.api_key') or not self.get('datadog.app_key'):
            errors.append("datadog.api_key and datadog.app_key are required")

        timeout = self.get('datadog.timeout', 30)
        if not isinstance(timeout, (int, float)) or timeout <= 0:
            errors.append("datadog.timeout must be a positive number")

        return len(errors) == 0, errors


@dataclass(frozen=True)
class PipelineSettings:
    """Read-only view of the configuration consumed by a backup run"""
    repo_url: str
    commit_message: str
    send_event_on_noop: bool = False
    remote: str = 'origin'
    branch: str = 'master'
    event_tags: List[str] = field(default_factory=list)

    @classmethod
    def from_config(cls, config: Config) -> 'PipelineSettings':
        return cls(
            repo_url=config.get('git.repo_url', ''),
            commit_message=str(config.get('backup.commit_message', '')),
            send_event_on_noop=as_bool(config.get('backup.send_event_on_noop', False)),
            remote=config.get('git.remote', 'origin'),
            branch=config.get('git.branch', 'master'),
            event_tags=list(config.get('datadog.event_tags', [])),
        )
