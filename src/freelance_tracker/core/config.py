"""Configuration management for Freelance Tracker."""

import copy
from pathlib import Path
from typing import Any, Optional

import yaml  # type: ignore[import-untyped]
from jsonschema import ValidationError as SchemaValidationError  # type: ignore[import-untyped]
from jsonschema import validate  # type: ignore[import-untyped]


class ConfigManager:
    """Manage application configuration."""

    DEFAULT_CONFIG = {
        "version": "1.0",
        "general": {
            "data_dir": "~/.freelance-tracker/data",
            "owner_id": "local-user",
            "currency": "VND",
            "date_format": "%d/%m/%Y",
        },
        "timer": {
            "tick_seconds": 1,
            "stamp_entry_at": "start",
        },
        "deadlines": {
            "interval_seconds": 3600,
            "window_hours": 24,
            "deduplicate": False,
        },
        "notifications": {
            "enabled": True,
            "backend": "auto",
        },
        "dashboard": {
            "default_range": "month",
            "top_projects": 5,
        },
        "export": {
            "directory": ".",
        },
        "api": {
            "host": "localhost",
            "port": 8000,
            "cors": {
                "enabled": True,
                "origins": ["http://localhost:3000", "http://localhost:5173"],
            },
            "advanced": {
                "reload": False,
                "log_level": "info",
                "access_log": True,
            },
        },
        "advanced": {
            "log_level": "WARNING",
        },
    }

    CONFIG_SCHEMA = {
        "type": "object",
        "properties": {
            "version": {"type": "string"},
            "general": {
                "type": "object",
                "properties": {
                    "data_dir": {"type": "string"},
                    "owner_id": {"type": "string", "minLength": 1},
                    "currency": {"type": "string"},
                    "date_format": {"type": "string"},
                },
            },
            "timer": {
                "type": "object",
                "properties": {
                    "tick_seconds": {"type": "number", "exclusiveMinimum": 0, "maximum": 60},
                    "stamp_entry_at": {"type": "string", "enum": ["start", "stop"]},
                },
            },
            "deadlines": {
                "type": "object",
                "properties": {
                    "interval_seconds": {"type": "integer", "minimum": 1},
                    "window_hours": {"type": "integer", "minimum": 1, "maximum": 720},
                    "deduplicate": {"type": "boolean"},
                },
            },
            "notifications": {
                "type": "object",
                "properties": {
                    "enabled": {"type": "boolean"},
                    "backend": {"type": "string"},
                },
            },
            "dashboard": {
                "type": "object",
                "properties": {
                    "default_range": {"type": "string", "enum": ["week", "month", "quarter"]},
                    "top_projects": {"type": "integer", "minimum": 1, "maximum": 100},
                },
            },
            "export": {
                "type": "object",
                "properties": {
                    "directory": {"type": "string"},
                },
            },
            "api": {
                "type": "object",
                "properties": {
                    "host": {"type": "string"},
                    "port": {"type": "integer", "minimum": 1, "maximum": 65535},
                    "cors": {
                        "type": "object",
                        "properties": {
                            "enabled": {"type": "boolean"},
                            "origins": {
                                "type": "array",
                                "items": {"type": "string"},
                            },
                        },
                    },
                    "advanced": {
                        "type": "object",
                        "properties": {
                            "reload": {"type": "boolean"},
                            "log_level": {"type": "string"},
                            "access_log": {"type": "boolean"},
                        },
                    },
                },
            },
            "advanced": {
                "type": "object",
                "properties": {
                    "log_level": {
                        "type": "string",
                        "enum": ["DEBUG", "INFO", "WARNING", "ERROR"],
                    },
                },
            },
        },
        "required": ["version"],
    }

    def __init__(self, config_path: Optional[Path] = None):
        """Initialize configuration manager.

        Args:
            config_path: Path to config file. Defaults to ~/.freelance-tracker/config.yml
        """
        if config_path is None:
            config_path = Path.home() / ".freelance-tracker" / "config.yml"
        self.config_path = config_path
        self._config: dict[str, Any] = {}
        self._load_or_create()

    def _load_or_create(self) -> None:
        """Load existing config or create default."""
        if self.config_path.exists():
            with open(self.config_path, encoding="utf-8") as f:
                loaded_config = yaml.safe_load(f) or {}
            # Merge with defaults to ensure all keys exist
            self._config = self._merge_with_defaults(loaded_config)
            try:
                self.validate()
            except ValueError as e:
                # Back up the invalid file and fall back to defaults
                backup_path = self.config_path.with_suffix(".yml.backup")
                self.config_path.rename(backup_path)
                self._config = copy.deepcopy(self.DEFAULT_CONFIG)
                self.save()
                raise ValueError(
                    f"Config validation failed, backed up to {backup_path}. "
                    f"Using defaults. Error: {e}"
                )
        else:
            self._config = copy.deepcopy(self.DEFAULT_CONFIG)
            self.save()

    def _merge_with_defaults(self, config: dict[str, Any]) -> dict[str, Any]:
        """Merge config with defaults to ensure all keys exist."""
        result = copy.deepcopy(self.DEFAULT_CONFIG)
        self._deep_merge(result, config)
        return result

    def _deep_merge(self, base: dict[str, Any], override: dict[str, Any]) -> None:
        """Deep merge override into base dictionary (in-place)."""
        for key, value in override.items():
            if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                self._deep_merge(base[key], value)
            else:
                base[key] = value

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value using dot notation.

        Args:
            key: Configuration key in dot notation (e.g., 'timer.stamp_entry_at')
            default: Default value if key not found

        Returns:
            Configuration value or default

        Example:
            >>> config.get('deadlines.window_hours')
            24
            >>> config.get('nonexistent.key', 'default')
            'default'
        """
        keys = key.split(".")
        value: Any = self._config
        for k in keys:
            if isinstance(value, dict):
                value = value.get(k)
            else:
                return default
            if value is None:
                return default
        return value

    def set(self, key: str, value: Any) -> None:
        """Set configuration value using dot notation.

        Args:
            key: Configuration key in dot notation
            value: Value to set

        Raises:
            ValueError: If configuration is invalid after setting. The previous
                configuration is kept in that case.
        """
        previous = copy.deepcopy(self._config)
        keys = key.split(".")
        config = self._config
        for k in keys[:-1]:
            if k not in config or not isinstance(config[k], dict):
                config[k] = {}
            config = config[k]
        config[keys[-1]] = value
        try:
            self.validate()
        except ValueError:
            self._config = previous
            raise
        self.save()

    def validate(self) -> bool:
        """Validate configuration against schema.

        Returns:
            True if valid

        Raises:
            ValueError: If configuration is invalid
        """
        try:
            validate(instance=self._config, schema=self.CONFIG_SCHEMA)
            return True
        except SchemaValidationError as e:
            raise ValueError(f"Invalid configuration: {e.message}")

    def save(self) -> None:
        """Save configuration to file."""
        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.config_path, "w", encoding="utf-8") as f:
            yaml.dump(
                self._config, f, default_flow_style=False, sort_keys=False, allow_unicode=True
            )

    def reset(self) -> None:
        """Reset to default configuration."""
        self._config = copy.deepcopy(self.DEFAULT_CONFIG)
        self.save()

    def to_dict(self) -> dict[str, Any]:
        """Get full configuration as dictionary."""
        return copy.deepcopy(self._config)

    def get_all_keys(self, prefix: str = "") -> list[str]:
        """Get all configuration keys in dot notation.

        Args:
            prefix: Prefix for recursive traversal (internal use)

        Returns:
            List of all configuration keys
        """
        keys = []
        config = self._config if not prefix else self.get(prefix, {})

        if isinstance(config, dict):
            for key, value in config.items():
                full_key = f"{prefix}.{key}" if prefix else key
                if isinstance(value, dict):
                    keys.extend(self.get_all_keys(full_key))
                else:
                    keys.append(full_key)
        return keys

    @property
    def data_dir(self) -> Path:
        """Data directory with the user's home expanded."""
        return Path(self.get("general.data_dir", "~/.freelance-tracker/data")).expanduser()
