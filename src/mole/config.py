"""Configuration system with environment overrides."""

import json
import os
import sys
from pathlib import Path
from typing import Any, TextIO

# Module-level cache for singleton pattern
_config_cache: "Config | None" = None

ENV_PREFIX = "MO_"
COLOR_MODES = ("auto", "always", "never")
CHECKBOX_STYLES = ("circle", "square", "none")
BOOL_WORDS = ("true", "false", "1", "0", "yes", "no")


def clear_config_cache() -> None:
    """Clear the config cache. Useful for testing or config reload."""
    global _config_cache
    _config_cache = None


def get_default_config_dir() -> Path:
    """Get default config directory, respecting MOLE_CONFIG_DIR env var.

    This is the single source of truth for config directory resolution.
    """
    config_dir = os.environ.get("MOLE_CONFIG_DIR")
    if config_dir:
        return Path(config_dir)
    return Path.home() / ".config" / "mole"


class ConfigMeta:
    """Schema definition - separate from runtime state."""

    TOGGLES: dict[str, str] = {
        "debug": "Write debug log lines to stderr",
        "dry_run": "Ask analysis binaries to preview without changing anything",
        "alt_screen": "Draw menus on the alternate screen buffer",
    }

    SETTINGS: dict[str, str] = {
        "timeout": "Timeout in seconds passed to analysis binaries (default: 300)",
        "color": "Color output (auto|always|never)",
        "bin_dir": "Directory holding analyze-go/status-go (empty = bundled bin/)",
        "checkbox_style": "Menu checkbox style (circle|square|none)",
    }


class Config:
    """Runtime configuration with env override support."""

    DEFAULTS: dict[str, Any] = {
        # Toggles
        "debug": False,
        "dry_run": False,
        "alt_screen": True,
        # Settings
        "timeout": 300,
        "color": "auto",
        "bin_dir": "",  # Empty = <package>/bin
        "checkbox_style": "circle",
    }

    def __init__(self, config_dir: Path | None = None):
        self._config_dir = config_dir or get_default_config_dir()
        self._config_file = self._config_dir / "config.json"
        self._data: dict[str, Any] = {}

    @property
    def config_dir(self) -> Path:
        return self._config_dir

    @classmethod
    def load(cls, config_dir: Path | None = None) -> "Config":
        """Factory method - explicit loading with caching."""
        global _config_cache

        # Return cached instance if available and no custom dir specified
        if _config_cache is not None and config_dir is None:
            return _config_cache

        config = cls(config_dir)
        config._load_from_file()
        config._apply_env_overrides()

        # Cache if using default directory
        if config_dir is None:
            _config_cache = config

        return config

    def __getattr__(self, name: str) -> Any:
        """Access config values as attributes."""
        if name.startswith("_"):
            raise AttributeError(name)
        if name in self._data:
            return self._data[name]
        if name in self.DEFAULTS:
            return self.DEFAULTS[name]
        raise AttributeError(f"Config has no attribute '{name}'")

    def get_toggles(self) -> list[tuple[str, str, bool]]:
        """Return (attr, description, enabled) for display."""
        return [
            (name, desc, bool(getattr(self, name))) for name, desc in ConfigMeta.TOGGLES.items()
        ]

    def get_settings(self) -> list[tuple[str, str, Any]]:
        """Return (attr, description, value) for display."""
        return [(name, desc, getattr(self, name)) for name, desc in ConfigMeta.SETTINGS.items()]

    def color_mode(self, stream: TextIO | None = None) -> str:
        """Resolve the color setting for a stream.

        An explicit 'always' or 'never' wins. Anything else behaves like 'auto':
        'auto' on a TTY, 'never' otherwise.
        """
        mode = str(self.color).lower()
        if mode in ("always", "never"):
            return mode
        return "auto" if _isatty(stream) else "never"

    def color_enabled(self, stream: TextIO | None = None) -> bool:
        return self.color_mode(stream) != "never"

    def set(self, key: str, value: Any) -> None:
        """Set value and persist.

        Only file values are written back; active MO_* overrides stay out of the file.
        """
        if key not in self.DEFAULTS:
            raise KeyError(key)
        stored = Config(self._config_dir)
        stored._load_from_file()
        stored._data[key] = value
        stored._save()
        self._data[key] = value

    def parse_value(self, key: str, raw: str) -> Any:
        """Convert a command-line string to the type of key's default.

        Raises KeyError for unknown keys, ValueError for values that do not fit.
        """
        if key not in self.DEFAULTS:
            raise KeyError(key)
        target_type = type(self.DEFAULTS[key])
        if target_type is bool and raw.lower() not in BOOL_WORDS:
            raise ValueError(f"expected one of {'|'.join(BOOL_WORDS)}")
        value = self._coerce(raw, target_type)
        choices = {"color": COLOR_MODES, "checkbox_style": CHECKBOX_STYLES}.get(key)
        if choices and str(value).lower() not in choices:
            raise ValueError(f"expected one of {'|'.join(choices)}")
        return str(value).lower() if choices else value

    def _load_from_file(self) -> None:
        if self._config_file.exists():
            try:
                content = self._config_file.read_text()
                if content.strip():
                    self._data = json.loads(content)
            except json.JSONDecodeError:
                # Corrupted config - use defaults, will be fixed on next save
                self._data = {}

    def _save(self) -> None:
        self._config_dir.mkdir(parents=True, exist_ok=True)
        self._config_file.write_text(json.dumps(self._data, indent=2))

    def _apply_env_overrides(self) -> None:
        """Apply MO_* env vars (highest priority)."""
        for key, default in self.DEFAULTS.items():
            env_key = f"{ENV_PREFIX}{key.upper()}"
            if env_key in os.environ:
                try:
                    self._data[key] = self._coerce(os.environ[env_key], type(default))
                except ValueError:
                    # Unparseable override - keep file/default value
                    continue

    @staticmethod
    def _coerce(value: str, target_type: type) -> Any:
        """Coerce string env value to target type."""
        if target_type is bool:
            return value.lower() in ("true", "1", "yes")
        if target_type is int:
            return int(value)
        return value


def _isatty(stream: TextIO | None) -> bool:
    if stream is None:
        stream = sys.stdout
    try:
        return stream.isatty()
    except (AttributeError, ValueError):
        return False
