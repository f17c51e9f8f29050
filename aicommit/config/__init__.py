"""Configuration - .aicommitrc JSON files in the working directory or home."""

import json
import os
import sys
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Optional

CONFIG_FILENAME = ".aicommitrc"

VALID_PROVIDERS = {"auto", "claude", "ollama"}
VALID_STYLES = {"simple", "conventional", "detailed"}

POSITIVE_INT_FIELDS = ("max_subject_length", "timeout")
BOOL_FIELDS = ("include_body", "track_deleted_files", "clue_during_edit")


@dataclass
class Config:
    provider: str = "auto"
    model: Optional[str] = None
    api_key: Optional[str] = None
    host: Optional[str] = None  # Ollama server, falls back to OLLAMA_HOST
    timeout: int = 300
    style: str = "conventional"
    include_body: bool = True
    max_subject_length: int = 72
    editor: Optional[str] = None
    track_deleted_files: bool = True
    clue_during_edit: bool = False

    def to_dict(self) -> dict:
        return {k: v for k, v in asdict(self).items() if v is not None}

    def validate(self) -> list[str]:
        """Reset invalid values to their defaults and describe each reset."""
        defaults = Config()
        problems = []

        def reset(name, shown_default):
            problems.append(f"Invalid {name} '{getattr(self, name)}', using {shown_default}")
            setattr(self, name, getattr(defaults, name))

        if self.provider not in VALID_PROVIDERS:
            reset("provider", f"'{defaults.provider}'")
        if self.style not in VALID_STYLES:
            reset("style", f"'{defaults.style}'")
        for name in POSITIVE_INT_FIELDS:
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                reset(name, getattr(defaults, name))
        for name in BOOL_FIELDS:
            if not isinstance(getattr(self, name), bool):
                reset(name, str(getattr(defaults, name)).lower())

        return problems

    def resolved_api_key(self) -> Optional[str]:
        """Stored key first, then ANTHROPIC_API_KEY."""
        return self.api_key or os.environ.get("ANTHROPIC_API_KEY")

    @classmethod
    def from_dict(cls, data: dict) -> 'Config':
        known = {f.name for f in fields(cls)}
        config = cls(**{k: v for k, v in data.items() if k in known})
        for problem in config.validate():
            print(f"Config warning: {problem}", file=sys.stderr)
        return config


class ConfigManager:
    """Finds, loads and saves the config file. The first file found wins."""

    CONFIG_FILENAME = CONFIG_FILENAME

    def __init__(self):
        self._config: Optional[Config] = None
        self._config_path: Optional[Path] = None

    def search_paths(self) -> list[Path]:
        return [Path.cwd() / self.CONFIG_FILENAME, Path.home() / self.CONFIG_FILENAME]

    def load(self) -> Config:
        if self._config is None:
            self._config = Config()
            for path in self.search_paths():
                if path.exists():
                    self._config = self._read(path)
                    self._config_path = path
                    break
        return self._config

    def _read(self, path: Path) -> Config:
        try:
            data = json.loads(path.read_text(encoding='utf-8'))
            if not isinstance(data, dict):
                raise ValueError("expected a JSON object")
        except (ValueError, OSError) as e:
            print(f"Warning: Could not load {path}: {e}", file=sys.stderr)
            return Config()
        return Config.from_dict(data)

    def save(self, config: Config, global_config: bool = True) -> Path:
        base = Path.home() if global_config else Path.cwd()
        path = base / self.CONFIG_FILENAME
        path.write_text(json.dumps(config.to_dict(), indent=2), encoding='utf-8')
        if config.api_key:
            # Holds a credential
            os.chmod(path, 0o600)
        self._config = config
        self._config_path = path
        return path

    def get_config_path(self) -> Optional[Path]:
        return self._config_path


_manager = ConfigManager()


def load_config() -> Config:
    return _manager.load()


def save_config(config: Config, global_config: bool = True) -> Path:
    return _manager.save(config, global_config)


def get_config_path() -> Optional[Path]:
    return _manager.get_config_path()


__all__ = [
    "Config",
    "ConfigManager",
    "CONFIG_FILENAME",
    "load_config",
    "save_config",
    "get_config_path",
    "VALID_PROVIDERS",
    "VALID_STYLES",
]
