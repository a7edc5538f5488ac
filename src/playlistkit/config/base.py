"""Client configuration types."""

# Standard library imports
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Optional

ENV_PREFIX = "PLAYLISTKIT_"
TRUE_VALUES = ("true", "1", "yes", "on")


@dataclass
class ClientConfig:
    """Settings for the API client, the search controller and the CLI."""

    # Service endpoint
    base_url: str = field(default="http://127.0.0.1:5000")
    token: Optional[str] = field(default=None)
    request_timeout: float = field(default=10.0)

    # Search behaviour
    debounce_ms: int = field(default=220)

    # Log settings
    log_dir: Optional[Path] = field(default=None)
    verbose: bool = field(default=False)
    debug: bool = field(default=False)

    def __post_init__(self):
        """Apply environment overrides, then validate."""
        self._load_from_env()
        self._validate()

    @property
    def debounce_seconds(self) -> float:
        return self.debounce_ms / 1000.0

    def _load_from_env(self) -> None:
        """Load configuration from PLAYLISTKIT_* environment variables."""
        for config_field in fields(self):
            env_key = f"{ENV_PREFIX}{config_field.name.upper()}"
            env_value = os.getenv(env_key)
            if env_value is None:
                continue

            env_value = env_value.split("#")[0].strip()
            try:
                setattr(self, config_field.name, self._coerce(config_field.name, env_value))
            except ValueError as e:
                raise ValueError(
                    f"Invalid value for {env_key}: {env_value} - {str(e)}"
                ) from e

    def _coerce(self, name: str, raw: str):
        current = getattr(self, name)
        if name in ("verbose", "debug"):
            return raw.lower() in TRUE_VALUES
        if name == "log_dir":
            return Path(os.path.expanduser(raw)) if raw else None
        if name == "token":
            return raw or None
        if isinstance(current, bool):
            return raw.lower() in TRUE_VALUES
        if isinstance(current, int):
            return int(raw)
        if isinstance(current, float):
            return float(raw)
        return raw

    def _validate(self) -> None:
        if self.debounce_ms < 0:
            raise ValueError("debounce_ms must be >= 0")
        if self.request_timeout <= 0:
            raise ValueError("request_timeout must be > 0")
        self.base_url = self.base_url.rstrip("/")
