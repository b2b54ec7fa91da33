"""Environment-level configuration.

Isolates things that depend on the deployment (file locations, feature
flags, CORS) from game logic. Game preferences chosen by players
(cards per game, family deck) are persisted state, not configuration.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path

from .engine_core.state import DEFAULT_TURN_DURATION


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {value!r}") from None


@dataclass
class EnvironmentSettings:
    """Environment / deployment settings."""

    state_path: Path = field(default_factory=lambda: Path.home() / ".monikers" / "state.json")
    seed_dir: Path | None = None
    turn_duration: int = DEFAULT_TURN_DURATION
    custom_cards_enabled: bool = False
    log_level: str = "INFO"
    allowed_origins: list[str] = field(default_factory=lambda: ["*"])

    @classmethod
    def from_env(cls) -> "EnvironmentSettings":
        """Build settings from MONIKERS_* environment variables."""
        defaults = cls()
        state_path = os.getenv("MONIKERS_STATE_PATH")
        seed_dir = os.getenv("MONIKERS_SEED_DIR")
        turn_duration = _env_int("MONIKERS_TURN_DURATION", DEFAULT_TURN_DURATION)
        if turn_duration <= 0:
            raise ValueError("MONIKERS_TURN_DURATION must be positive")

        return cls(
            state_path=Path(state_path).expanduser() if state_path else defaults.state_path,
            seed_dir=Path(seed_dir).expanduser() if seed_dir else None,
            turn_duration=turn_duration,
            custom_cards_enabled=_env_bool("MONIKERS_CUSTOM_CARDS"),
            log_level=os.getenv("MONIKERS_LOG_LEVEL", "INFO").upper(),
            allowed_origins=os.getenv("ALLOWED_ORIGINS", "*").split(","),
        )
