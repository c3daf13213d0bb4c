"""
Application configuration management for Marksman.

Handles settings storage and the tunable analysis thresholds.
Settings are persisted to ~/.marksman/config.json (or $MARKSMAN_HOME).
"""

import json
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Optional

from marksman.utils import constants


@dataclass(frozen=True)
class Thresholds:
    """Calibration values used by the analysis functions.

    Defaults come from ``constants``; the ``thresholds`` section of the
    config file can override any of them by field name.
    """
    outlier_multiplier: float = constants.OUTLIER_MULTIPLIER
    confidence_medium_min_shots: int = constants.CONFIDENCE_MEDIUM_MIN_SHOTS
    confidence_high_min_shots: int = constants.CONFIDENCE_HIGH_MIN_SHOTS
    tight_group_max: float = constants.TIGHT_GROUP_MAX
    moderate_group_max: float = constants.MODERATE_GROUP_MAX
    centered_offset_max: float = constants.CENTERED_OFFSET_MAX
    slight_offset_max: float = constants.SLIGHT_OFFSET_MAX
    diagonal_ratio: float = constants.DIAGONAL_RATIO
    consistency_limits: tuple[float, ...] = constants.CONSISTENCY_LIMITS
    accuracy_limits: tuple[float, ...] = constants.ACCURACY_LIMITS
    extreme_spread_max: float = constants.EXTREME_SPREAD_MAX
    strong_bias_offset: float = constants.STRONG_BIAS_OFFSET
    trend_min_points: int = constants.TREND_MIN_POINTS
    trend_change_ratio: float = constants.TREND_CHANGE_RATIO
    pressure_widen_pct: float = constants.PRESSURE_WIDEN_PCT
    pressure_tighten_pct: float = constants.PRESSURE_TIGHTEN_PCT
    high_outlier_rate: float = constants.HIGH_OUTLIER_RATE

    def with_overrides(self, overrides: dict) -> "Thresholds":
        """Return a copy with known keys replaced; unknown keys are ignored."""
        known = {f.name for f in fields(self)}
        # JSON has no tuples; keep list values hashable
        return replace(self, **{k: tuple(v) if isinstance(v, list) else v
                                for k, v in overrides.items() if k in known})


DEFAULT_THRESHOLDS = Thresholds()


def _app_dir() -> Path:
    home = os.environ.get("MARKSMAN_HOME")
    return Path(home) if home else Path.home() / ".marksman"


class Config:
    """Manages application settings with JSON file persistence."""

    _defaults = {
        "anthropic_api_key": "",
        "thresholds": {},
    }

    _instance: Optional["Config"] = None
    _settings: dict

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._settings = {}
            cls._instance._load()
        return cls._instance

    @property
    def app_dir(self) -> Path:
        return _app_dir()

    @property
    def config_file(self) -> Path:
        return self.app_dir / "config.json"

    def _load(self):
        """Load settings from disk, merging with defaults."""
        self.app_dir.mkdir(parents=True, exist_ok=True)

        if self.config_file.exists():
            try:
                with open(self.config_file) as f:
                    saved = json.load(f)
                # Merge: defaults first, then saved values override
                self._settings = {**self._defaults, **saved}
            except (json.JSONDecodeError, IOError):
                self._settings = dict(self._defaults)
        else:
            self._settings = dict(self._defaults)

    def save(self):
        """Persist current settings to disk."""
        self.app_dir.mkdir(parents=True, exist_ok=True)
        with open(self.config_file, "w") as f:
            json.dump(self._settings, f, indent=2)

    def get(self, key: str, default=None):
        """Get a setting value."""
        return self._settings.get(key, default)

    def set(self, key: str, value):
        """Set a setting value and save."""
        self._settings[key] = value
        self.save()

    @classmethod
    def reset(cls):
        """Drop the cached instance so the next access reloads from disk."""
        cls._instance = None

    @classmethod
    def get_thresholds(cls) -> Thresholds:
        """Analysis thresholds with config-file overrides applied."""
        instance = cls()
        overrides = instance.get("thresholds") or {}
        return DEFAULT_THRESHOLDS.with_overrides(overrides)

    @classmethod
    def get_api_key(cls) -> str:
        """Get Anthropic API key from config or environment."""
        instance = cls()
        # Environment variable takes priority
        env_key = os.environ.get("ANTHROPIC_API_KEY", "")
        if env_key:
            return env_key
        return instance.get("anthropic_api_key", "")

    @classmethod
    def get_thumbnails_dir(cls) -> Path:
        """Get the directory for target thumbnails."""
        instance = cls()
        path = instance.app_dir / "thumbnails"
        path.mkdir(parents=True, exist_ok=True)
        return path

    @classmethod
    def get_db_path(cls) -> Path:
        """Get the SQLite database file path."""
        instance = cls()
        instance.app_dir.mkdir(parents=True, exist_ok=True)
        return instance.app_dir / "marksman.db"
