"""Pydantic-based settings loaded from YAML with env-var overrides."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import field_validator
from pydantic_settings import BaseSettings

from kitpilot.exceptions import ConfigurationError
from kitpilot.models import SortKey

_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent


class AppSettings(BaseSettings):
    """Application configuration with YAML + env var support.

    Env vars are prefixed with ``KITPILOT_``.
    Example: ``KITPILOT_DATA_DIR=/srv/kitpilot``
    """

    model_config = {"env_prefix": "KITPILOT_"}

    # --- paths (relative ones resolve against data_dir) ---
    data_dir: str = "user_data"
    history_file: str = "Kits/applications.json"
    legacy_history_file: str = "Kits/applications.csv"
    profile_file: str = "profile.md"
    export_dir: str = "exports"

    # --- display ---
    default_sort: str = SortKey.TIME.value

    # --- logging ---
    log_level: str = "INFO"

    @field_validator("default_sort")
    @classmethod
    def _normalise_sort(cls, v: str) -> str:
        v = v.strip().lower()
        if v not in {k.value for k in SortKey}:
            raise ValueError(f"default_sort must be one of time, az, progress (got {v!r})")
        return v

    @field_validator("log_level")
    @classmethod
    def _normalise_level(cls, v: str) -> str:
        return v.strip().upper()

    # ---- resolved paths ----

    def _resolve(self, name: str) -> Path:
        path = Path(name)
        return path if path.is_absolute() else Path(self.data_dir) / path

    @property
    def history_path(self) -> Path:
        return self._resolve(self.history_file)

    @property
    def legacy_history_path(self) -> Path:
        return self._resolve(self.legacy_history_file)

    @property
    def profile_path(self) -> Path:
        return self._resolve(self.profile_file)

    @property
    def export_path(self) -> Path:
        return self._resolve(self.export_dir)

    # ---- factory ----

    @classmethod
    def from_yaml(cls, path: str | Path | None = None) -> "AppSettings":
        """Load settings from a YAML file, then overlay env vars.

        Env vars (``KITPILOT_*``) take priority over YAML values.
        """
        import os

        if path is None:
            path = _PROJECT_ROOT / "settings.yaml"
        path = Path(path)
        raw: dict[str, Any] = {}
        if path.exists():
            try:
                with open(path) as fh:
                    raw = yaml.safe_load(fh) or {}
            except yaml.YAMLError as exc:
                raise ConfigurationError(f"Invalid YAML in {path}: {exc}") from exc
            if not isinstance(raw, dict):
                raise ConfigurationError(f"{path} must contain a mapping.")

        # Let env vars override YAML: remove YAML keys that have an env override
        prefix = "KITPILOT_"
        for key in list(raw.keys()):
            env_key = f"{prefix}{key.upper()}"
            if env_key in os.environ:
                del raw[key]

        return cls(**raw)
