"""Calculator configuration loader."""

from __future__ import annotations

import logging
from dataclasses import fields, replace
from pathlib import Path
from typing import Any

import yaml

from pnl_lab.backend.settings import CalculatorSettings, get_settings

logger = logging.getLogger(__name__)

_PATH_FIELDS = {"project_root", "config_root", "data_root"}


class CalculatorConfigLoader:
    """Loads YAML configurations from the calculator config directory."""

    def __init__(self, base_path: str | Path | None = None) -> None:
        settings = get_settings()
        self.base_path: Path = Path(base_path) if base_path else settings.config_root

    def load_config(self, name: str) -> dict[str, Any]:
        """Load a YAML config by name without extension."""

        path = self.base_path / f"{name}.yaml"
        if not path.exists():
            raise FileNotFoundError(f"Calculator config '{name}' not found at {path}")

        try:
            with path.open("r", encoding="utf-8") as handle:
                data = yaml.safe_load(handle) or {}
        except yaml.YAMLError as exc:
            message = f"Invalid YAML in calculator config '{name}': {exc}"
            logger.error(message)
            raise ValueError(message) from exc

        if not isinstance(data, dict):
            raise ValueError(f"Calculator config '{name}' must be a mapping, got {type(data).__name__}")

        logger.debug("Calculator config loaded | name=%s path=%s", name, path)
        return data

    def list_configs(self) -> list[str]:
        """Return all available config names (without extension)."""

        if not self.base_path.exists():
            return []

        return sorted([config.stem for config in self.base_path.glob("*.yaml")])

    def apply_overrides(self, settings: CalculatorSettings, name: str) -> CalculatorSettings:
        """Return a copy of ``settings`` with the keys of config ``name`` applied.

        Unknown keys raise ``ValueError`` so typos do not silently fall back to defaults.
        """

        data = self.load_config(name)
        known = {f.name for f in fields(settings)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown calculator settings in '{name}': {unknown}")

        overrides = {key: Path(value) if key in _PATH_FIELDS else value for key, value in data.items()}
        return replace(settings, **overrides)


def load_settings(name: str = "default", base_path: str | Path | None = None) -> CalculatorSettings:
    """Settings with the named YAML overrides applied when that config exists."""

    settings = get_settings()
    loader = CalculatorConfigLoader(base_path=base_path)
    if name not in loader.list_configs():
        return settings
    return loader.apply_overrides(settings, name)


__all__ = ["CalculatorConfigLoader", "load_settings"]
