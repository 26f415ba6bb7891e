"""Parameter registry — builds the RiskParameters set once at startup.

Built-in defaults come from ``fundrisk.parameters.defaults``. A JSON file named
by ``PARAMETERS_FILE`` may override any subset of them; an unreadable or invalid
file is logged and the defaults are kept.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from fundrisk.config import settings
from fundrisk.models.parameters import RiskParameters

logger = logging.getLogger(__name__)


def _deep_merge(base: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class ParameterRegistry:
    """Singleton holding the active RiskParameters."""

    _instance: "ParameterRegistry | None" = None

    def __init__(self) -> None:
        self.parameters: RiskParameters = RiskParameters()
        self.override_errors: list[str] = []
        self._loaded = False
        self._source_path: Path | None = None

    @classmethod
    def get(cls) -> "ParameterRegistry":
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset singleton — mainly for testing."""
        cls._instance = None

    def load(self, parameters_file: str | Path | None = None) -> None:
        path_value = parameters_file if parameters_file is not None else settings.PARAMETERS_FILE
        self.parameters = RiskParameters()
        self.override_errors = []
        self._source_path = None

        if not path_value:
            logger.info("No parameter file configured — using built-in defaults v%s",
                        self.parameters.version)
            self._loaded = True
            return

        self._source_path = Path(path_value).resolve()
        logger.info("Loading risk parameters from %s", self._source_path)

        if not self._source_path.is_file():
            logger.warning("Parameter file %s not found — using defaults", self._source_path)
            self.override_errors.append("file not found")
            self._loaded = True
            return

        try:
            overrides = json.loads(self._source_path.read_text())
            if not isinstance(overrides, dict):
                raise ValueError("parameter file must contain a JSON object")
            merged = _deep_merge(RiskParameters().model_dump(), overrides)
            merged["source"] = str(self._source_path)
            self.parameters = RiskParameters.model_validate(merged)
            logger.info("Loaded risk parameters v%s", self.parameters.version)
        except (ValueError, ValidationError) as e:
            # json.JSONDecodeError is a ValueError
            logger.warning("Invalid parameter file %s: %s — using defaults", self._source_path, e)
            self.override_errors.append(str(e))
            self.parameters = RiskParameters()

        self._loaded = True

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    @property
    def is_loaded(self) -> bool:
        return self._loaded

    def get_status(self) -> dict[str, Any]:
        if not self._loaded:
            return {"status": "not_loaded"}
        return {
            "status": "loaded",
            "version": self.parameters.version,
            "source": self.parameters.source,
            "override_errors": list(self.override_errors),
        }


def get_parameters() -> RiskParameters:
    """Active parameters; falls back to built-in defaults before startup load."""
    return ParameterRegistry.get().parameters
