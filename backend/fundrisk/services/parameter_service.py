"""Parameter management service.

Facade for parameter loading and status.
"""
from __future__ import annotations

import logging
from typing import Any

from fundrisk.parameters.registry import ParameterRegistry

logger = logging.getLogger(__name__)


def initialize_parameters(parameters_file: str | None = None) -> None:
    """Load parameter tables at startup."""
    registry = ParameterRegistry.get()
    registry.load(parameters_file)
    logger.info("Parameters initialized — version: %s", registry.parameters.version)


def get_parameter_status() -> dict[str, Any]:
    """Return current parameter registry status for API consumption."""
    return ParameterRegistry.get().get_status()
