################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""High-level configuration wrapper for IMU calibration."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from .calibration_params import CalibrationParams
from .calibration_params import CalibrationParamsError


ACCEL_METHODS: frozenset[str] = frozenset({"min_max", "six_position"})
SAVE_FORMATS: frozenset[str] = frozenset({"yaml", "json"})


class CalibrationConfigError(Exception):
    """Raised when calibration configuration validation fails."""


@dataclass(frozen=True)
class CalibrationConfig:
    """Convenience wrapper around calibration parameters."""

    params: CalibrationParams

    def __init__(self, params: CalibrationParams | None = None) -> None:
        """Initialize the configuration wrapper and validate."""
        object.__setattr__(
            self, "params", CalibrationParams.defaults() if params is None else params
        )
        self.validate()

    def validate(self) -> None:
        """Validate parameter invariants and cross-namespace policies."""
        try:
            self.params.validate()
        except CalibrationParamsError as exc:
            raise CalibrationConfigError(str(exc)) from exc

        if self.params.accel.method not in ACCEL_METHODS:
            raise CalibrationConfigError(
                "accel.method must be 'min_max' or 'six_position'"
            )

        if self.params.save.format not in SAVE_FORMATS:
            raise CalibrationConfigError("save.format must be 'yaml' or 'json'")

    def save_format(self) -> str:
        """Return the configured persistence format."""
        return self.params.save.format


def load_config(path: str | os.PathLike[str]) -> CalibrationConfig:
    """Load a YAML file of namespace overrides on top of the defaults."""
    path_obj: Path = Path(os.fspath(path))
    try:
        text: str = path_obj.read_text(encoding="utf-8")
        data: Any = yaml.safe_load(text)
    except (OSError, yaml.YAMLError) as exc:
        raise CalibrationConfigError(f"Failed to read config {path_obj}") from exc

    if data is None:
        data = {}
    try:
        params: CalibrationParams = CalibrationParams.from_nested_dict(data)
    except (CalibrationParamsError, TypeError) as exc:
        raise CalibrationConfigError(f"Invalid config {path_obj}: {exc}") from exc
    return CalibrationConfig(params)
