################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Error taxonomy for calibration fitting.

Every error is recoverable by the caller: a failed fit never produces a
partial calibration, and any previously held calibration set stays valid.
Errors raised by the linear algebra layer carry no sensor context; fitters
attach it with :meth:`CalibrationError.with_context` before re-raising.
"""

from __future__ import annotations

from typing import TypeVar

from imu_calibration.sensor import Sensor


_ErrorT = TypeVar("_ErrorT", bound="CalibrationError")


class CalibrationError(Exception):
    """Base class for calibration fitting failures.

    Attributes:
        sensor: Sensor being fitted when the failure occurred, if known
        stage: Name of the fitting step that failed, if known
    """

    def __init__(
        self,
        message: str,
        *,
        sensor: Sensor | None = None,
        stage: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message: str = message
        self.sensor: Sensor | None = sensor
        self.stage: str | None = stage

    def with_context(self: _ErrorT, sensor: Sensor, stage: str) -> _ErrorT:
        """Return a copy of this error annotated with sensor and stage."""
        return type(self)(self.message, sensor=sensor, stage=stage)

    def __str__(self) -> str:
        if self.sensor is None and self.stage is None:
            return self.message
        sensor_name: str = self.sensor.value if self.sensor is not None else "?"
        stage_name: str = self.stage if self.stage is not None else "?"
        return f"[{sensor_name}/{stage_name}] {self.message}"


class InsufficientSamplesError(CalibrationError):
    """Raised when a batch holds fewer samples than the fitter requires."""


class DegenerateRangeError(CalibrationError):
    """Raised when an axis was never reoriented enough to resolve its scale."""


class SingularMatrixError(CalibrationError):
    """Raised when a matrix is too close to singular to invert or solve."""


class NotPositiveDefiniteError(CalibrationError):
    """Raised when a fitted shape matrix is not symmetric positive-definite."""


class NonConvergentError(CalibrationError):
    """Raised when an iterative decomposition exhausts its iteration budget."""
