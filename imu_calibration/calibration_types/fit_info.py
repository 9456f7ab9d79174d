################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Per-sensor fit metadata."""

from __future__ import annotations

import enum
import math
from dataclasses import dataclass


class CalibrationSource(enum.Enum):
    """Origin of a sensor calibration."""

    UNCALIBRATED = "uncalibrated"
    FITTED = "fitted"


@dataclass(frozen=True)
class FitInfo:
    """Metadata recorded with a sensor calibration.

    Attributes:
        source: Whether the calibration is the identity placeholder or a fit
        sample_count: Number of samples used by the fit
        residual: Mean squared residual reported by the fitter
        fitted_at: Fit time in seconds since the epoch
    """

    source: CalibrationSource
    sample_count: int = 0
    residual: float = 0.0
    fitted_at: float = 0.0

    def __post_init__(self) -> None:
        """Validate metadata fields."""
        if not isinstance(self.source, CalibrationSource):
            raise ValueError("source must be a CalibrationSource")
        if isinstance(self.sample_count, bool) or not isinstance(
            self.sample_count, int
        ):
            raise ValueError("sample_count must be an int")
        if self.sample_count < 0:
            raise ValueError("sample_count must be non-negative")
        residual: float = float(self.residual)
        fitted_at: float = float(self.fitted_at)
        if not math.isfinite(residual) or residual < 0.0:
            raise ValueError("residual must be finite and non-negative")
        if not math.isfinite(fitted_at):
            raise ValueError("fitted_at must be finite")
        object.__setattr__(self, "residual", residual)
        object.__setattr__(self, "fitted_at", fitted_at)

    @classmethod
    def uncalibrated(cls) -> FitInfo:
        """Return the metadata of an identity calibration."""
        return cls(source=CalibrationSource.UNCALIBRATED)

    @classmethod
    def fitted(cls, sample_count: int, residual: float, fitted_at: float) -> FitInfo:
        """Return the metadata of a successful fit."""
        return cls(
            source=CalibrationSource.FITTED,
            sample_count=sample_count,
            residual=residual,
            fitted_at=fitted_at,
        )

    @property
    def is_fitted(self) -> bool:
        return self.source is CalibrationSource.FITTED
