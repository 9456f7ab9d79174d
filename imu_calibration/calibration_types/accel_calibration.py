################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Accelerometer offset and scale calibration."""

from __future__ import annotations

from dataclasses import dataclass
from dataclasses import field

import numpy as np

from imu_calibration.calibration_types.fit_info import FitInfo
from imu_calibration.math_utils.units import as_float_array


@dataclass(frozen=True)
class AccelCalibration:
    """Per-axis correction applied as ``corrected = (raw - offset) * scale``."""

    offset: np.ndarray
    scale: np.ndarray
    info: FitInfo = field(default_factory=FitInfo.uncalibrated)

    def __post_init__(self) -> None:
        """Validate calibration fields and coerce arrays."""
        offset: np.ndarray = as_float_array(self.offset, "offset", (3,))
        scale: np.ndarray = as_float_array(self.scale, "scale", (3,))
        if np.any(scale <= 0.0):
            raise ValueError("scale must be positive")
        if not isinstance(self.info, FitInfo):
            raise ValueError("info must be a FitInfo")
        object.__setattr__(self, "offset", offset)
        object.__setattr__(self, "scale", scale)

    @classmethod
    def identity(cls) -> AccelCalibration:
        """Return the uncalibrated accel correction."""
        return cls(
            offset=np.zeros(3, dtype=np.float64),
            scale=np.ones(3, dtype=np.float64),
        )

    def correct(self, accel_raw: np.ndarray) -> np.ndarray:
        """Return corrected specific force for one reading or an (N, 3) array."""
        return (np.asarray(accel_raw, dtype=np.float64) - self.offset) * self.scale
