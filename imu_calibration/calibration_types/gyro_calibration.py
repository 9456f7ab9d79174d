################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Gyroscope bias calibration."""

from __future__ import annotations

from dataclasses import dataclass
from dataclasses import field

import numpy as np

from imu_calibration.calibration_types.fit_info import FitInfo
from imu_calibration.math_utils.units import as_float_array


@dataclass(frozen=True)
class GyroCalibration:
    """Gyroscope offset applied as ``corrected = raw - offset``."""

    offset: np.ndarray
    info: FitInfo = field(default_factory=FitInfo.uncalibrated)

    def __post_init__(self) -> None:
        """Validate calibration fields and coerce arrays."""
        object.__setattr__(self, "offset", as_float_array(self.offset, "offset", (3,)))
        if not isinstance(self.info, FitInfo):
            raise ValueError("info must be a FitInfo")

    @classmethod
    def identity(cls) -> GyroCalibration:
        """Return the uncalibrated gyro correction."""
        return cls(offset=np.zeros(3, dtype=np.float64))

    def correct(self, gyro_raw: np.ndarray) -> np.ndarray:
        """Return corrected angular rate for one reading or an (N, 3) array."""
        return np.asarray(gyro_raw, dtype=np.float64) - self.offset
