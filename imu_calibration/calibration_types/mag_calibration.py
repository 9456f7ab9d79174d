################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Magnetometer hard-iron and soft-iron calibration."""

from __future__ import annotations

from dataclasses import dataclass
from dataclasses import field

import numpy as np

from imu_calibration.calibration_types.fit_info import FitInfo
from imu_calibration.errors import NotPositiveDefiniteError
from imu_calibration.math_utils.linalg import Mat3
from imu_calibration.math_utils.units import as_float_array


@dataclass(frozen=True)
class MagCalibration:
    """Magnetometer correction applied as ``soft_iron @ (raw - hard_iron)``.

    Attributes:
        soft_iron: Symmetric positive-definite 3x3 correction matrix
        hard_iron: Center of the raw field ellipsoid, in sensor units
        info: Fit metadata; the residual is the unit-sphere mean squared error
    """

    soft_iron: np.ndarray
    hard_iron: np.ndarray
    info: FitInfo = field(default_factory=FitInfo.uncalibrated)

    def __post_init__(self) -> None:
        """Validate calibration fields and coerce arrays."""
        soft_iron: np.ndarray = as_float_array(self.soft_iron, "soft_iron", (3, 3))
        hard_iron: np.ndarray = as_float_array(self.hard_iron, "hard_iron", (3,))
        if not Mat3.is_spd(soft_iron):
            raise NotPositiveDefiniteError(
                "soft_iron must be symmetric positive-definite"
            )
        if not isinstance(self.info, FitInfo):
            raise ValueError("info must be a FitInfo")
        object.__setattr__(self, "soft_iron", soft_iron)
        object.__setattr__(self, "hard_iron", hard_iron)

    @classmethod
    def identity(cls) -> MagCalibration:
        """Return the uncalibrated magnetometer correction."""
        return cls(
            soft_iron=np.eye(3, dtype=np.float64),
            hard_iron=np.zeros(3, dtype=np.float64),
        )

    def correct(self, field_raw: np.ndarray) -> np.ndarray:
        """Return the corrected field for one reading or an (N, 3) array."""
        centered: np.ndarray = np.asarray(field_raw, dtype=np.float64) - self.hard_iron
        return centered @ self.soft_iron.T
