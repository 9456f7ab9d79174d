################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Calibrated sample types exposed to display and export collaborators."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from imu_calibration.math_utils.units import as_float_array
from imu_calibration.math_utils.units import as_points_array


@dataclass(frozen=True)
class CorrectedImuSample:
    """Calibrated gyro and accel reading."""

    gyro: np.ndarray
    accel: np.ndarray
    timestamp: float

    def __post_init__(self) -> None:
        """Coerce arrays."""
        object.__setattr__(self, "gyro", as_float_array(self.gyro, "gyro", (3,)))
        object.__setattr__(self, "accel", as_float_array(self.accel, "accel", (3,)))


@dataclass(frozen=True)
class CorrectedMagSample:
    """Calibrated magnetometer reading."""

    field: np.ndarray
    timestamp: float

    def __post_init__(self) -> None:
        """Coerce arrays."""
        object.__setattr__(self, "field", as_float_array(self.field, "field", (3,)))


@dataclass(frozen=True)
class CorrectedBatch:
    """Raw and corrected arrays of a sample batch for plotting.

    Attributes:
        gyro_raw: Raw gyro readings, shape (N, 3)
        gyro: Corrected gyro readings, shape (N, 3)
        accel_raw: Raw accel readings, shape (N, 3)
        accel: Corrected accel readings, shape (N, 3)
        mag_raw: Raw magnetometer readings, shape (M, 3)
        mag: Corrected magnetometer readings, shape (M, 3)
    """

    gyro_raw: np.ndarray
    gyro: np.ndarray
    accel_raw: np.ndarray
    accel: np.ndarray
    mag_raw: np.ndarray
    mag: np.ndarray

    def __post_init__(self) -> None:
        """Coerce arrays to (N, 3)."""
        for name in ("gyro_raw", "gyro", "accel_raw", "accel", "mag_raw", "mag"):
            object.__setattr__(self, name, as_points_array(getattr(self, name), name))
        if self.gyro.shape != self.gyro_raw.shape:
            raise ValueError("gyro and gyro_raw must have the same shape")
        if self.accel.shape != self.accel_raw.shape:
            raise ValueError("accel and accel_raw must have the same shape")
        if self.mag.shape != self.mag_raw.shape:
            raise ValueError("mag and mag_raw must have the same shape")

    def mag_norms(self) -> np.ndarray:
        """Return the magnitude of each corrected magnetometer reading."""
        return np.linalg.norm(self.mag, axis=1)

    def accel_norms(self) -> np.ndarray:
        """Return the magnitude of each corrected accel reading."""
        return np.linalg.norm(self.accel, axis=1)
