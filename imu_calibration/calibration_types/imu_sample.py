################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Raw IMU sample type."""

from __future__ import annotations

import math
import numbers
from dataclasses import dataclass

import numpy as np

from imu_calibration.math_utils.units import as_float_array


@dataclass(frozen=True)
class RawImuSample:
    """Combined gyroscope and accelerometer reading.

    Attributes:
        gyro: Angular rate as reported by the sensor, shape (3,)
        accel: Specific force as reported by the sensor, shape (3,)
        timestamp: Capture time in seconds, or a sequence index
    """

    gyro: np.ndarray
    accel: np.ndarray
    timestamp: float

    def __post_init__(self) -> None:
        """Validate sample fields and coerce arrays."""
        object.__setattr__(self, "gyro", as_float_array(self.gyro, "gyro", (3,)))
        object.__setattr__(self, "accel", as_float_array(self.accel, "accel", (3,)))
        object.__setattr__(
            self, "timestamp", require_timestamp(self.timestamp, "timestamp")
        )


def require_timestamp(value: object, name: str) -> float:
    """Return a finite float timestamp."""
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise ValueError(f"{name} must be a real number")
    result: float = float(value)
    if not math.isfinite(result):
        raise ValueError(f"{name} must be finite")
    return result
