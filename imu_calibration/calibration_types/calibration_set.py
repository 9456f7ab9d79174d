################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Aggregate of the three sensor calibrations."""

from __future__ import annotations

import math
import time
from dataclasses import dataclass
from dataclasses import field

from imu_calibration.calibration_types.accel_calibration import AccelCalibration
from imu_calibration.calibration_types.fit_info import FitInfo
from imu_calibration.calibration_types.gyro_calibration import GyroCalibration
from imu_calibration.calibration_types.mag_calibration import MagCalibration
from imu_calibration.sensor import Sensor


@dataclass(frozen=True)
class CalibrationSet:
    """Calibration for gyro, accel and magnetometer.

    A set is created once per completed fit and never modified. Sensors that
    were never fitted hold the identity variant of their calibration.

    Attributes:
        gyro: Gyroscope offset calibration
        accel: Accelerometer offset/scale calibration
        mag: Magnetometer hard/soft-iron calibration
        created_at: Creation time in seconds since the epoch
    """

    gyro: GyroCalibration = field(default_factory=GyroCalibration.identity)
    accel: AccelCalibration = field(default_factory=AccelCalibration.identity)
    mag: MagCalibration = field(default_factory=MagCalibration.identity)
    created_at: float = field(default_factory=time.time)

    def __post_init__(self) -> None:
        """Validate member types."""
        if not isinstance(self.gyro, GyroCalibration):
            raise ValueError("gyro must be a GyroCalibration")
        if not isinstance(self.accel, AccelCalibration):
            raise ValueError("accel must be an AccelCalibration")
        if not isinstance(self.mag, MagCalibration):
            raise ValueError("mag must be a MagCalibration")
        created_at: float = float(self.created_at)
        if not math.isfinite(created_at):
            raise ValueError("created_at must be finite")
        object.__setattr__(self, "created_at", created_at)

    def info(self, sensor: Sensor) -> FitInfo:
        """Return the fit metadata for a sensor."""
        if sensor is Sensor.GYRO:
            return self.gyro.info
        if sensor is Sensor.ACCEL:
            return self.accel.info
        return self.mag.info

    def is_calibrated(self, sensor: Sensor) -> bool:
        """Return True when the sensor holds a fitted calibration."""
        return self.info(sensor).is_fitted


@dataclass(frozen=True)
class PartialFit:
    """Sensor calibrations to replace in an existing set.

    Sensors left as None keep the calibration of the previous set.
    """

    gyro: GyroCalibration | None = None
    accel: AccelCalibration | None = None
    mag: MagCalibration | None = None

    def sensors(self) -> tuple[Sensor, ...]:
        """Return the sensors carried by this update."""
        present: list[Sensor] = []
        if self.gyro is not None:
            present.append(Sensor.GYRO)
        if self.accel is not None:
            present.append(Sensor.ACCEL)
        if self.mag is not None:
            present.append(Sensor.MAG)
        return tuple(present)

    def is_empty(self) -> bool:
        return not self.sensors()
