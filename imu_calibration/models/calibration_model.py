################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Apply and merge calibration sets."""

from __future__ import annotations

import time

from imu_calibration.calibration_types import CalibrationSet
from imu_calibration.calibration_types import CorrectedBatch
from imu_calibration.calibration_types import CorrectedImuSample
from imu_calibration.calibration_types import CorrectedMagSample
from imu_calibration.calibration_types import PartialFit
from imu_calibration.calibration_types import RawImuSample
from imu_calibration.calibration_types import RawMagSample
from imu_calibration.calibration_types import SampleBatch


class CalibrationModel:
    """Helpers that turn raw samples into calibrated ones.

    All helpers are pure. Uncalibrated sensors hold identity corrections, so
    applying a set never needs to check which sensors were fitted.
    """

    @staticmethod
    def uncalibrated() -> CalibrationSet:
        """Return a calibration set with identity corrections for all sensors."""
        return CalibrationSet()

    @staticmethod
    def apply(imu: RawImuSample, cal: CalibrationSet) -> CorrectedImuSample:
        """Return the calibrated gyro and accel reading of an IMU sample."""
        return CorrectedImuSample(
            gyro=cal.gyro.correct(imu.gyro),
            accel=cal.accel.correct(imu.accel),
            timestamp=imu.timestamp,
        )

    @staticmethod
    def apply_mag(mag: RawMagSample, cal: CalibrationSet) -> CorrectedMagSample:
        """Return the calibrated field of a magnetometer sample."""
        return CorrectedMagSample(
            field=cal.mag.correct(mag.field),
            timestamp=mag.timestamp,
        )

    @staticmethod
    def apply_batch(batch: SampleBatch, cal: CalibrationSet) -> CorrectedBatch:
        """Return raw and calibrated arrays for every sample of a batch."""
        gyro_raw = batch.gyro_array()
        accel_raw = batch.accel_array()
        mag_raw = batch.mag_array()
        return CorrectedBatch(
            gyro_raw=gyro_raw,
            gyro=cal.gyro.correct(gyro_raw),
            accel_raw=accel_raw,
            accel=cal.accel.correct(accel_raw),
            mag_raw=mag_raw,
            mag=cal.mag.correct(mag_raw),
        )

    @staticmethod
    def merge(
        previous: CalibrationSet,
        update: PartialFit,
        created_at: float | None = None,
    ) -> CalibrationSet:
        """Return a new set with the sensors of ``update`` replaced.

        ``previous`` is left untouched, so callers can keep it for comparison
        or undo.
        """
        return CalibrationSet(
            gyro=previous.gyro if update.gyro is None else update.gyro,
            accel=previous.accel if update.accel is None else update.accel,
            mag=previous.mag if update.mag is None else update.mag,
            created_at=time.time() if created_at is None else created_at,
        )
