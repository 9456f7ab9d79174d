################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Type definitions for IMU calibration."""

from __future__ import annotations

from imu_calibration.calibration_types.accel_calibration import AccelCalibration
from imu_calibration.calibration_types.calibration_set import CalibrationSet
from imu_calibration.calibration_types.calibration_set import PartialFit
from imu_calibration.calibration_types.corrected_sample import CorrectedBatch
from imu_calibration.calibration_types.corrected_sample import CorrectedImuSample
from imu_calibration.calibration_types.corrected_sample import CorrectedMagSample
from imu_calibration.calibration_types.fit_info import CalibrationSource
from imu_calibration.calibration_types.fit_info import FitInfo
from imu_calibration.calibration_types.gyro_calibration import GyroCalibration
from imu_calibration.calibration_types.imu_sample import RawImuSample
from imu_calibration.calibration_types.mag_calibration import MagCalibration
from imu_calibration.calibration_types.mag_sample import RawMagSample
from imu_calibration.calibration_types.sample_batch import SampleBatch


__all__ = [
    "AccelCalibration",
    "CalibrationSet",
    "CalibrationSource",
    "CorrectedBatch",
    "CorrectedImuSample",
    "CorrectedMagSample",
    "FitInfo",
    "GyroCalibration",
    "MagCalibration",
    "PartialFit",
    "RawImuSample",
    "RawMagSample",
    "SampleBatch",
]
