################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Tests for applying and merging calibration sets."""

from __future__ import annotations

import numpy as np

from imu_calibration.calibration_types import AccelCalibration
from imu_calibration.calibration_types import CalibrationSet
from imu_calibration.calibration_types import CorrectedBatch
from imu_calibration.calibration_types import CorrectedImuSample
from imu_calibration.calibration_types import CorrectedMagSample
from imu_calibration.calibration_types import FitInfo
from imu_calibration.calibration_types import GyroCalibration
from imu_calibration.calibration_types import MagCalibration
from imu_calibration.calibration_types import PartialFit
from imu_calibration.calibration_types import RawImuSample
from imu_calibration.calibration_types import RawMagSample
from imu_calibration.calibration_types import SampleBatch
from imu_calibration.models.calibration_model import CalibrationModel
from imu_calibration.sensor import Sensor


def _fitted_set() -> CalibrationSet:
    info: FitInfo = FitInfo.fitted(100, 0.01, 50.0)
    return CalibrationSet(
        gyro=GyroCalibration(offset=[0.01, -0.02, 0.03], info=info),
        accel=AccelCalibration(offset=[0.1, 0.2, 0.3], scale=[1.1, 0.9, 1.0], info=info),
        mag=MagCalibration(
            soft_iron=np.diag([0.5, 0.25, 2.0]), hard_iron=[10.0, 20.0, 30.0], info=info
        ),
        created_at=60.0,
    )


def test_uncalibrated_apply_is_identity() -> None:
    """Checks the uncalibrated set returns raw readings unchanged."""
    cal: CalibrationSet = CalibrationModel.uncalibrated()
    imu: RawImuSample = RawImuSample(
        gyro=[0.1, -0.7, 3.3], accel=[9.1, -0.03, 0.4], timestamp=12.5
    )
    mag: RawMagSample = RawMagSample(field=[21.7, -3.1, 44.4], timestamp=12.5)

    corrected: CorrectedImuSample = CalibrationModel.apply(imu, cal)
    corrected_mag: CorrectedMagSample = CalibrationModel.apply_mag(mag, cal)

    np.testing.assert_array_equal(corrected.gyro, imu.gyro)
    np.testing.assert_array_equal(corrected.accel, imu.accel)
    np.testing.assert_array_equal(corrected_mag.field, mag.field)
    assert corrected.timestamp == 12.5


def test_apply_uses_each_sensor_correction() -> None:
    """Checks apply and apply_mag use the fitted corrections."""
    cal: CalibrationSet = _fitted_set()
    imu: RawImuSample = RawImuSample(
        gyro=[0.01, -0.02, 0.03], accel=[1.1, 1.2, 1.3], timestamp=0.0
    )

    corrected: CorrectedImuSample = CalibrationModel.apply(imu, cal)
    corrected_mag: CorrectedMagSample = CalibrationModel.apply_mag(
        RawMagSample(field=[12.0, 24.0, 31.0], timestamp=0.0), cal
    )

    np.testing.assert_allclose(corrected.gyro, np.zeros(3), atol=1e-15)
    np.testing.assert_allclose(corrected.accel, [1.1, 0.9, 1.0])
    np.testing.assert_allclose(corrected_mag.field, [1.0, 1.0, 2.0])


def test_apply_batch_matches_per_sample_apply() -> None:
    """Checks batch correction matches correcting samples one by one."""
    cal: CalibrationSet = _fitted_set()
    rng: np.random.Generator = np.random.default_rng(30)
    batch: SampleBatch = SampleBatch()
    for index in range(5):
        batch.append_imu(
            RawImuSample(gyro=rng.normal(size=3), accel=rng.normal(size=3), timestamp=index)
        )
        batch.append_mag(RawMagSample(field=rng.normal(size=3), timestamp=index))

    corrected: CorrectedBatch = CalibrationModel.apply_batch(batch, cal)

    for index, sample in enumerate(batch.imu_samples):
        single: CorrectedImuSample = CalibrationModel.apply(sample, cal)
        np.testing.assert_allclose(corrected.gyro[index], single.gyro)
        np.testing.assert_allclose(corrected.accel[index], single.accel)
    for index, sample in enumerate(batch.mag_samples):
        np.testing.assert_allclose(
            corrected.mag[index], CalibrationModel.apply_mag(sample, cal).field
        )
    np.testing.assert_array_equal(corrected.mag_raw, batch.mag_array())


def test_merge_replaces_only_updated_sensors() -> None:
    """Checks merge keeps sensors absent from the update."""
    previous: CalibrationSet = _fitted_set()
    gyro: GyroCalibration = GyroCalibration(
        offset=[1.0, 1.0, 1.0], info=FitInfo.fitted(60, 0.0, 70.0)
    )

    merged: CalibrationSet = CalibrationModel.merge(
        previous, PartialFit(gyro=gyro), created_at=80.0
    )

    assert merged is not previous
    assert merged.gyro is gyro
    assert merged.accel is previous.accel
    assert merged.mag is previous.mag
    assert merged.created_at == 80.0


def test_merge_leaves_previous_untouched() -> None:
    """Checks the previous set still holds its own calibrations."""
    previous: CalibrationSet = CalibrationModel.uncalibrated()

    merged: CalibrationSet = CalibrationModel.merge(
        previous, PartialFit(mag=_fitted_set().mag)
    )

    assert merged.is_calibrated(Sensor.MAG)
    assert not previous.is_calibrated(Sensor.MAG)
    np.testing.assert_array_equal(previous.mag.hard_iron, np.zeros(3))
