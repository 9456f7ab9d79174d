################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Tests for raw sample types and the sample batch."""

from __future__ import annotations

import numpy as np
import pytest

from imu_calibration.calibration_types import RawImuSample
from imu_calibration.calibration_types import RawMagSample
from imu_calibration.calibration_types import SampleBatch


def _imu(timestamp: float) -> RawImuSample:
    return RawImuSample(
        gyro=[0.1, 0.2, 0.3],
        accel=[0.0, 0.0, 9.8],
        timestamp=timestamp,
    )


def _mag(timestamp: float) -> RawMagSample:
    return RawMagSample(field=[30.0, -10.0, 40.0], timestamp=timestamp)


def test_raw_imu_sample_coerces_arrays() -> None:
    """Checks sample vectors are stored as float64 arrays."""
    sample: RawImuSample = _imu(1)

    assert sample.gyro.dtype == np.float64
    assert sample.accel.shape == (3,)
    assert isinstance(sample.timestamp, float)


def test_raw_samples_reject_invalid_fields() -> None:
    """Checks wrong shapes, non-finite values and bad timestamps."""
    with pytest.raises(ValueError):
        RawImuSample(gyro=[0.0, 0.0], accel=[0.0, 0.0, 1.0], timestamp=0.0)
    with pytest.raises(ValueError):
        RawMagSample(field=[np.inf, 0.0, 0.0], timestamp=0.0)
    with pytest.raises(ValueError):
        RawMagSample(field=[1.0, 0.0, 0.0], timestamp=True)
    with pytest.raises(ValueError):
        RawMagSample(field=[1.0, 0.0, 0.0], timestamp=float("nan"))


def test_mag_sample_magnitude() -> None:
    """Checks the raw field magnitude."""
    sample: RawMagSample = RawMagSample(field=[3.0, 0.0, 4.0], timestamp=0.0)

    assert sample.magnitude() == pytest.approx(5.0)


def test_batch_keeps_sequences_independent() -> None:
    """Checks IMU and mag timestamps are ordered separately."""
    batch: SampleBatch = SampleBatch()
    batch.append_imu(_imu(5.0))
    batch.append_mag(_mag(1.0))
    batch.append_imu(_imu(5.0))
    batch.append_mag(_mag(2.0))

    assert batch.imu_count() == 2
    assert batch.mag_count() == 2
    assert len(batch) == 4
    assert batch.gyro_array().shape == (2, 3)
    assert batch.mag_array().shape == (2, 3)


def test_batch_rejects_older_samples() -> None:
    """Checks appending a sample older than the last one fails."""
    batch: SampleBatch = SampleBatch(imu_samples=[_imu(2.0)], mag_samples=[_mag(3.0)])

    with pytest.raises(ValueError):
        batch.append_imu(_imu(1.0))
    with pytest.raises(ValueError):
        batch.append_mag(_mag(2.5))
    assert batch.imu_count() == 1
    assert batch.mag_count() == 1


def test_empty_batch_arrays() -> None:
    """Checks empty sequences produce (0, 3) arrays."""
    batch: SampleBatch = SampleBatch()

    assert batch.gyro_array().shape == (0, 3)
    assert batch.accel_array().shape == (0, 3)
    assert batch.mag_array().shape == (0, 3)


def test_without_drops_one_sequence() -> None:
    """Checks without_imu and without_mag return new batches."""
    batch: SampleBatch = SampleBatch(imu_samples=[_imu(0.0)], mag_samples=[_mag(0.0)])

    no_imu: SampleBatch = batch.without_imu()
    no_mag: SampleBatch = batch.without_mag()

    assert (no_imu.imu_count(), no_imu.mag_count()) == (0, 1)
    assert (no_mag.imu_count(), no_mag.mag_count()) == (1, 0)
    assert len(batch) == 2
    assert repr(batch) == "SampleBatch(imu=1, mag=1)"
