################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Append-only batch of raw samples collected during a calibration session."""

from __future__ import annotations

from typing import Iterable

import numpy as np

from imu_calibration.calibration_types.imu_sample import RawImuSample
from imu_calibration.calibration_types.mag_sample import RawMagSample


class SampleBatch:
    """Ordered IMU and magnetometer samples in arrival order.

    The two sequences are independent. Within each sequence timestamps are
    non-decreasing; appending an older sample is rejected. Samples are never
    removed; use :meth:`without_imu` or :meth:`without_mag` to start a new
    batch that drops one sequence.
    """

    def __init__(
        self,
        imu_samples: Iterable[RawImuSample] = (),
        mag_samples: Iterable[RawMagSample] = (),
    ) -> None:
        self._imu: list[RawImuSample] = []
        self._mag: list[RawMagSample] = []
        for imu_sample in imu_samples:
            self.append_imu(imu_sample)
        for mag_sample in mag_samples:
            self.append_mag(mag_sample)

    def append_imu(self, sample: RawImuSample) -> None:
        """Append an IMU sample, enforcing timestamp order."""
        if not isinstance(sample, RawImuSample):
            raise ValueError("sample must be a RawImuSample")
        if self._imu and sample.timestamp < self._imu[-1].timestamp:
            raise ValueError(
                f"IMU timestamp {sample.timestamp} precedes "
                f"{self._imu[-1].timestamp}"
            )
        self._imu.append(sample)

    def append_mag(self, sample: RawMagSample) -> None:
        """Append a magnetometer sample, enforcing timestamp order."""
        if not isinstance(sample, RawMagSample):
            raise ValueError("sample must be a RawMagSample")
        if self._mag and sample.timestamp < self._mag[-1].timestamp:
            raise ValueError(
                f"mag timestamp {sample.timestamp} precedes "
                f"{self._mag[-1].timestamp}"
            )
        self._mag.append(sample)

    @property
    def imu_samples(self) -> tuple[RawImuSample, ...]:
        """Return the IMU samples in arrival order."""
        return tuple(self._imu)

    @property
    def mag_samples(self) -> tuple[RawMagSample, ...]:
        """Return the magnetometer samples in arrival order."""
        return tuple(self._mag)

    def imu_count(self) -> int:
        return len(self._imu)

    def mag_count(self) -> int:
        return len(self._mag)

    def gyro_array(self) -> np.ndarray:
        """Return raw gyro readings as an (N, 3) array."""
        return _stack([sample.gyro for sample in self._imu])

    def accel_array(self) -> np.ndarray:
        """Return raw accel readings as an (N, 3) array."""
        return _stack([sample.accel for sample in self._imu])

    def mag_array(self) -> np.ndarray:
        """Return raw magnetometer readings as an (N, 3) array."""
        return _stack([sample.field for sample in self._mag])

    def without_imu(self) -> SampleBatch:
        """Return a new batch keeping only the magnetometer samples."""
        return SampleBatch(mag_samples=self._mag)

    def without_mag(self) -> SampleBatch:
        """Return a new batch keeping only the IMU samples."""
        return SampleBatch(imu_samples=self._imu)

    def __len__(self) -> int:
        return len(self._imu) + len(self._mag)

    def __repr__(self) -> str:
        return f"SampleBatch(imu={len(self._imu)}, mag={len(self._mag)})"


def _stack(vectors: list[np.ndarray]) -> np.ndarray:
    if not vectors:
        return np.zeros((0, 3), dtype=np.float64)
    return np.stack(vectors, axis=0)
