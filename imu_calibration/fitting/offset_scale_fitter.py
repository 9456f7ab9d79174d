################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Per-axis offset and scale fitting for gyroscope and accelerometer."""

from __future__ import annotations

import logging
import time
from typing import Callable
from typing import Sequence

import numpy as np

from imu_calibration.calibration_types import AccelCalibration
from imu_calibration.calibration_types import FitInfo
from imu_calibration.calibration_types import GyroCalibration
from imu_calibration.calibration_types import RawImuSample
from imu_calibration.config.calibration_params import CalibrationParams
from imu_calibration.errors import DegenerateRangeError
from imu_calibration.errors import InsufficientSamplesError
from imu_calibration.sensor import Sensor


_LOG: logging.Logger = logging.getLogger(__name__)

_AXES: tuple[str, ...] = ("x", "y", "z")


class OffsetScaleFitter:
    """Estimate gyro bias and accel offset/scale from raw IMU batches.

    Both fits are pure functions of the input slice; the caller is
    responsible for holding the device still during gyro capture and for
    presenting each accel axis both up and down.
    """

    def __init__(
        self,
        params: CalibrationParams | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._params: CalibrationParams = (
            CalibrationParams.defaults() if params is None else params
        )
        self._clock: Callable[[], float] = clock

    def fit_gyro_offset(self, samples: Sequence[RawImuSample]) -> GyroCalibration:
        """Return the mean gyro reading of a stationary batch as the offset."""
        min_samples: int = max(1, self._params.gyro.min_samples)
        if len(samples) < min_samples:
            raise InsufficientSamplesError(
                f"gyro offset needs at least {min_samples} samples, "
                f"got {len(samples)}",
                sensor=Sensor.GYRO,
                stage="sample_count",
            )

        gyro: np.ndarray = np.stack([sample.gyro for sample in samples], axis=0)
        offset: np.ndarray = gyro.mean(axis=0)
        corrected: np.ndarray = gyro - offset
        residual: float = float(np.mean(np.sum(corrected * corrected, axis=1)))

        _LOG.debug(
            "Gyro offset from %d samples: %s (residual %.3e)",
            len(samples),
            offset.tolist(),
            residual,
        )
        return GyroCalibration(
            offset=offset,
            info=FitInfo.fitted(len(samples), residual, self._clock()),
        )

    def fit_accel_offset_scale(
        self, samples: Sequence[RawImuSample]
    ) -> AccelCalibration:
        """Return the accel offset/scale that maps each axis extreme to +/-g."""
        min_samples: int = self._params.accel.min_samples
        if len(samples) < min_samples:
            raise InsufficientSamplesError(
                f"accel offset/scale needs at least {min_samples} samples, "
                f"got {len(samples)}",
                sensor=Sensor.ACCEL,
                stage="sample_count",
            )

        accel: np.ndarray = np.stack([sample.accel for sample in samples], axis=0)
        low: np.ndarray
        high: np.ndarray
        if self._params.accel.method == "six_position":
            low, high = self._six_position_extrema(accel)
        else:
            low = accel.min(axis=0)
            high = accel.max(axis=0)

        spread: np.ndarray = high - low
        for axis, axis_spread in enumerate(spread):
            if not axis_spread >= self._params.accel.range_eps:
                raise DegenerateRangeError(
                    f"accel {_AXES[axis]} axis spread {axis_spread:.3e} is below "
                    f"{self._params.accel.range_eps:.1e}; reorient the device",
                    sensor=Sensor.ACCEL,
                    stage="range",
                )

        gravity: float = self._params.accel.gravity
        offset: np.ndarray = 0.5 * (high + low)
        scale: np.ndarray = 2.0 * gravity / spread

        corrected: np.ndarray = (accel - offset) * scale
        norm_error: np.ndarray = np.linalg.norm(corrected, axis=1) - gravity
        residual: float = float(np.mean(norm_error * norm_error))

        _LOG.debug(
            "Accel %s fit from %d samples: offset %s scale %s",
            self._params.accel.method,
            len(samples),
            offset.tolist(),
            scale.tolist(),
        )
        return AccelCalibration(
            offset=offset,
            scale=scale,
            info=FitInfo.fitted(len(samples), residual, self._clock()),
        )

    def _six_position_extrema(
        self, accel: np.ndarray
    ) -> tuple[np.ndarray, np.ndarray]:
        """Return per-axis means of the down and up clusters.

        A reading joins the up cluster of an axis when it exceeds
        ``threshold * g`` and the down cluster when it is below
        ``-threshold * g``, so raw readings must already be in gravity units.
        """
        limit: float = (
            self._params.accel.six_position_threshold * self._params.accel.gravity
        )
        low: np.ndarray = np.zeros(3, dtype=np.float64)
        high: np.ndarray = np.zeros(3, dtype=np.float64)
        for axis in range(3):
            values: np.ndarray = accel[:, axis]
            up: np.ndarray = values[values > limit]
            down: np.ndarray = values[values < -limit]
            if up.size == 0 or down.size == 0:
                raise DegenerateRangeError(
                    f"accel {_AXES[axis]} axis was not observed both up and down",
                    sensor=Sensor.ACCEL,
                    stage="range",
                )
            high[axis] = float(up.mean())
            low[axis] = float(down.mean())
        return low, high


def fit_gyro_offset(
    samples: Sequence[RawImuSample],
    params: CalibrationParams | None = None,
) -> GyroCalibration:
    """Fit the gyro offset of a stationary batch."""
    return OffsetScaleFitter(params).fit_gyro_offset(samples)


def fit_accel_offset_scale(
    samples: Sequence[RawImuSample],
    params: CalibrationParams | None = None,
) -> AccelCalibration:
    """Fit the accel offset and scale of a multi-orientation batch."""
    return OffsetScaleFitter(params).fit_accel_offset_scale(samples)
