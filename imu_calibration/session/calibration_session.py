################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Calibration session that collects samples and fits one sensor at a time."""

from __future__ import annotations

import logging
import time
from typing import Callable

from imu_calibration.calibration_types import CalibrationSet
from imu_calibration.calibration_types import PartialFit
from imu_calibration.calibration_types import RawImuSample
from imu_calibration.calibration_types import RawMagSample
from imu_calibration.calibration_types import SampleBatch
from imu_calibration.config.calibration_config import CalibrationConfig
from imu_calibration.errors import CalibrationError
from imu_calibration.fitting.ellipsoid_fitter import EllipsoidFitter
from imu_calibration.fitting.offset_scale_fitter import OffsetScaleFitter
from imu_calibration.models.calibration_model import CalibrationModel
from imu_calibration.models.stillness_filter import StillnessFilter
from imu_calibration.sensor import Sensor


_LOG: logging.Logger = logging.getLogger(__name__)


class CalibrationSession:
    """Owns the sample batch and the sequence of fitted calibration sets.

    Every successful fit produces a new :class:`CalibrationSet`; the previous
    one is pushed onto the history so it can be restored with :meth:`undo`.
    A failed fit raises and leaves the current set unchanged.
    """

    def __init__(
        self,
        config: CalibrationConfig | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._config: CalibrationConfig = (
            CalibrationConfig() if config is None else config
        )
        self._clock: Callable[[], float] = clock
        self._batch: SampleBatch = SampleBatch()
        self._current: CalibrationSet = CalibrationModel.uncalibrated()
        self._history: list[CalibrationSet] = []

        params = self._config.params
        self._offset_fitter: OffsetScaleFitter = OffsetScaleFitter(params, clock)
        self._ellipsoid_fitter: EllipsoidFitter = EllipsoidFitter(params, clock)
        self._gyro_still: StillnessFilter = StillnessFilter(
            params.stillness.gyro_alpha, params.stillness.gyro_threshold
        )
        self._accel_still: StillnessFilter = StillnessFilter(
            params.stillness.accel_alpha, params.stillness.accel_threshold
        )

    @property
    def config(self) -> CalibrationConfig:
        return self._config

    @property
    def batch(self) -> SampleBatch:
        return self._batch

    @property
    def current(self) -> CalibrationSet:
        return self._current

    @property
    def history(self) -> tuple[CalibrationSet, ...]:
        """Return superseded calibration sets, oldest first."""
        return tuple(self._history)

    def add_imu(self, sample: RawImuSample, still_only: bool = False) -> bool:
        """Add an IMU sample and return True if it was kept.

        With ``still_only`` the sample is kept only when both the gyro and the
        accel reading stay close to their moving averages.
        """
        if still_only:
            gyro_still: bool = self._gyro_still.accept(sample.gyro)
            accel_still: bool = self._accel_still.accept(sample.accel)
            if not (gyro_still and accel_still):
                return False
        self._batch.append_imu(sample)
        return True

    def add_mag(self, sample: RawMagSample) -> None:
        self._batch.append_mag(sample)

    def clear_imu(self) -> None:
        """Drop collected IMU samples and reset the stillness filters."""
        self._batch = self._batch.without_imu()
        self._gyro_still.reset()
        self._accel_still.reset()

    def clear_mag(self) -> None:
        self._batch = self._batch.without_mag()

    def fit_gyro(self) -> CalibrationSet:
        """Fit the gyro offset from the collected IMU samples."""
        return self._fit(Sensor.GYRO)

    def fit_accel(self) -> CalibrationSet:
        """Fit the accel offset and scale from the collected IMU samples."""
        return self._fit(Sensor.ACCEL)

    def fit_mag(self) -> CalibrationSet:
        """Fit the magnetometer ellipsoid from the collected mag samples."""
        return self._fit(Sensor.MAG)

    def fit_all(self) -> CalibrationSet:
        """Fit every sensor independently and merge the ones that succeed.

        If any sensor fails, the successful fits are still committed and the
        first failure is raised afterwards.
        """
        update: dict[str, object] = {}
        first_error: CalibrationError | None = None
        for sensor in Sensor:
            try:
                update[sensor.value] = self._fit_sensor(sensor)
            except CalibrationError as exc:
                _LOG.warning("%s fit failed: %s", sensor.value, exc)
                if first_error is None:
                    first_error = exc

        partial: PartialFit = PartialFit(**update)
        if not partial.is_empty():
            self._commit(partial)
        if first_error is not None:
            raise first_error
        return self._current

    def undo(self) -> CalibrationSet:
        """Restore the previous calibration set and return it."""
        if not self._history:
            _LOG.warning("Nothing to undo")
            return self._current
        self._current = self._history.pop()
        _LOG.info("Restored calibration set created at %.3f", self._current.created_at)
        return self._current

    def _fit(self, sensor: Sensor) -> CalibrationSet:
        try:
            calibration = self._fit_sensor(sensor)
        except CalibrationError as exc:
            _LOG.warning("%s fit failed: %s", sensor.value, exc)
            raise
        return self._commit(PartialFit(**{sensor.value: calibration}))

    def _fit_sensor(self, sensor: Sensor) -> object:
        if sensor is Sensor.GYRO:
            return self._offset_fitter.fit_gyro_offset(self._batch.imu_samples)
        if sensor is Sensor.ACCEL:
            return self._offset_fitter.fit_accel_offset_scale(self._batch.imu_samples)
        return self._ellipsoid_fitter.fit(self._batch.mag_samples).calibration

    def _commit(self, partial: PartialFit) -> CalibrationSet:
        self._history.append(self._current)
        self._current = CalibrationModel.merge(
            self._current, partial, created_at=self._clock()
        )
        _LOG.info(
            "Committed calibration for %s",
            ", ".join(sensor.value for sensor in partial.sensors()),
        )
        return self._current
