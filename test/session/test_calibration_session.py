################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Tests for the calibration session controller."""

from __future__ import annotations

import itertools
from dataclasses import replace

import numpy as np
import pytest

from imu_calibration.calibration_types import CalibrationSet
from imu_calibration.calibration_types import RawImuSample
from imu_calibration.calibration_types import RawMagSample
from imu_calibration.config.calibration_config import CalibrationConfig
from imu_calibration.config.calibration_params import CalibrationParams
from imu_calibration.errors import DegenerateRangeError
from imu_calibration.errors import InsufficientSamplesError
from imu_calibration.sensor import Sensor
from imu_calibration.session.calibration_session import CalibrationSession


GRAVITY: float = 9.80665


def _session() -> CalibrationSession:
    defaults: CalibrationParams = CalibrationParams.defaults()
    params: CalibrationParams = defaults.replace(gyro=replace(defaults.gyro, min_samples=6))
    ticks = itertools.count(start=100.0)
    return CalibrationSession(CalibrationConfig(params), clock=lambda: next(ticks))


def _add_six_orientations(session: CalibrationSession) -> None:
    orientations: np.ndarray = np.vstack([np.eye(3), -np.eye(3)]) * GRAVITY
    for index, accel in enumerate(orientations):
        session.add_imu(
            RawImuSample(gyro=[0.01, 0.02, 0.03], accel=accel * 1.05 + 0.2, timestamp=index)
        )


def _add_ellipsoid(session: CalibrationSession, count: int = 200) -> None:
    rng: np.random.Generator = np.random.default_rng(50)
    directions: np.ndarray = rng.normal(size=(count, 3))
    directions /= np.linalg.norm(directions, axis=1, keepdims=True)
    for index, direction in enumerate(directions):
        session.add_mag(
            RawMagSample(
                field=direction * [25.0, 35.0, 45.0] + [5.0, -3.0, 8.0],
                timestamp=float(index),
            )
        )


def test_session_starts_uncalibrated() -> None:
    """Checks a new session holds the identity set and no history."""
    session: CalibrationSession = CalibrationSession()

    for sensor in Sensor:
        assert not session.current.is_calibrated(sensor)
    assert session.history == ()
    assert len(session.batch) == 0


def test_fits_are_merged_one_sensor_at_a_time() -> None:
    """Checks each fit replaces only its own sensor."""
    session: CalibrationSession = _session()
    _add_six_orientations(session)
    _add_ellipsoid(session)

    after_gyro: CalibrationSet = session.fit_gyro()
    after_accel: CalibrationSet = session.fit_accel()

    assert after_gyro.is_calibrated(Sensor.GYRO)
    assert not after_gyro.is_calibrated(Sensor.ACCEL)
    assert after_accel.gyro is after_gyro.gyro
    np.testing.assert_allclose(after_accel.accel.scale, 1.0 / 1.05)
    np.testing.assert_allclose(after_accel.accel.offset, 0.2, atol=1e-12)
    assert session.history[-1] is after_gyro

    session.fit_mag()
    np.testing.assert_allclose(session.current.mag.hard_iron, [5.0, -3.0, 8.0], atol=1e-6)
    assert len(session.history) == 3


def test_failed_fit_keeps_current_set() -> None:
    """Checks a failing fit raises and leaves the current set unchanged."""
    session: CalibrationSession = _session()
    before: CalibrationSet = session.current

    with pytest.raises(InsufficientSamplesError):
        session.fit_mag()

    assert session.current is before
    assert session.history == ()


def test_fit_all_commits_successes_then_raises() -> None:
    """Checks fit_all keeps successful sensors when another one fails."""
    session: CalibrationSession = _session()
    for index in range(6):
        session.add_imu(
            RawImuSample(gyro=[0.0, 0.0, 0.1], accel=[0.0, 0.0, GRAVITY], timestamp=index)
        )
    _add_ellipsoid(session)

    with pytest.raises(DegenerateRangeError):
        session.fit_all()

    assert session.current.is_calibrated(Sensor.GYRO)
    assert not session.current.is_calibrated(Sensor.ACCEL)
    assert session.current.is_calibrated(Sensor.MAG)
    assert len(session.history) == 1


def test_fit_all_success() -> None:
    """Checks fit_all calibrates every sensor in one step."""
    session: CalibrationSession = _session()
    _add_six_orientations(session)
    _add_ellipsoid(session)

    cal: CalibrationSet = session.fit_all()

    for sensor in Sensor:
        assert cal.is_calibrated(sensor)
    assert len(session.history) == 1


def test_undo_restores_previous_set() -> None:
    """Checks undo walks back through the history."""
    session: CalibrationSession = _session()
    _add_six_orientations(session)
    original: CalibrationSet = session.current
    session.fit_gyro()

    assert session.undo() is original
    assert session.current is original
    assert session.undo() is original


def test_still_only_gates_moving_samples() -> None:
    """Checks still_only drops samples until the readings settle."""
    session: CalibrationSession = _session()
    kept: list[bool] = [
        session.add_imu(
            RawImuSample(gyro=[0.0, 0.0, 0.0], accel=[0.0, 0.0, 1.0], timestamp=index),
            still_only=True,
        )
        for index in range(400)
    ]

    assert not kept[0]
    assert kept[-1]
    assert session.batch.imu_count() == sum(kept)


def test_clear_drops_one_sequence() -> None:
    """Checks clear_imu and clear_mag drop only their own samples."""
    session: CalibrationSession = _session()
    _add_six_orientations(session)
    _add_ellipsoid(session, count=20)

    session.clear_imu()
    assert (session.batch.imu_count(), session.batch.mag_count()) == (0, 20)
    session.clear_mag()
    assert len(session.batch) == 0
