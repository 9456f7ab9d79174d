################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Tests for calibration parameter defaults and validation."""

from __future__ import annotations

from dataclasses import replace

import pytest

from imu_calibration.config.calibration_params import CalibrationParams
from imu_calibration.config.calibration_params import CalibrationParamsError
from imu_calibration.config.calibration_params import GyroParams


def test_defaults_validate() -> None:
    """Checks the default parameter tree is valid."""
    params: CalibrationParams = CalibrationParams.defaults()

    params.validate()
    assert params.linalg.singular_eps == 1e-10
    assert params.linalg.eig_max_iters == 100
    assert params.gyro.min_samples == 50
    assert params.accel.min_samples == 6
    assert params.mag.min_samples == 9
    assert params.accel.method == "min_max"


@pytest.mark.parametrize(
    "namespace, overrides",
    [
        ("accel", {"min_samples": 5}),
        ("mag", {"min_samples": 8}),
        ("gyro", {"min_samples": 0}),
        ("linalg", {"singular_eps": 0.0}),
        ("stillness", {"gyro_alpha": 1.0}),
        ("accel", {"six_position_threshold": 0.0}),
    ],
)
def test_validate_rejects_bad_values(namespace: str, overrides: dict[str, object]) -> None:
    """Checks invalid values raise CalibrationParamsError."""
    defaults: CalibrationParams = CalibrationParams.defaults()
    params: CalibrationParams = defaults.replace(
        **{namespace: replace(getattr(defaults, namespace), **overrides)}
    )

    with pytest.raises(CalibrationParamsError):
        params.validate()


def test_replace_returns_copy() -> None:
    """Checks replace leaves the original tree untouched."""
    defaults: CalibrationParams = CalibrationParams.defaults()

    params: CalibrationParams = defaults.replace(gyro=GyroParams(min_samples=10))

    assert params.gyro.min_samples == 10
    assert defaults.gyro.min_samples == 50


def test_from_nested_dict_overrides_defaults() -> None:
    """Checks nested overrides are applied on top of the defaults."""
    params: CalibrationParams = CalibrationParams.from_nested_dict(
        {"accel": {"method": "six_position"}, "mag": {"min_samples": 20}}
    )

    assert params.accel.method == "six_position"
    assert params.accel.min_samples == 6
    assert params.mag.min_samples == 20


def test_from_nested_dict_rejects_unknown_names() -> None:
    """Checks unknown namespaces and keys are rejected."""
    with pytest.raises(CalibrationParamsError):
        CalibrationParams.from_nested_dict({"compass": {}})
    with pytest.raises(CalibrationParamsError):
        CalibrationParams.from_nested_dict({"gyro": {"samples": 3}})
    with pytest.raises(CalibrationParamsError):
        CalibrationParams.from_nested_dict({"gyro": 3})


def test_as_nested_dict_round_trips() -> None:
    """Checks the nested dict form rebuilds the same parameters."""
    params: CalibrationParams = CalibrationParams.defaults()

    nested: dict[str, object] = params.as_nested_dict()

    assert nested["mag"] == {"min_samples": 9}
    assert CalibrationParams.from_nested_dict(nested) == params
