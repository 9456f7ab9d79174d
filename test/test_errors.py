################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Tests for the calibration error taxonomy."""

from __future__ import annotations

import pytest

from imu_calibration.errors import CalibrationError
from imu_calibration.errors import DegenerateRangeError
from imu_calibration.errors import InsufficientSamplesError
from imu_calibration.errors import NonConvergentError
from imu_calibration.errors import NotPositiveDefiniteError
from imu_calibration.errors import SingularMatrixError
from imu_calibration.sensor import Sensor


@pytest.mark.parametrize(
    "error_type",
    [
        InsufficientSamplesError,
        DegenerateRangeError,
        SingularMatrixError,
        NotPositiveDefiniteError,
        NonConvergentError,
    ],
)
def test_errors_share_base_class(error_type: type[CalibrationError]) -> None:
    """Checks every fitting error is a CalibrationError."""
    assert issubclass(error_type, CalibrationError)


def test_error_without_context_prints_message() -> None:
    """Checks an error without context prints only its message."""
    error: SingularMatrixError = SingularMatrixError("det too small")

    assert str(error) == "det too small"
    assert error.sensor is None
    assert error.stage is None


def test_with_context_keeps_type_and_message() -> None:
    """Checks with_context annotates a copy of the same error type."""
    error: SingularMatrixError = SingularMatrixError("det too small")

    annotated: SingularMatrixError = error.with_context(Sensor.MAG, "center")

    assert type(annotated) is SingularMatrixError
    assert annotated.message == "det too small"
    assert annotated.sensor is Sensor.MAG
    assert annotated.stage == "center"
    assert str(annotated) == "[mag/center] det too small"
    assert error.sensor is None
