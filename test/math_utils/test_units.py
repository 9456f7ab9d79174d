################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Tests for array validation helpers."""

from __future__ import annotations

import numpy as np
import pytest

from imu_calibration.math_utils.units import as_float_array
from imu_calibration.math_utils.units import as_points_array


def test_as_float_array_coerces_lists() -> None:
    """Checks lists become float64 arrays of the requested shape."""
    array: np.ndarray = as_float_array([1, 2, 3], "v", (3,))

    assert array.dtype == np.float64
    np.testing.assert_array_equal(array, [1.0, 2.0, 3.0])


def test_as_float_array_rejects_shape_and_nan() -> None:
    """Checks wrong shapes and non-finite values are rejected."""
    with pytest.raises(ValueError):
        as_float_array([1.0, 2.0], "v", (3,))
    with pytest.raises(ValueError):
        as_float_array([1.0, np.nan, 2.0], "v", (3,))


def test_as_points_array() -> None:
    """Checks empty input maps to (0, 3) and bad shapes are rejected."""
    assert as_points_array([], "points").shape == (0, 3)
    assert as_points_array(np.ones((4, 3)), "points").shape == (4, 3)
    with pytest.raises(ValueError):
        as_points_array(np.ones((4, 2)), "points")
