################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Tests for the moving-average stillness filter."""

from __future__ import annotations

import numpy as np
import pytest

from imu_calibration.models.stillness_filter import StillnessFilter
from imu_calibration.models.stillness_filter import StillnessFilterError


def test_filter_settles_on_constant_reading() -> None:
    """Checks a constant reading is accepted once the average converges."""
    still: StillnessFilter = StillnessFilter(alpha=0.5, threshold=1e-3)
    reading: np.ndarray = np.array([0.0, 0.0, 1.0])

    accepted: list[bool] = [still.accept(reading) for _ in range(20)]

    assert not accepted[0]
    assert accepted[-1]
    np.testing.assert_allclose(still.average(), reading, atol=1e-3)


def test_filter_rejects_motion() -> None:
    """Checks a sudden change is rejected after settling."""
    still: StillnessFilter = StillnessFilter(alpha=0.5, threshold=1e-3)
    for _ in range(30):
        still.accept(np.array([0.0, 0.0, 1.0]))

    assert not still.accept(np.array([0.5, 0.0, 1.0]))


def test_reset_clears_average() -> None:
    """Checks reset returns the average to zero."""
    still: StillnessFilter = StillnessFilter(alpha=0.9, threshold=0.1)
    still.accept(np.ones(3))

    still.reset()

    np.testing.assert_array_equal(still.average(), np.zeros(3))


def test_invalid_settings() -> None:
    """Checks alpha and threshold are validated."""
    with pytest.raises(StillnessFilterError):
        StillnessFilter(alpha=1.0, threshold=0.1)
    with pytest.raises(StillnessFilterError):
        StillnessFilter(alpha=0.5, threshold=0.0)
