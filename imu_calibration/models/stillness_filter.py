################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Moving-average gate that admits only samples taken while still."""

from __future__ import annotations

import numpy as np

from imu_calibration.math_utils.units import as_float_array


class StillnessFilterError(Exception):
    """Raised when the stillness filter is misconfigured."""


class StillnessFilter:
    """Accept a reading only when it stays close to its moving average.

    The average is updated with every reading before the comparison, so a
    device that starts moving is rejected until it settles again.
    """

    def __init__(self, alpha: float, threshold: float) -> None:
        if not 0.0 < alpha < 1.0:
            raise StillnessFilterError("alpha must be in (0, 1)")
        if threshold <= 0.0:
            raise StillnessFilterError("threshold must be positive")
        self._alpha: float = alpha
        self._threshold: float = threshold
        self._average: np.ndarray = np.zeros(3, dtype=np.float64)

    def accept(self, reading: np.ndarray) -> bool:
        """Update the moving average and return True if the reading is still."""
        vec: np.ndarray = as_float_array(reading, "reading", (3,))
        self._average = self._average * self._alpha + vec * (1.0 - self._alpha)
        return float(np.linalg.norm(self._average - vec)) < self._threshold

    def average(self) -> np.ndarray:
        """Return a copy of the current moving average."""
        return self._average.copy()

    def reset(self) -> None:
        """Reset the moving average to zero."""
        self._average = np.zeros(3, dtype=np.float64)
