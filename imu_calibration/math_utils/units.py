################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################
"""Physical constants and array validation helpers."""

from __future__ import annotations

from typing import Any

import numpy as np
from numpy.typing import NDArray


class PhysicalConstants:
    """Physical constants used by the fitters."""

    GRAVITY_MPS2: float = 9.80665


def assert_finite(x: NDArray[np.float64], name: str) -> None:
    """Raise ValueError when the array contains non-finite values."""
    if not np.all(np.isfinite(x)):
        raise ValueError(f"{name} must be finite")


def as_float_array(value: Any, name: str, shape: tuple[int, ...]) -> NDArray[np.float64]:
    """Coerce a value to a finite float64 numpy array with a specific shape."""
    array: NDArray[np.float64] = np.asarray(value, dtype=np.float64)
    if array.shape != shape:
        raise ValueError(f"{name} must have shape {shape}")
    assert_finite(array, name)
    return array


def as_points_array(value: Any, name: str) -> NDArray[np.float64]:
    """Coerce a value to a finite float64 array of shape (N, 3)."""
    array: NDArray[np.float64] = np.asarray(value, dtype=np.float64)
    if array.size == 0:
        return np.zeros((0, 3), dtype=np.float64)
    if array.ndim != 2 or array.shape[1] != 3:
        raise ValueError(f"{name} must have shape (N, 3)")
    assert_finite(array, name)
    return array
