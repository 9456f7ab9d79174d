################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Structured configuration schema for IMU calibration fitting."""

from __future__ import annotations

from dataclasses import dataclass
from dataclasses import fields
from dataclasses import replace
from typing import Any

from imu_calibration.math_utils.linalg import EIG_MAX_ITERS
from imu_calibration.math_utils.linalg import EIG_TOL
from imu_calibration.math_utils.linalg import SINGULAR_EPS
from imu_calibration.math_utils.units import PhysicalConstants


# Determinant magnitude below which a matrix is treated as singular
LINALG_SINGULAR_EPS: float = SINGULAR_EPS
# Maximum Jacobi sweeps for symmetric eigen-decomposition
LINALG_EIG_MAX_ITERS: int = EIG_MAX_ITERS
# Off-diagonal tolerance for symmetric eigen-decomposition
LINALG_EIG_TOL: float = EIG_TOL

# Minimum stationary samples for the gyro offset fit
GYRO_MIN_SAMPLES: int = 50

# Minimum samples for the accel offset/scale fit
ACCEL_MIN_SAMPLES: int = 6
# Gravity magnitude the corrected accel should report at rest
ACCEL_GRAVITY: float = PhysicalConstants.GRAVITY_MPS2
# Minimum per-axis spread before the scale is considered degenerate
ACCEL_RANGE_EPS: float = 1e-6
# Accel fit method, "min_max" or "six_position"
ACCEL_METHOD: str = "min_max"
# Fraction of gravity an axis must exceed to join a six-position cluster
ACCEL_SIX_POSITION_THRESHOLD: float = 0.75

# Minimum samples for the magnetometer ellipsoid fit
MAG_MIN_SAMPLES: int = 9

# Moving-average weight for gyro stillness gating
STILLNESS_GYRO_ALPHA: float = 0.98
# Max distance from the moving average for a still gyro sample
STILLNESS_GYRO_THRESHOLD: float = 1e-3
# Moving-average weight for accel stillness gating
STILLNESS_ACCEL_ALPHA: float = 0.95
# Max distance from the moving average for a still accel sample
STILLNESS_ACCEL_THRESHOLD: float = 1e-2

# Output format for saved files whose path has no .yaml, .yml or .json suffix
SAVE_FORMAT: str = "yaml"
# Use atomic write for persistence
SAVE_ATOMIC_WRITE: bool = True


class CalibrationParamsError(Exception):
    """Raised when calibration parameter validation fails."""


def _require_positive(value: float, name: str) -> None:
    """Require a positive value."""
    if value <= 0.0:
        raise CalibrationParamsError(f"{name} must be positive")


def _require_positive_int(value: int, name: str) -> None:
    """Require a positive integer value."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise CalibrationParamsError(f"{name} must be an int")
    if value <= 0:
        raise CalibrationParamsError(f"{name} must be positive")


def _require_unit_interval(value: float, name: str) -> None:
    """Require a value in the open interval (0, 1)."""
    if not 0.0 < value < 1.0:
        raise CalibrationParamsError(f"{name} must be in (0, 1)")


@dataclass(frozen=True)
class LinalgParams:
    """Conditioning thresholds for the linear algebra primitives.

    The default singular_eps accepts magnetometer ellipsoids with axis ratios
    up to about 8:1. Strongly anisotropic sensors yield tiny quadric
    determinants (a 10:30:100 ellipsoid gives |det Q| near 3e-13) and need a
    lower singular_eps.
    """

    # Determinant magnitude below which a matrix is singular
    singular_eps: float = LINALG_SINGULAR_EPS
    # Maximum Jacobi sweeps
    eig_max_iters: int = LINALG_EIG_MAX_ITERS
    # Jacobi off-diagonal tolerance
    eig_tol: float = LINALG_EIG_TOL


@dataclass(frozen=True)
class GyroParams:
    """Gyro offset fit parameters."""

    # Minimum stationary samples
    min_samples: int = GYRO_MIN_SAMPLES


@dataclass(frozen=True)
class AccelParams:
    """Accel offset/scale fit parameters."""

    # Minimum samples
    min_samples: int = ACCEL_MIN_SAMPLES
    # Gravity magnitude in output units
    gravity: float = ACCEL_GRAVITY
    # Minimum per-axis spread
    range_eps: float = ACCEL_RANGE_EPS
    # Fit method identifier
    method: str = ACCEL_METHOD
    # Six-position cluster threshold as a fraction of gravity
    six_position_threshold: float = ACCEL_SIX_POSITION_THRESHOLD


@dataclass(frozen=True)
class MagParams:
    """Magnetometer ellipsoid fit parameters."""

    # Minimum samples
    min_samples: int = MAG_MIN_SAMPLES


@dataclass(frozen=True)
class StillnessParams:
    """Moving-average stillness gating for stationary captures."""

    # Gyro moving-average weight
    gyro_alpha: float = STILLNESS_GYRO_ALPHA
    # Gyro distance threshold
    gyro_threshold: float = STILLNESS_GYRO_THRESHOLD
    # Accel moving-average weight
    accel_alpha: float = STILLNESS_ACCEL_ALPHA
    # Accel distance threshold
    accel_threshold: float = STILLNESS_ACCEL_THRESHOLD


@dataclass(frozen=True)
class SaveParams:
    """Persistence parameters."""

    # Output format name
    format: str = SAVE_FORMAT
    # Use atomic write for persistence
    atomic_write: bool = SAVE_ATOMIC_WRITE


@dataclass(frozen=True)
class CalibrationParams:
    """Complete configuration tree for calibration fitting."""

    linalg: LinalgParams
    gyro: GyroParams
    accel: AccelParams
    mag: MagParams
    stillness: StillnessParams
    save: SaveParams

    @classmethod
    def defaults(cls) -> CalibrationParams:
        """Return the default calibration parameter tree."""
        return cls(
            linalg=LinalgParams(),
            gyro=GyroParams(),
            accel=AccelParams(),
            mag=MagParams(),
            stillness=StillnessParams(),
            save=SaveParams(),
        )

    @classmethod
    def from_nested_dict(cls, data: dict[str, Any]) -> CalibrationParams:
        """Return defaults overridden by a nested dict of namespaces."""
        if not isinstance(data, dict):
            raise CalibrationParamsError("configuration must be a mapping")
        defaults: CalibrationParams = cls.defaults()
        overrides: dict[str, Any] = {}
        namespaces: dict[str, Any] = {
            field.name: getattr(defaults, field.name) for field in fields(cls)
        }
        for name, values in data.items():
            if name not in namespaces:
                raise CalibrationParamsError(f"unknown namespace: {name}")
            if not isinstance(values, dict):
                raise CalibrationParamsError(f"{name} must be a mapping")
            known: set[str] = {field.name for field in fields(namespaces[name])}
            unknown: set[str] = set(values) - known
            if unknown:
                raise CalibrationParamsError(
                    f"unknown keys in {name}: {sorted(unknown)}"
                )
            overrides[name] = replace(namespaces[name], **values)
        return replace(defaults, **overrides)

    def validate(self) -> None:
        """Validate parameter invariants and constraints."""
        _require_positive(self.linalg.singular_eps, "linalg.singular_eps")
        _require_positive_int(self.linalg.eig_max_iters, "linalg.eig_max_iters")
        _require_positive(self.linalg.eig_tol, "linalg.eig_tol")

        _require_positive_int(self.gyro.min_samples, "gyro.min_samples")

        _require_positive_int(self.accel.min_samples, "accel.min_samples")
        if self.accel.min_samples < 6:
            raise CalibrationParamsError("accel.min_samples must be at least 6")
        _require_positive(self.accel.gravity, "accel.gravity")
        _require_positive(self.accel.range_eps, "accel.range_eps")
        _require_unit_interval(
            self.accel.six_position_threshold, "accel.six_position_threshold"
        )

        _require_positive_int(self.mag.min_samples, "mag.min_samples")
        if self.mag.min_samples < 9:
            raise CalibrationParamsError("mag.min_samples must be at least 9")

        _require_unit_interval(self.stillness.gyro_alpha, "stillness.gyro_alpha")
        _require_positive(self.stillness.gyro_threshold, "stillness.gyro_threshold")
        _require_unit_interval(self.stillness.accel_alpha, "stillness.accel_alpha")
        _require_positive(self.stillness.accel_threshold, "stillness.accel_threshold")

    def replace(self, **namespace_overrides: Any) -> CalibrationParams:
        """Return a modified copy of the parameters."""
        return replace(self, **namespace_overrides)

    def as_nested_dict(self) -> dict[str, Any]:
        """Return a nested dict representation for debugging."""
        return _dataclass_to_dict(self)


def _dataclass_to_dict(value: Any) -> Any:
    """Convert dataclasses into plain Python values."""
    if hasattr(value, "__dataclass_fields__"):
        return {
            field.name: _dataclass_to_dict(getattr(value, field.name))
            for field in fields(value)
        }
    return value
