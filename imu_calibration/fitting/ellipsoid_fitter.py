################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Ellipsoid fitting for magnetometer hard-iron and soft-iron calibration.

A magnetometer rotated through many orientations in a uniform field traces an
ellipsoid. The fitter recovers it in three steps:

1. Center the samples at their centroid and scale them by their RMS radius.
   Raw fields often carry hard-iron offsets as large as the field itself, and
   the normal equations are poorly conditioned without this step.

2. Fit the quadric

       A x² + B y² + C z² + 2D xy + 2E xz + 2F yz + 2G x + 2H y + 2I z = 1

   by ordinary least squares over the nine coefficients, solving the normal
   equations (MᵀM / N) p = Mᵀ1 / N.

3. With Q = [[A, D, E], [D, B, F], [E, F, C]] and v = [G, H, I], the center
   is c = -Q⁻¹v and the ellipsoid is (z - c)ᵀ Q (z - c) = k with
   k = 1 + cᵀQc. Q must be positive-definite. The soft-iron matrix is the
   principal square root of Q / k, rescaled back to raw units, so corrected
   samples land on the unit sphere.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable
from typing import Sequence

import numpy as np

from imu_calibration.calibration_types import FitInfo
from imu_calibration.calibration_types import MagCalibration
from imu_calibration.calibration_types import RawMagSample
from imu_calibration.config.calibration_params import CalibrationParams
from imu_calibration.config.calibration_params import LinalgParams
from imu_calibration.errors import CalibrationError
from imu_calibration.errors import InsufficientSamplesError
from imu_calibration.errors import NotPositiveDefiniteError
from imu_calibration.errors import SingularMatrixError
from imu_calibration.math_utils.linalg import Linalg
from imu_calibration.math_utils.linalg import Mat3
from imu_calibration.math_utils.units import as_points_array
from imu_calibration.sensor import Sensor


_LOG: logging.Logger = logging.getLogger(__name__)

# Number of quadric coefficients solved for
QUADRIC_TERMS: int = 9


@dataclass(frozen=True)
class EllipsoidFit:
    """Result of an ellipsoid fit with diagnostics.

    Attributes:
        calibration: Magnetometer calibration derived from the ellipsoid
        coefficients: Quadric coefficients [A..I] in the centered, scaled frame
        centroid: Centroid of the raw samples
        scale: RMS radius used to normalize the centered samples
        shape_eigenvalues: Ascending eigenvalues of the raw-unit shape matrix
        radii: Ellipsoid semi-axes in raw units, matching shape_eigenvalues
        residual: Mean squared distance of corrected samples from the unit sphere
    """

    calibration: MagCalibration
    coefficients: np.ndarray
    centroid: np.ndarray
    scale: float
    shape_eigenvalues: np.ndarray
    radii: np.ndarray
    residual: float

    @property
    def hard_iron(self) -> np.ndarray:
        return self.calibration.hard_iron

    @property
    def soft_iron(self) -> np.ndarray:
        return self.calibration.soft_iron


class EllipsoidFitter:
    """Least-squares ellipsoid fitter for magnetometer batches."""

    def __init__(
        self,
        params: CalibrationParams | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._params: CalibrationParams = (
            CalibrationParams.defaults() if params is None else params
        )
        self._clock: Callable[[], float] = clock

    def fit(self, samples: Sequence[RawMagSample]) -> EllipsoidFit:
        """Fit an ellipsoid to a batch of magnetometer samples."""
        self._require_count(len(samples))
        points: np.ndarray = np.stack([sample.field for sample in samples], axis=0)
        return self.fit_points(points)

    def fit_points(self, points: np.ndarray) -> EllipsoidFit:
        """Fit an ellipsoid to an (N, 3) array of raw field vectors."""
        raw: np.ndarray = as_points_array(points, "points")
        count: int = raw.shape[0]
        self._require_count(count)

        centroid: np.ndarray = raw.mean(axis=0)
        centered: np.ndarray = raw - centroid
        scale: float = float(np.sqrt(np.mean(np.sum(centered * centered, axis=1))))
        if not scale > 0.0:
            raise SingularMatrixError(
                "all samples coincide",
                sensor=Sensor.MAG,
                stage="normal_equations",
            )
        normalized: np.ndarray = centered / scale

        coefficients: np.ndarray = self._solve_quadric(normalized)
        a, b, c, d, e, f, g, h, i = (float(value) for value in coefficients)
        Q: np.ndarray = np.array(
            [
                [a, d, e],
                [d, b, f],
                [e, f, c],
            ],
            dtype=np.float64,
        )
        v: np.ndarray = np.array([g, h, i], dtype=np.float64)

        linalg_params: LinalgParams = self._params.linalg
        try:
            center: np.ndarray = -Linalg.inverse(Q, eps=linalg_params.singular_eps) @ v
        except CalibrationError as exc:
            raise exc.with_context(Sensor.MAG, "center") from exc

        eigvals: np.ndarray
        eigvecs: np.ndarray
        try:
            eigvals, eigvecs = Linalg.eigh(
                Q,
                max_iters=linalg_params.eig_max_iters,
                tol=linalg_params.eig_tol,
            )
        except CalibrationError as exc:
            raise exc.with_context(Sensor.MAG, "eigen") from exc
        if np.any(eigvals <= 0.0):
            raise NotPositiveDefiniteError(
                f"fitted quadric is not an ellipsoid (eigenvalues {eigvals.tolist()}); "
                "collect samples over more orientations",
                sensor=Sensor.MAG,
                stage="eigen",
            )

        # (z - c)ᵀ Q (z - c) = k, with k >= 1 since Q is positive-definite
        k: float = 1.0 + float(center @ Q @ center)
        if not k > 0.0:
            raise NotPositiveDefiniteError(
                f"ellipsoid level {k:.3e} is not positive",
                sensor=Sensor.MAG,
                stage="eigen",
            )
        shape_eigvals: np.ndarray = eigvals / (k * scale * scale)
        soft_iron: np.ndarray = Mat3.sqrt_from_eigh(eigvals / k, eigvecs) / scale
        hard_iron: np.ndarray = centroid + scale * center

        corrected: np.ndarray = (raw - hard_iron) @ soft_iron.T
        distance: np.ndarray = np.linalg.norm(corrected, axis=1) - 1.0
        residual: float = float(np.mean(distance * distance))

        calibration: MagCalibration = MagCalibration(
            soft_iron=soft_iron,
            hard_iron=hard_iron,
            info=FitInfo.fitted(count, residual, self._clock()),
        )

        _LOG.info(
            "Mag ellipsoid fit from %d samples: hard iron %s, residual %.3e",
            count,
            hard_iron.tolist(),
            residual,
        )
        return EllipsoidFit(
            calibration=calibration,
            coefficients=coefficients,
            centroid=centroid,
            scale=scale,
            shape_eigenvalues=shape_eigvals,
            radii=1.0 / np.sqrt(shape_eigvals),
            residual=residual,
        )

    def _require_count(self, count: int) -> None:
        min_samples: int = self._params.mag.min_samples
        if count < min_samples:
            raise InsufficientSamplesError(
                f"ellipsoid fit needs at least {min_samples} samples, got {count}",
                sensor=Sensor.MAG,
                stage="sample_count",
            )

    def _solve_quadric(self, normalized: np.ndarray) -> np.ndarray:
        """Solve the normal equations for the nine quadric coefficients."""
        design: np.ndarray = design_matrix(normalized)
        count: int = design.shape[0]
        normal: np.ndarray = (design.T @ design) / float(count)
        rhs: np.ndarray = design.mean(axis=0)
        try:
            return Linalg.solve(normal, rhs, eps=self._params.linalg.singular_eps)
        except CalibrationError as exc:
            _LOG.debug("Normal equations rejected: %s", exc)
            raise exc.with_context(Sensor.MAG, "normal_equations") from exc


def design_matrix(points: np.ndarray) -> np.ndarray:
    """Return the (N, 9) quadric design matrix of an (N, 3) point array."""
    x: np.ndarray = points[:, 0]
    y: np.ndarray = points[:, 1]
    z: np.ndarray = points[:, 2]
    return np.column_stack(
        [
            x * x,
            y * y,
            z * z,
            2.0 * x * y,
            2.0 * x * z,
            2.0 * y * z,
            2.0 * x,
            2.0 * y,
            2.0 * z,
        ]
    )


def fit_mag_ellipsoid(
    samples: Sequence[RawMagSample],
    params: CalibrationParams | None = None,
) -> MagCalibration:
    """Fit the magnetometer calibration of a multi-orientation batch."""
    return EllipsoidFitter(params).fit(samples).calibration
