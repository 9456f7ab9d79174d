################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################
"""Linear algebra primitives for the calibration fitters.

Vectors and matrices are plain float64 numpy arrays. Element-wise and
product operations use numpy operators directly; the helpers here add the
conditioning checks the fitters rely on so that near-singular systems and
non-convergent decompositions surface as typed errors instead of NaN/Inf.

Matrices handled here are small: 3x3 for shape matrices and up to 9x9 for the
ellipsoid normal equations.
"""

from __future__ import annotations

import math

import numpy as np
from numpy.typing import NDArray

from imu_calibration.errors import NonConvergentError
from imu_calibration.errors import NotPositiveDefiniteError
from imu_calibration.errors import SingularMatrixError

from .units import assert_finite


# Determinant magnitude below which a matrix is treated as singular
SINGULAR_EPS: float = 1e-10
# Maximum number of Jacobi sweeps before giving up
EIG_MAX_ITERS: int = 100
# Off-diagonal norm tolerance for Jacobi convergence
EIG_TOL: float = 1e-9
# Largest matrix dimension supported by the helpers
MAX_DIM: int = 9


class Linalg:
    """General linear algebra helpers."""

    @staticmethod
    def ensure_shape(x: NDArray[np.float64], shape: tuple[int, ...], name: str) -> None:
        """Ensure an array has the expected shape."""
        if x.shape != shape:
            raise ValueError(f"{name} must have shape {shape}")

    @staticmethod
    def ensure_square(A: NDArray[np.float64], name: str) -> NDArray[np.float64]:
        """Return A as a finite square float matrix of size 1..9."""
        mat: NDArray[np.float64] = np.asarray(A, dtype=float)
        if mat.ndim != 2 or mat.shape[0] != mat.shape[1]:
            raise ValueError(f"{name} must be a square matrix")
        if not 1 <= mat.shape[0] <= MAX_DIM:
            raise ValueError(f"{name} must have size between 1 and {MAX_DIM}")
        assert_finite(mat, name)
        return mat

    @staticmethod
    def sym(A: NDArray[np.float64]) -> NDArray[np.float64]:
        """Return the symmetric part of a square matrix."""
        mat: NDArray[np.float64] = Linalg.ensure_square(A, "A")
        return 0.5 * (mat + mat.T)

    @staticmethod
    def det(A: NDArray[np.float64]) -> float:
        """Return the determinant of a square matrix."""
        mat: NDArray[np.float64] = Linalg.ensure_square(A, "A")
        return float(np.linalg.det(mat))

    @staticmethod
    def inverse(
        A: NDArray[np.float64],
        eps: float = SINGULAR_EPS,
    ) -> NDArray[np.float64]:
        """Invert a square matrix, rejecting near-singular input."""
        mat: NDArray[np.float64] = Linalg.ensure_square(A, "A")
        Linalg._check_conditioning(mat, eps)
        try:
            inv: NDArray[np.float64] = np.linalg.inv(mat)
        except np.linalg.LinAlgError as exc:
            raise SingularMatrixError(f"matrix inversion failed: {exc}") from exc
        if not np.all(np.isfinite(inv)):
            raise SingularMatrixError("matrix inverse is not finite")
        return inv

    @staticmethod
    def solve(
        A: NDArray[np.float64],
        b: NDArray[np.float64],
        eps: float = SINGULAR_EPS,
    ) -> NDArray[np.float64]:
        """Solve A x = b for a square A, rejecting near-singular systems."""
        mat: NDArray[np.float64] = Linalg.ensure_square(A, "A")
        rhs: NDArray[np.float64] = np.asarray(b, dtype=float)
        if rhs.shape[0] != mat.shape[0]:
            raise ValueError("b must have as many rows as A")
        assert_finite(rhs, "b")
        Linalg._check_conditioning(mat, eps)
        try:
            x: NDArray[np.float64] = np.linalg.solve(mat, rhs)
        except np.linalg.LinAlgError as exc:
            raise SingularMatrixError(f"linear solve failed: {exc}") from exc
        if not np.all(np.isfinite(x)):
            raise SingularMatrixError("linear solve produced non-finite values")
        return x

    @staticmethod
    def eigh(
        A: NDArray[np.float64],
        max_iters: int = EIG_MAX_ITERS,
        tol: float = EIG_TOL,
    ) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
        """Eigen-decompose a symmetric matrix with cyclic Jacobi rotations.

        Returns:
            Eigenvalues in ascending order and a matrix whose columns are the
            matching unit eigenvectors.

        Raises:
            NonConvergentError: If the off-diagonal norm is still above tol
                after max_iters sweeps. The tolerance is relative to the
                Frobenius norm of A, floored at 1.
        """
        mat: NDArray[np.float64] = Linalg.ensure_square(A, "A")
        if max_iters <= 0:
            raise ValueError("max_iters must be positive")
        if tol <= 0.0:
            raise ValueError("tol must be positive")
        scale: float = max(1.0, float(np.max(np.abs(mat))))
        if not np.allclose(mat, mat.T, rtol=1e-9, atol=1e-12 * scale):
            raise ValueError("A must be symmetric")

        size: int = mat.shape[0]
        a: NDArray[np.float64] = 0.5 * (mat + mat.T)
        v: NDArray[np.float64] = np.eye(size, dtype=float)
        threshold: float = tol * max(1.0, float(np.linalg.norm(a)))

        converged: bool = False
        for _ in range(max_iters):
            if Linalg._off_diag_norm(a) <= threshold:
                converged = True
                break
            for p in range(size - 1):
                for q in range(p + 1, size):
                    apq: float = float(a[p, q])
                    if apq == 0.0:
                        continue
                    tau: float = float(a[q, q] - a[p, p]) / (2.0 * apq)
                    t_sign: float = 1.0 if tau >= 0.0 else -1.0
                    t: float = t_sign / (abs(tau) + math.sqrt(1.0 + tau * tau))
                    c: float = 1.0 / math.sqrt(1.0 + t * t)
                    s: float = t * c
                    rot: NDArray[np.float64] = np.eye(size, dtype=float)
                    rot[p, p] = c
                    rot[q, q] = c
                    rot[p, q] = s
                    rot[q, p] = -s
                    a = rot.T @ a @ rot
                    a[p, q] = 0.0
                    a[q, p] = 0.0
                    v = v @ rot
        if not converged and Linalg._off_diag_norm(a) > threshold:
            raise NonConvergentError(
                f"Jacobi eigen-decomposition did not converge in {max_iters} sweeps"
            )

        eigvals: NDArray[np.float64] = np.diag(a).copy()
        order: NDArray[np.intp] = np.argsort(eigvals, kind="stable")
        eigvals = eigvals[order]
        eigvecs: NDArray[np.float64] = v[:, order]
        eigvecs = eigvecs / np.linalg.norm(eigvecs, axis=0)
        return eigvals, eigvecs

    @staticmethod
    def _check_conditioning(mat: NDArray[np.float64], eps: float) -> None:
        det: float = float(np.linalg.det(mat))
        if not math.isfinite(det) or abs(det) < eps:
            raise SingularMatrixError(
                f"matrix is singular (|det| = {abs(det):.3e} < {eps:.1e})"
            )

    @staticmethod
    def _off_diag_norm(mat: NDArray[np.float64]) -> float:
        off: NDArray[np.float64] = mat - np.diag(np.diag(mat))
        return float(np.linalg.norm(off))


class Mat3:
    """Matrix utilities for 3x3 matrices."""

    @staticmethod
    def is_spd(A: NDArray[np.float64], tol: float = 1e-12) -> bool:
        """Check whether a matrix is symmetric positive definite."""
        mat: NDArray[np.float64] = np.asarray(A, dtype=float)
        if mat.shape != (3, 3):
            return False
        if not np.all(np.isfinite(mat)):
            return False
        scale: float = max(1.0, float(np.max(np.abs(mat))))
        if not np.allclose(mat, mat.T, rtol=1e-9, atol=tol * scale):
            return False
        eigvals: NDArray[np.float64] = np.asarray(np.linalg.eigvalsh(mat), dtype=float)
        return bool(np.all(eigvals > tol))

    @staticmethod
    def sqrt_spd(
        A: NDArray[np.float64],
        max_iters: int = EIG_MAX_ITERS,
        tol: float = EIG_TOL,
    ) -> NDArray[np.float64]:
        """Return the principal square root of a symmetric positive-definite matrix."""
        mat: NDArray[np.float64] = np.asarray(A, dtype=float)
        Linalg.ensure_shape(mat, (3, 3), "A")
        eigvals: NDArray[np.float64]
        eigvecs: NDArray[np.float64]
        eigvals, eigvecs = Linalg.eigh(mat, max_iters=max_iters, tol=tol)
        return Mat3.sqrt_from_eigh(eigvals, eigvecs)

    @staticmethod
    def sqrt_from_eigh(
        eigvals: NDArray[np.float64],
        eigvecs: NDArray[np.float64],
    ) -> NDArray[np.float64]:
        """Return V diag(sqrt(eigvals)) Vᵀ from an existing eigen-decomposition."""
        values: NDArray[np.float64] = np.asarray(eigvals, dtype=float)
        vectors: NDArray[np.float64] = np.asarray(eigvecs, dtype=float)
        Linalg.ensure_shape(values, (3,), "eigvals")
        Linalg.ensure_shape(vectors, (3, 3), "eigvecs")
        if np.any(values <= 0.0):
            raise NotPositiveDefiniteError(
                f"matrix has non-positive eigenvalues {values.tolist()}"
            )
        root: NDArray[np.float64] = vectors @ np.diag(np.sqrt(values)) @ vectors.T
        return Linalg.sym(root)
