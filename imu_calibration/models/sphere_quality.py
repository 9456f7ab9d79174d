################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Sphere coverage quality metrics for calibrated magnetometer data.

The unit sphere is split into 100 regions of roughly equal area: one polar
cap at each pole, two temperate bands of 15 regions and two tropical bands of
34 regions. Three percentages summarize how well a calibrated point cloud
covers and fits the sphere:

- gap error: penalty for empty or sparse regions (1.0 empty, 0.2 for one
  point, 0.01 for two points)
- variance error: standard deviation of point magnitudes over their mean
- wobble error: offset between region averages and ideal region centers
  relative to the mean radius

These follow the heuristics of PJRC MotionCal.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np

from imu_calibration.math_utils.units import as_points_array


REGION_COUNT: int = 100

# Latitude above which a point falls in a polar cap, in radians
_CAP_LATITUDE: float = 1.37046
# Latitude above which a point falls in a temperate band, in radians
_TEMPERATE_LATITUDE: float = 0.74776
# Latitude of temperate region centers, in radians
_TEMPERATE_CENTER: float = 1.05911
# Latitude of tropical region centers, in radians
_TROPICAL_CENTER: float = 0.37388

_TEMPERATE_REGIONS: int = 15
_TROPICAL_REGIONS: int = 34

# Error reported when there is nothing to measure
_EMPTY_ERROR: float = 100.0


@dataclass(frozen=True)
class SphereQuality:
    """Coverage and fit metrics of a calibrated point cloud, in percent."""

    gap_error: float
    variance_error: float
    wobble_error: float
    region_counts: np.ndarray


def sphere_regions(points: np.ndarray) -> np.ndarray:
    """Return the region index in [0, 100) of each point of an (N, 3) array."""
    pts: np.ndarray = as_points_array(points, "points")
    x: np.ndarray = pts[:, 0]
    y: np.ndarray = pts[:, 1]
    z: np.ndarray = pts[:, 2]
    longitude: np.ndarray = np.arctan2(y, x) + math.pi
    latitude: np.ndarray = math.pi / 2.0 - np.arctan2(np.hypot(x, y), z)

    temperate: np.ndarray = np.clip(
        np.floor(longitude * (_TEMPERATE_REGIONS / math.tau)).astype(int),
        0,
        _TEMPERATE_REGIONS - 1,
    )
    tropical: np.ndarray = np.clip(
        np.floor(longitude * (_TROPICAL_REGIONS / math.tau)).astype(int),
        0,
        _TROPICAL_REGIONS - 1,
    )

    regions: np.ndarray = np.where(latitude >= 0.0, tropical + 16, tropical + 50)
    in_temperate: np.ndarray = np.abs(latitude) > _TEMPERATE_LATITUDE
    regions = np.where(
        in_temperate & (latitude > 0.0), temperate + 1, regions
    )
    regions = np.where(
        in_temperate & (latitude < 0.0), temperate + 84, regions
    )
    regions = np.where(latitude > _CAP_LATITUDE, 0, regions)
    regions = np.where(latitude < -_CAP_LATITUDE, REGION_COUNT - 1, regions)
    return regions.astype(int)


def ideal_region_centers() -> np.ndarray:
    """Return the (100, 3) unit-sphere center of each region."""
    centers: np.ndarray = np.zeros((REGION_COUNT, 3), dtype=np.float64)
    centers[0] = [0.0, 0.0, 1.0]
    centers[REGION_COUNT - 1] = [0.0, 0.0, -1.0]
    bands: tuple[tuple[int, int, float], ...] = (
        (1, _TEMPERATE_REGIONS, _TEMPERATE_CENTER),
        (16, _TROPICAL_REGIONS, _TROPICAL_CENTER),
        (50, _TROPICAL_REGIONS, -_TROPICAL_CENTER),
        (84, _TEMPERATE_REGIONS, -_TEMPERATE_CENTER),
    )
    for first, count, latitude in bands:
        index: np.ndarray = np.arange(count, dtype=np.float64)
        longitude: np.ndarray = (index + 0.5) * (math.tau / count)
        centers[first : first + count, 0] = -np.cos(longitude) * math.cos(latitude)
        centers[first : first + count, 1] = -np.sin(longitude) * math.cos(latitude)
        centers[first : first + count, 2] = math.sin(latitude)
    return centers


def assess_sphere_quality(points: np.ndarray) -> SphereQuality:
    """Return gap, variance and wobble errors of calibrated points."""
    pts: np.ndarray = as_points_array(points, "points")
    regions: np.ndarray = sphere_regions(pts)
    counts: np.ndarray = np.bincount(regions, minlength=REGION_COUNT)

    gap_error: float = float(
        np.sum(counts == 0) * 1.0
        + np.sum(counts == 1) * 0.2
        + np.sum(counts == 2) * 0.01
    )

    if pts.shape[0] == 0:
        return SphereQuality(
            gap_error=gap_error,
            variance_error=_EMPTY_ERROR,
            wobble_error=_EMPTY_ERROR,
            region_counts=counts,
        )

    magnitudes: np.ndarray = np.linalg.norm(pts, axis=1)
    radius: float = float(magnitudes.mean())
    if radius <= 0.0:
        return SphereQuality(
            gap_error=gap_error,
            variance_error=_EMPTY_ERROR,
            wobble_error=_EMPTY_ERROR,
            region_counts=counts,
        )
    variance_error: float = float(magnitudes.std()) / radius * 100.0

    sums: np.ndarray = np.zeros((REGION_COUNT, 3), dtype=np.float64)
    np.add.at(sums, regions, pts)
    occupied: np.ndarray = counts > 0
    averages: np.ndarray = sums[occupied] / counts[occupied, np.newaxis]
    offsets: np.ndarray = averages - ideal_region_centers()[occupied] * radius
    wobble_error: float = (
        float(np.linalg.norm(offsets.mean(axis=0))) / radius * 100.0
    )

    return SphereQuality(
        gap_error=gap_error,
        variance_error=variance_error,
        wobble_error=wobble_error,
        region_counts=counts,
    )
