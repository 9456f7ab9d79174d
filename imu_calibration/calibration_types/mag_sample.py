################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Raw magnetometer sample type."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from imu_calibration.calibration_types.imu_sample import require_timestamp
from imu_calibration.math_utils.units import as_float_array


@dataclass(frozen=True)
class RawMagSample:
    """Magnetometer reading in sensor units."""

    field: np.ndarray
    timestamp: float

    def __post_init__(self) -> None:
        """Validate sample fields and coerce arrays."""
        object.__setattr__(self, "field", as_float_array(self.field, "field", (3,)))
        object.__setattr__(
            self, "timestamp", require_timestamp(self.timestamp, "timestamp")
        )

    def magnitude(self) -> float:
        """Return the magnitude of the raw field."""
        return float(np.linalg.norm(self.field))
