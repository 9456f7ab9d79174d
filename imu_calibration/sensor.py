################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Sensor identifiers shared by fitters, errors and calibration sets."""

from __future__ import annotations

import enum


class Sensor(enum.Enum):
    """Sensor channels that can be calibrated independently."""

    GYRO = "gyro"
    ACCEL = "accel"
    MAG = "mag"
