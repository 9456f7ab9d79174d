################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Text line protocol used by serial sensor bridges.

Each newline-terminated line carries one reading:

    imu <gx> <gy> <gz> <ax> <ay> <az>
    mag <mx> <my> <mz>

Other lines (boot banners, debug prints) are ignored.
"""

from __future__ import annotations

import logging
import math
import time
from typing import Callable
from typing import Iterable

from imu_calibration.calibration_types import RawImuSample
from imu_calibration.calibration_types import RawMagSample
from imu_calibration.calibration_types import SampleBatch


_LOG: logging.Logger = logging.getLogger(__name__)

IMU_TAG: str = "imu"
MAG_TAG: str = "mag"


class LineProtocolError(Exception):
    """Raised when the byte stream cannot be decoded into lines."""


class LineFramer:
    """Split a byte stream into text lines, buffering partial lines."""

    def __init__(self) -> None:
        self._buffer: bytearray = bytearray()

    def feed(self, data: bytes) -> list[str]:
        """Append bytes and return every complete line without terminators."""
        self._buffer.extend(data)
        lines: list[str] = []
        while True:
            newline: int = self._buffer.find(b"\n")
            if newline < 0:
                break
            raw: bytes = bytes(self._buffer[: newline + 1])
            del self._buffer[: newline + 1]
            try:
                text: str = raw.decode("utf-8")
            except UnicodeDecodeError as exc:
                raise LineProtocolError("Invalid UTF-8 in sensor stream") from exc
            lines.append(text.rstrip("\r\n"))
        return lines

    def pending(self) -> int:
        """Return the number of buffered bytes without a line terminator."""
        return len(self._buffer)


class LineSampleParser:
    """Turn protocol lines into raw samples stamped by a clock.

    Timestamps are forced to be non-decreasing so parsed samples can be
    appended to a :class:`SampleBatch` in arrival order.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock: Callable[[], float] = clock
        self._last_timestamp: float = -math.inf

    def parse(self, line: str) -> RawImuSample | RawMagSample | None:
        """Return the sample carried by a line, or None if it carries none."""
        tokens: list[str] = line.split()
        if not tokens or tokens[0] not in (IMU_TAG, MAG_TAG):
            return None

        expected: int = 7 if tokens[0] == IMU_TAG else 4
        if len(tokens) != expected:
            _LOG.debug("Ignoring malformed %s line: %r", tokens[0], line)
            return None
        try:
            values: list[float] = [float(token) for token in tokens[1:]]
        except ValueError:
            _LOG.debug("Ignoring non-numeric %s line: %r", tokens[0], line)
            return None
        if not all(math.isfinite(value) for value in values):
            _LOG.debug("Ignoring non-finite %s line: %r", tokens[0], line)
            return None

        timestamp: float = self._next_timestamp()
        if tokens[0] == IMU_TAG:
            return RawImuSample(
                gyro=values[0:3],
                accel=values[3:6],
                timestamp=timestamp,
            )
        return RawMagSample(field=values, timestamp=timestamp)

    def parse_into(self, lines: Iterable[str], batch: SampleBatch) -> int:
        """Parse lines and append their samples to a batch.

        Returns:
            Number of samples appended
        """
        appended: int = 0
        for line in lines:
            sample: RawImuSample | RawMagSample | None = self.parse(line)
            if isinstance(sample, RawImuSample):
                batch.append_imu(sample)
                appended += 1
            elif isinstance(sample, RawMagSample):
                batch.append_mag(sample)
                appended += 1
        return appended

    def _next_timestamp(self) -> float:
        timestamp: float = max(float(self._clock()), self._last_timestamp)
        self._last_timestamp = timestamp
        return timestamp
