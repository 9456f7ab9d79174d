################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Fit a calibration set from a recorded capture and save it."""

from __future__ import annotations

import argparse
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import numpy as np

from imu_calibration.calibration_types import CalibrationSet
from imu_calibration.calibration_types import SampleBatch
from imu_calibration.config.calibration_config import CalibrationConfig
from imu_calibration.config.calibration_config import CalibrationConfigError
from imu_calibration.config.calibration_config import load_config
from imu_calibration.errors import CalibrationError
from imu_calibration.ingest.line_parser import LineFramer
from imu_calibration.ingest.line_parser import LineProtocolError
from imu_calibration.ingest.line_parser import LineSampleParser
from imu_calibration.models.calibration_model import CalibrationModel
from imu_calibration.models.sphere_quality import SphereQuality
from imu_calibration.models.sphere_quality import assess_sphere_quality
from imu_calibration.sensor import Sensor
from imu_calibration.session.calibration_session import CalibrationSession
from imu_calibration.storage.persistence import CalibrationPersistenceError
from imu_calibration.storage.persistence import load_sample_batch
from imu_calibration.storage.persistence import save_calibration_set
from imu_calibration.storage.persistence import save_sample_batch


_LOG: logging.Logger = logging.getLogger(__name__)

# Exit codes
EXIT_OK: int = 0
EXIT_CALIBRATION_FAILED: int = 1
EXIT_USAGE: int = 2


@dataclass(frozen=True)
class ParsedArgs:
    samples: Path | None
    lines: Path | None
    output: Path | None
    record: Path | None
    config: Path | None
    sensors: tuple[Sensor, ...]
    verbose: bool


def parse_sensors(text: str) -> tuple[Sensor, ...]:
    """Parse a comma-separated sensor list such as ``gyro,mag``."""
    sensors: list[Sensor] = []
    for name in text.split(","):
        name = name.strip().lower()
        if not name:
            continue
        try:
            sensor: Sensor = Sensor(name)
        except ValueError as exc:
            raise argparse.ArgumentTypeError(f"unknown sensor {name!r}") from exc
        if sensor not in sensors:
            sensors.append(sensor)
    if not sensors:
        raise argparse.ArgumentTypeError("at least one sensor is required")
    return tuple(sensors)


def parse_args(args: Optional[list[str]] = None) -> ParsedArgs:
    parser: argparse.ArgumentParser = argparse.ArgumentParser(
        prog="imu-calibrate",
        description="Fit gyro, accel and magnetometer calibration from a capture.",
    )
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        "--samples",
        type=Path,
        help="Recorded sample batch (.yaml, .yml or .json).",
    )
    source.add_argument(
        "--lines",
        type=Path,
        help="Raw line-protocol capture with 'imu' and 'mag' lines.",
    )
    parser.add_argument(
        "--output",
        type=Path,
        help="Where to save the fitted calibration set (.yaml, .yml or .json).",
    )
    parser.add_argument(
        "--record",
        type=Path,
        help="Also save the parsed samples of a --lines capture as a batch.",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="YAML file of parameter overrides.",
    )
    parser.add_argument(
        "--sensors",
        type=parse_sensors,
        default=tuple(Sensor),
        help="Comma-separated sensors to fit (default: gyro,accel,mag).",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logging.",
    )
    namespace = parser.parse_args(args)
    if namespace.record is not None and namespace.lines is None:
        parser.error("--record requires --lines")

    return ParsedArgs(
        samples=namespace.samples,
        lines=namespace.lines,
        output=namespace.output,
        record=namespace.record,
        config=namespace.config,
        sensors=namespace.sensors,
        verbose=namespace.verbose,
    )


def read_line_capture(path: Path) -> SampleBatch:
    """Parse a line-protocol capture file into a sample batch."""
    framer: LineFramer = LineFramer()
    parser: LineSampleParser = LineSampleParser()
    batch: SampleBatch = SampleBatch()
    lines: list[str] = framer.feed(path.read_bytes() + b"\n")
    kept: int = parser.parse_into(lines, batch)
    _LOG.info("Parsed %d samples from %d lines of %s", kept, len(lines), path)
    return batch


def format_summary(cal: CalibrationSet, quality: SphereQuality | None) -> str:
    """Return a human readable summary of a calibration set."""
    rows: list[str] = []
    for sensor in Sensor:
        info = cal.info(sensor)
        status: str = (
            f"fitted from {info.sample_count} samples, residual {info.residual:.4e}"
            if info.is_fitted
            else "uncalibrated"
        )
        rows.append(f"{sensor.value:>5}: {status}")
    rows.append(f"  gyro offset: {_vec(cal.gyro.offset)}")
    rows.append(f"  accel offset: {_vec(cal.accel.offset)}")
    rows.append(f"  accel scale: {_vec(cal.accel.scale)}")
    rows.append(f"  mag hard iron: {_vec(cal.mag.hard_iron)}")
    for row in cal.mag.soft_iron:
        rows.append(f"  mag soft iron: {_vec(row)}")
    if quality is not None:
        rows.append(
            f"  sphere gaps {quality.gap_error:.1f}%, "
            f"variance {quality.variance_error:.1f}%, "
            f"wobble {quality.wobble_error:.1f}%"
        )
    return "\n".join(rows)


def _vec(values: np.ndarray) -> str:
    return "[" + ", ".join(f"{value: .6f}" for value in values) + "]"


def run(parsed: ParsedArgs) -> int:
    config: CalibrationConfig = (
        CalibrationConfig() if parsed.config is None else load_config(parsed.config)
    )

    save_format: str = config.save_format()
    atomic_write: bool = config.params.save.atomic_write

    batch: SampleBatch
    if parsed.samples is not None:
        batch = load_sample_batch(parsed.samples, default_format=save_format)
    elif parsed.lines is not None:
        batch = read_line_capture(parsed.lines)
        if parsed.record is not None:
            save_sample_batch(
                parsed.record,
                batch,
                atomic_write=atomic_write,
                default_format=save_format,
            )
    else:
        raise CalibrationConfigError(
            "either a sample batch or a line capture is required"
        )

    session: CalibrationSession = CalibrationSession(config)
    for imu_sample in batch.imu_samples:
        session.add_imu(imu_sample)
    for mag_sample in batch.mag_samples:
        session.add_mag(mag_sample)

    try:
        for sensor in parsed.sensors:
            if sensor is Sensor.GYRO:
                session.fit_gyro()
            elif sensor is Sensor.ACCEL:
                session.fit_accel()
            else:
                session.fit_mag()
    except CalibrationError as exc:
        _LOG.error("Calibration failed: %s", exc)
        return EXIT_CALIBRATION_FAILED

    cal: CalibrationSet = session.current
    quality: SphereQuality | None = None
    if Sensor.MAG in parsed.sensors:
        corrected = CalibrationModel.apply_batch(batch, cal)
        quality = assess_sphere_quality(corrected.mag)
    print(format_summary(cal, quality))

    if parsed.output is not None:
        save_calibration_set(
            parsed.output,
            cal,
            atomic_write=atomic_write,
            default_format=save_format,
        )
        print(f"Wrote calibration to {parsed.output}")
    return EXIT_OK


def main(args: Optional[list[str]] = None) -> int:
    parsed: ParsedArgs = parse_args(args)
    logging.basicConfig(
        level=logging.DEBUG if parsed.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        return run(parsed)
    except (
        CalibrationConfigError,
        CalibrationPersistenceError,
        LineProtocolError,
        OSError,
    ) as exc:
        _LOG.error("%s", exc)
        return EXIT_USAGE


if __name__ == "__main__":
    raise SystemExit(main())
