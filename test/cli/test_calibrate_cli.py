################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Tests for the imu-calibrate command line tool."""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest

from imu_calibration.calibration_types import CalibrationSet
from imu_calibration.calibration_types import RawMagSample
from imu_calibration.calibration_types import SampleBatch
from imu_calibration.cli.calibrate_cli import EXIT_CALIBRATION_FAILED
from imu_calibration.cli.calibrate_cli import EXIT_OK
from imu_calibration.cli.calibrate_cli import EXIT_USAGE
from imu_calibration.cli.calibrate_cli import main
from imu_calibration.cli.calibrate_cli import parse_args
from imu_calibration.sensor import Sensor
from imu_calibration.storage.persistence import load_calibration_set
from imu_calibration.storage.persistence import load_sample_batch
from imu_calibration.storage.persistence import save_sample_batch


def _mag_batch() -> SampleBatch:
    rng: np.random.Generator = np.random.default_rng(60)
    directions: np.ndarray = rng.normal(size=(150, 3))
    directions /= np.linalg.norm(directions, axis=1, keepdims=True)
    batch: SampleBatch = SampleBatch()
    for index, direction in enumerate(directions):
        batch.append_mag(
            RawMagSample(
                field=direction * [40.0, 42.0, 38.0] + [12.0, 0.5, -7.0],
                timestamp=float(index),
            )
        )
    return batch


def test_parse_args_sensors() -> None:
    """Checks the sensor list is parsed and deduplicated."""
    parsed = parse_args(["--samples", "batch.yaml", "--sensors", "mag, gyro,mag"])

    assert parsed.sensors == (Sensor.MAG, Sensor.GYRO)
    assert parsed.samples == Path("batch.yaml")
    assert parsed.output is None


def test_parse_args_rejects_unknown_sensor() -> None:
    """Checks an unknown sensor name is a usage error."""
    with pytest.raises(SystemExit):
        parse_args(["--samples", "batch.yaml", "--sensors", "baro"])


def test_parse_args_rejects_record_without_lines() -> None:
    """Checks --record is only accepted with a line capture."""
    with pytest.raises(SystemExit):
        parse_args(["--samples", "batch.yaml", "--record", "out.yaml"])


def test_fit_mag_from_sample_batch(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    """Checks a recorded batch is fitted and the result saved."""
    samples: Path = tmp_path / "batch.json"
    output: Path = tmp_path / "cal.yaml"
    save_sample_batch(samples, _mag_batch())

    code: int = main(
        ["--samples", str(samples), "--output", str(output), "--sensors", "mag"]
    )

    assert code == EXIT_OK
    cal: CalibrationSet = load_calibration_set(output)
    assert cal.is_calibrated(Sensor.MAG)
    assert not cal.is_calibrated(Sensor.GYRO)
    np.testing.assert_allclose(cal.mag.hard_iron, [12.0, 0.5, -7.0], atol=1e-6)
    out: str = capsys.readouterr().out
    assert "mag: fitted from 150 samples" in out
    assert "sphere gaps" in out


def test_calibration_failure_exit_code(tmp_path: Path) -> None:
    """Checks a failing fit exits with code 1 and writes nothing."""
    samples: Path = tmp_path / "batch.yaml"
    output: Path = tmp_path / "cal.yaml"
    save_sample_batch(samples, _mag_batch())

    code: int = main(
        ["--samples", str(samples), "--output", str(output), "--sensors", "gyro"]
    )

    assert code == EXIT_CALIBRATION_FAILED
    assert not output.exists()


def test_line_capture_is_parsed_and_recorded(tmp_path: Path) -> None:
    """Checks a raw line capture can be fitted and recorded as a batch."""
    lines: Path = tmp_path / "capture.txt"
    record: Path = tmp_path / "capture.yaml"
    output: Path = tmp_path / "cal.json"
    rows: list[str] = [
        f"imu 0.01 -0.02 {0.005 + 1e-4 * (i % 3):.6f} 0.0 0.0 9.81" for i in range(60)
    ]
    rows.append("status ok")
    lines.write_text("\n".join(rows) + "\n", encoding="utf-8")

    code: int = main(
        [
            "--lines",
            str(lines),
            "--record",
            str(record),
            "--output",
            str(output),
            "--sensors",
            "gyro",
        ]
    )

    assert code == EXIT_OK
    assert load_sample_batch(record).imu_count() == 60
    cal: CalibrationSet = load_calibration_set(output)
    np.testing.assert_allclose(cal.gyro.offset, [0.01, -0.02, 0.0051], atol=1e-4)


def test_missing_input_is_usage_error(tmp_path: Path) -> None:
    """Checks an unreadable input file exits with the usage code."""
    code: int = main(["--samples", str(tmp_path / "missing.yaml")])

    assert code == EXIT_USAGE


def test_config_override(tmp_path: Path) -> None:
    """Checks a config file changes fit thresholds."""
    samples: Path = tmp_path / "batch.yaml"
    config: Path = tmp_path / "config.yaml"
    save_sample_batch(samples, _mag_batch())
    config.write_text("mag:\n  min_samples: 500\n", encoding="utf-8")

    code: int = main(
        ["--samples", str(samples), "--config", str(config), "--sensors", "mag"]
    )

    assert code == EXIT_CALIBRATION_FAILED


def test_suffixless_output_uses_configured_format(tmp_path: Path) -> None:
    """Checks save.format picks the encoding of a suffix-less output path."""
    samples: Path = tmp_path / "batch.yaml"
    config: Path = tmp_path / "config.yaml"
    output: Path = tmp_path / "calibration"
    save_sample_batch(samples, _mag_batch())
    config.write_text("save:\n  format: json\n", encoding="utf-8")

    code: int = main(
        [
            "--samples",
            str(samples),
            "--config",
            str(config),
            "--sensors",
            "mag",
            "--output",
            str(output),
        ]
    )

    assert code == EXIT_OK
    assert output.read_text(encoding="utf-8").startswith("{")
    cal: CalibrationSet = load_calibration_set(output, default_format="json")
    assert cal.mag.info.is_fitted
