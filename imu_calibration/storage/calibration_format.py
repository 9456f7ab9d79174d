################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""YAML and JSON schema for calibration sets and sample batches.

Floats are written with shortest round-trip precision by both PyYAML and the
json module, so loading a saved document reproduces every value bit for bit.
"""

from __future__ import annotations

import json
import math
import numbers
from typing import Any

import numpy as np
import yaml

from imu_calibration.calibration_types import AccelCalibration
from imu_calibration.calibration_types import CalibrationSet
from imu_calibration.calibration_types import CalibrationSource
from imu_calibration.calibration_types import FitInfo
from imu_calibration.calibration_types import GyroCalibration
from imu_calibration.calibration_types import MagCalibration
from imu_calibration.calibration_types import RawImuSample
from imu_calibration.calibration_types import RawMagSample
from imu_calibration.calibration_types import SampleBatch
from imu_calibration.errors import CalibrationError


# Schema version written to every document
SCHEMA_VERSION: int = 1

# Document kinds
KIND_CALIBRATION_SET: str = "calibration_set"
KIND_SAMPLE_BATCH: str = "sample_batch"


class CalibrationFormatError(Exception):
    """Raised when a calibration document does not match the schema."""


def calibration_set_to_dict(cal: CalibrationSet) -> dict[str, object]:
    """Convert a calibration set to a YAML/JSON-safe dictionary."""
    return {
        "kind": KIND_CALIBRATION_SET,
        "version": SCHEMA_VERSION,
        "created_at": cal.created_at,
        "gyro": {
            "offset": cal.gyro.offset.tolist(),
            "info": _info_to_dict(cal.gyro.info),
        },
        "accel": {
            "offset": cal.accel.offset.tolist(),
            "scale": cal.accel.scale.tolist(),
            "info": _info_to_dict(cal.accel.info),
        },
        "mag": {
            "soft_iron_row_major": cal.mag.soft_iron.reshape(9).tolist(),
            "hard_iron": cal.mag.hard_iron.tolist(),
            "info": _info_to_dict(cal.mag.info),
        },
    }


def calibration_set_from_dict(data: object) -> CalibrationSet:
    """Parse a calibration set from a dictionary."""
    root: dict[str, object] = _require_mapping(data, "root")
    _require_keys("root", root, {"kind", "version", "created_at", "gyro", "accel", "mag"})
    _require_header(root, KIND_CALIBRATION_SET)

    gyro_data: dict[str, object] = _require_mapping(root["gyro"], "gyro")
    _require_keys("gyro", gyro_data, {"offset", "info"})
    accel_data: dict[str, object] = _require_mapping(root["accel"], "accel")
    _require_keys("accel", accel_data, {"offset", "scale", "info"})
    mag_data: dict[str, object] = _require_mapping(root["mag"], "mag")
    _require_keys("mag", mag_data, {"soft_iron_row_major", "hard_iron", "info"})

    try:
        return CalibrationSet(
            gyro=GyroCalibration(
                offset=_coerce_array(gyro_data["offset"], "gyro.offset", (3,)),
                info=_info_from_dict(gyro_data["info"], "gyro.info"),
            ),
            accel=AccelCalibration(
                offset=_coerce_array(accel_data["offset"], "accel.offset", (3,)),
                scale=_coerce_array(accel_data["scale"], "accel.scale", (3,)),
                info=_info_from_dict(accel_data["info"], "accel.info"),
            ),
            mag=MagCalibration(
                soft_iron=_coerce_array(
                    mag_data["soft_iron_row_major"], "mag.soft_iron_row_major", (9,)
                ).reshape(3, 3),
                hard_iron=_coerce_array(mag_data["hard_iron"], "mag.hard_iron", (3,)),
                info=_info_from_dict(mag_data["info"], "mag.info"),
            ),
            created_at=_require_float(root["created_at"], "created_at"),
        )
    except (ValueError, CalibrationError) as exc:
        raise CalibrationFormatError(f"Invalid calibration set: {exc}") from exc


def sample_batch_to_dict(batch: SampleBatch) -> dict[str, object]:
    """Convert a sample batch to a YAML/JSON-safe dictionary."""
    return {
        "kind": KIND_SAMPLE_BATCH,
        "version": SCHEMA_VERSION,
        "imu": [
            {
                "gyro": sample.gyro.tolist(),
                "accel": sample.accel.tolist(),
                "timestamp": sample.timestamp,
            }
            for sample in batch.imu_samples
        ],
        "mag": [
            {"field": sample.field.tolist(), "timestamp": sample.timestamp}
            for sample in batch.mag_samples
        ],
    }


def sample_batch_from_dict(data: object) -> SampleBatch:
    """Parse a sample batch from a dictionary."""
    root: dict[str, object] = _require_mapping(data, "root")
    _require_keys("root", root, {"kind", "version", "imu", "mag"})
    _require_header(root, KIND_SAMPLE_BATCH)

    batch: SampleBatch = SampleBatch()
    try:
        for index, entry in enumerate(_require_list(root["imu"], "imu")):
            scope: str = f"imu[{index}]"
            item: dict[str, object] = _require_mapping(entry, scope)
            _require_keys(scope, item, {"gyro", "accel", "timestamp"})
            batch.append_imu(
                RawImuSample(
                    gyro=_coerce_array(item["gyro"], f"{scope}.gyro", (3,)),
                    accel=_coerce_array(item["accel"], f"{scope}.accel", (3,)),
                    timestamp=_require_float(item["timestamp"], f"{scope}.timestamp"),
                )
            )
        for index, entry in enumerate(_require_list(root["mag"], "mag")):
            scope = f"mag[{index}]"
            item = _require_mapping(entry, scope)
            _require_keys(scope, item, {"field", "timestamp"})
            batch.append_mag(
                RawMagSample(
                    field=_coerce_array(item["field"], f"{scope}.field", (3,)),
                    timestamp=_require_float(item["timestamp"], f"{scope}.timestamp"),
                )
            )
    except ValueError as exc:
        raise CalibrationFormatError(f"Invalid sample batch: {exc}") from exc
    return batch


def dumps_yaml(data: dict[str, object]) -> str:
    """Serialize a schema dictionary to YAML."""
    return yaml.safe_dump(data, sort_keys=False, default_flow_style=None)


def loads_yaml(text: str) -> object:
    """Parse YAML text into plain Python values."""
    try:
        return yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise CalibrationFormatError("Malformed YAML document") from exc


def dumps_json(data: dict[str, object]) -> str:
    """Serialize a schema dictionary to JSON."""
    return json.dumps(data, indent=2, allow_nan=False) + "\n"


def loads_json(text: str) -> object:
    """Parse JSON text into plain Python values."""
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise CalibrationFormatError("Malformed JSON document") from exc


def _info_to_dict(info: FitInfo) -> dict[str, object]:
    """Convert fit metadata to a YAML-safe dictionary."""
    return {
        "source": info.source.value,
        "sample_count": info.sample_count,
        "residual": info.residual,
        "fitted_at": info.fitted_at,
    }


def _info_from_dict(data: object, scope: str) -> FitInfo:
    """Parse fit metadata from a dictionary."""
    info: dict[str, object] = _require_mapping(data, scope)
    _require_keys(scope, info, {"source", "sample_count", "residual", "fitted_at"})
    source_value: object = info["source"]
    try:
        source: CalibrationSource = CalibrationSource(source_value)
    except ValueError as exc:
        raise CalibrationFormatError(
            f"{scope}.source has unknown value {source_value!r}"
        ) from exc
    return FitInfo(
        source=source,
        sample_count=_require_int(info["sample_count"], f"{scope}.sample_count"),
        residual=_require_float(info["residual"], f"{scope}.residual"),
        fitted_at=_require_float(info["fitted_at"], f"{scope}.fitted_at"),
    )


def _require_header(root: dict[str, object], kind: str) -> None:
    if root["kind"] != kind:
        raise CalibrationFormatError(f"kind must be {kind!r}, got {root['kind']!r}")
    version: int = _require_int(root["version"], "version")
    if version != SCHEMA_VERSION:
        raise CalibrationFormatError(f"Unsupported schema version {version}")


def _require_keys(scope: str, data: dict[str, object], keys: set[str]) -> None:
    missing: set[str] = keys - set(data)
    if missing:
        raise CalibrationFormatError(f"{scope} missing keys: {sorted(missing)}")
    extra: set[str] = set(data) - keys
    if extra:
        raise CalibrationFormatError(f"{scope} has unknown keys: {sorted(extra)}")


def _require_mapping(value: object, name: str) -> dict[str, object]:
    if not isinstance(value, dict):
        raise CalibrationFormatError(f"{name} must be a mapping")
    return value


def _require_list(value: object, name: str) -> list[object]:
    if not isinstance(value, list):
        raise CalibrationFormatError(f"{name} must be a list")
    return value


def _require_int(value: object, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise CalibrationFormatError(f"{name} must be an int")
    return value


def _require_float(value: object, name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise CalibrationFormatError(f"{name} must be a number")
    result: float = float(value)
    if not math.isfinite(result):
        raise CalibrationFormatError(f"{name} must be finite")
    return result


def _coerce_array(value: Any, name: str, shape: tuple[int, ...]) -> np.ndarray:
    if not isinstance(value, list):
        raise CalibrationFormatError(f"{name} must be a list")
    if any(isinstance(item, bool) for item in value):
        raise CalibrationFormatError(f"{name} must contain numbers")
    try:
        array: np.ndarray = np.asarray(value, dtype=np.float64)
    except (TypeError, ValueError) as exc:
        raise CalibrationFormatError(f"{name} must contain numbers") from exc
    if array.shape != shape:
        raise CalibrationFormatError(f"{name} must have shape {shape}")
    if not np.all(np.isfinite(array)):
        raise CalibrationFormatError(f"{name} must contain finite values")
    return array
