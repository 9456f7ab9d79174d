################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Persistence helpers for calibration sets and recorded sample batches."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Callable

from imu_calibration.calibration_types import CalibrationSet
from imu_calibration.calibration_types import SampleBatch
from imu_calibration.storage.calibration_format import CalibrationFormatError
from imu_calibration.storage.calibration_format import calibration_set_from_dict
from imu_calibration.storage.calibration_format import calibration_set_to_dict
from imu_calibration.storage.calibration_format import dumps_json
from imu_calibration.storage.calibration_format import dumps_yaml
from imu_calibration.storage.calibration_format import loads_json
from imu_calibration.storage.calibration_format import loads_yaml
from imu_calibration.storage.calibration_format import sample_batch_from_dict
from imu_calibration.storage.calibration_format import sample_batch_to_dict


_LOG: logging.Logger = logging.getLogger(__name__)


class CalibrationPersistenceError(Exception):
    """Raised when loading or saving calibration files fails."""


def is_yaml_path(path: str | os.PathLike[str]) -> bool:
    """Return True if the path has a YAML extension."""
    suffix: str = Path(os.fspath(path)).suffix.lower()
    return suffix in {".yaml", ".yml"}


def is_json_path(path: str | os.PathLike[str]) -> bool:
    """Return True if the path has a JSON extension."""
    return Path(os.fspath(path)).suffix.lower() == ".json"


def save_calibration_set(
    path: str | os.PathLike[str],
    cal: CalibrationSet,
    *,
    atomic_write: bool = True,
    default_format: str | None = None,
) -> None:
    """Save a calibration set as YAML or JSON, chosen by file suffix.

    Paths without a suffix use default_format ("yaml" or "json").
    """
    dumps: Callable[[dict[str, object]], str] = _dumper_for(path, default_format)
    path_obj: Path = Path(os.fspath(path))
    try:
        _write_text(path_obj, dumps(calibration_set_to_dict(cal)), atomic_write)
    except OSError as exc:
        raise CalibrationPersistenceError(
            f"Failed to save calibration set to {path_obj}"
        ) from exc
    _LOG.info("Saved calibration set to %s", path_obj)


def load_calibration_set(
    path: str | os.PathLike[str],
    *,
    default_format: str | None = None,
) -> CalibrationSet:
    """Load a calibration set from a YAML or JSON file."""
    loads: Callable[[str], object] = _loader_for(path, default_format)
    path_obj: Path = Path(os.fspath(path))
    try:
        cal: CalibrationSet = calibration_set_from_dict(
            loads(path_obj.read_text(encoding="utf-8"))
        )
    except (OSError, CalibrationFormatError) as exc:
        raise CalibrationPersistenceError(
            f"Failed to load calibration set from {path_obj}"
        ) from exc
    _LOG.info("Loaded calibration set from %s", path_obj)
    return cal


def save_sample_batch(
    path: str | os.PathLike[str],
    batch: SampleBatch,
    *,
    atomic_write: bool = True,
    default_format: str | None = None,
) -> None:
    """Save a recorded sample batch as YAML or JSON, chosen by file suffix."""
    dumps: Callable[[dict[str, object]], str] = _dumper_for(path, default_format)
    path_obj: Path = Path(os.fspath(path))
    try:
        _write_text(path_obj, dumps(sample_batch_to_dict(batch)), atomic_write)
    except OSError as exc:
        raise CalibrationPersistenceError(
            f"Failed to save sample batch to {path_obj}"
        ) from exc
    _LOG.info("Saved %r to %s", batch, path_obj)


def load_sample_batch(
    path: str | os.PathLike[str],
    *,
    default_format: str | None = None,
) -> SampleBatch:
    """Load a recorded sample batch from a YAML or JSON file."""
    loads: Callable[[str], object] = _loader_for(path, default_format)
    path_obj: Path = Path(os.fspath(path))
    try:
        batch: SampleBatch = sample_batch_from_dict(
            loads(path_obj.read_text(encoding="utf-8"))
        )
    except (OSError, CalibrationFormatError) as exc:
        raise CalibrationPersistenceError(
            f"Failed to load sample batch from {path_obj}"
        ) from exc
    _LOG.info("Loaded %r from %s", batch, path_obj)
    return batch


def _dumper_for(
    path: str | os.PathLike[str], default_format: str | None
) -> Callable[[dict[str, object]], str]:
    fmt: str = _format_for(path, default_format)
    return dumps_yaml if fmt == "yaml" else dumps_json


def _loader_for(
    path: str | os.PathLike[str], default_format: str | None
) -> Callable[[str], object]:
    fmt: str = _format_for(path, default_format)
    return loads_yaml if fmt == "yaml" else loads_json


def _format_for(path: str | os.PathLike[str], default_format: str | None) -> str:
    if is_yaml_path(path):
        return "yaml"
    if is_json_path(path):
        return "json"
    # Suffix-less paths fall back to the configured format
    if Path(os.fspath(path)).suffix == "" and default_format is not None:
        if default_format in ("yaml", "json"):
            return default_format
    raise CalibrationPersistenceError("Path must end with .yaml, .yml or .json")


def _write_text(path_obj: Path, text: str, atomic_write: bool) -> None:
    path_obj.parent.mkdir(parents=True, exist_ok=True)
    if not atomic_write:
        path_obj.write_text(text, encoding="utf-8")
        return

    tmp_name: str = f".{path_obj.name}.tmp.{os.getpid()}"
    tmp_path: Path = path_obj.with_name(tmp_name)
    with tmp_path.open("w", encoding="utf-8") as handle:
        handle.write(text)
        handle.flush()
        os.fsync(handle.fileno())
    os.replace(tmp_path, path_obj)
