"""Header configuration from JSON files and plain dicts."""

from __future__ import annotations

import datetime
import json
import uuid
from pathlib import Path
from typing import Any

from lasstream.core.transform import Transform, Vector
from lasstream.errors import ConfigError, LasError
from lasstream.header.header import GpsTimeType, Header
from lasstream.point.format import Format
from lasstream.vlr import Vlr

_KEYS = {
    "version",
    "point_format",
    "extra_bytes",
    "scale",
    "offset",
    "system_identifier",
    "generating_software",
    "file_source_id",
    "guid",
    "date",
    "gps_time_type",
    "has_synthetic_return_numbers",
    "has_wkt_crs",
    "vlrs",
    "evlrs",
}

_VLR_KEYS = {"user_id", "record_id", "description", "data", "data_hex"}


def _triple(name: str, value: Any) -> tuple[float, float, float]:
    if isinstance(value, (int, float)):
        return (float(value),) * 3
    if isinstance(value, (list, tuple)) and len(value) == 3:
        return tuple(float(v) for v in value)
    raise ConfigError(f"'{name}' must be a number or a list of three numbers, got {value!r}")


def _parse_vlr(entry: Any) -> Vlr:
    if not isinstance(entry, dict):
        raise ConfigError(f"VLR entries must be objects, got {entry!r}")
    unknown = set(entry) - _VLR_KEYS
    if unknown:
        raise ConfigError(f"Unknown VLR keys: {sorted(unknown)}")
    if "data" in entry and "data_hex" in entry:
        raise ConfigError("A VLR can have 'data' or 'data_hex', not both")
    if "data_hex" in entry:
        try:
            data = bytes.fromhex(entry["data_hex"])
        except ValueError as e:
            raise ConfigError(f"Invalid 'data_hex': {e}") from e
    else:
        data = str(entry.get("data", "")).encode("utf-8")
    return Vlr(
        user_id=str(entry.get("user_id", "")),
        record_id=int(entry.get("record_id", 0)),
        description=str(entry.get("description", "")),
        data=data,
    )


def header_from_dict(config: dict[str, Any]) -> Header:
    """Build a Header from a configuration mapping.

    Args:
        config: Keys as in a header config file, e.g.
            ``{"version": "1.4", "point_format": 6, "scale": 0.01}``.

    Returns:
        A validated Header with cleared statistics.

    Raises:
        ConfigError: On unknown keys, malformed values or an invalid
            version/format combination.
    """
    if not isinstance(config, dict):
        raise ConfigError("Header configuration must be a JSON object")
    unknown = set(config) - _KEYS
    if unknown:
        raise ConfigError(
            f"Unknown header configuration keys: {sorted(unknown)}. "
            f"Supported: {sorted(_KEYS)}"
        )

    kwargs: dict[str, Any] = {}
    try:
        if "version" in config:
            kwargs["version"] = str(config["version"])
        kwargs["point_format"] = Format.new(
            int(config.get("point_format", 0)),
            extra_bytes=int(config.get("extra_bytes", 0)),
        )
        scales = _triple("scale", config.get("scale", 0.001))
        offsets = _triple("offset", config.get("offset", 0.0))
        kwargs["transforms"] = Vector(
            *(Transform(scale=s, offset=o) for s, o in zip(scales, offsets))
        )
        for key in ("system_identifier", "generating_software"):
            if key in config:
                kwargs[key] = str(config[key])
        for key in ("has_synthetic_return_numbers", "has_wkt_crs"):
            if key in config:
                kwargs[key] = bool(config[key])
        if "file_source_id" in config:
            kwargs["file_source_id"] = int(config["file_source_id"])
        if "guid" in config:
            kwargs["guid"] = uuid.UUID(str(config["guid"]))
        if "date" in config:
            date = config["date"]
            kwargs["date"] = None if date is None else datetime.date.fromisoformat(date)
        if "gps_time_type" in config:
            kwargs["gps_time_type"] = GpsTimeType[str(config["gps_time_type"]).upper()]
        kwargs["vlrs"] = [_parse_vlr(v) for v in config.get("vlrs", [])]
        kwargs["evlrs"] = [_parse_vlr(v) for v in config.get("evlrs", [])]
        return Header(**kwargs)
    except ConfigError:
        raise
    except (LasError, KeyError, TypeError, ValueError) as e:
        raise ConfigError(f"Invalid header configuration: {e}") from e


def load_header_config(path: str | Path) -> Header:
    """Read a JSON header configuration file.

    Args:
        path: Path to the JSON file.

    Returns:
        The configured Header.
    """
    text = Path(path).read_text()
    try:
        config = json.loads(text)
    except json.JSONDecodeError as e:
        raise ConfigError(f"{path} is not valid JSON: {e}") from e
    return header_from_dict(config)
