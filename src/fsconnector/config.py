"""Application configuration defaults and connector parameters."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping

FILE_PATH = "filePath"
METADATA_AS_XML = "metadataAsXml"
START_TIME = "startTime"
END_TIME = "endTime"
INCLUDE_BINARIES = "includeBinaries"
ALL_VERSIONS = "allVersions"


@dataclass(frozen=True, slots=True)
class DateFilter:
    """Inclusive range of modification times in epoch milliseconds."""

    start_ms: int = 0
    end_ms: int = sys.maxsize

    def contains(self, timestamp_ms: int) -> bool:
        return self.start_ms <= timestamp_ms <= self.end_ms


class ConnectorParameters:
    """Key/value parameters handed to the connector by the host."""

    def __init__(self, values: Mapping[str, Any] | None = None) -> None:
        self._values: Dict[str, Any] = dict(values or {})

    def __getitem__(self, key: str) -> Any:
        return self._values[key]

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def __repr__(self) -> str:
        return f"ConnectorParameters({self._values!r})"

    def put(self, key: str, value: Any) -> None:
        self._values[key] = value

    def get(self, key: str, default: Any = None) -> Any:
        return self._values.get(key, default)

    def get_string(self, key: str, default: str | None = None) -> str | None:
        value = self._values.get(key)
        return default if value is None else str(value)

    def get_bool(self, key: str, default: bool = False) -> bool:
        value = self._values.get(key)
        if value is None:
            return default
        if isinstance(value, str):
            return value.strip().lower() in {"1", "true", "yes", "on"}
        return bool(value)

    def get_long(self, key: str, default: int | None = None) -> int | None:
        value = self._values.get(key)
        return default if value is None else int(value)

    @property
    def file_path(self) -> str:
        value = self.get_string(FILE_PATH)
        if not value:
            raise KeyError(f"Missing required parameter '{FILE_PATH}'")
        return value

    @property
    def metadata_as_xml(self) -> bool:
        return self.get_bool(METADATA_AS_XML, default=True)

    @property
    def date_filter(self) -> DateFilter:
        defaults = DateFilter()
        return DateFilter(
            start_ms=self.get_long(START_TIME, defaults.start_ms),
            end_ms=self.get_long(END_TIME, defaults.end_ms),
        )

    @property
    def include_binaries(self) -> bool:
        return self.get_bool(INCLUDE_BINARIES)

    @property
    def delete_all_versions(self) -> bool:
        return self.get_bool(ALL_VERSIONS)


@dataclass(slots=True)
class AppConfig:
    file_path: Path | None = None
    metadata_as_xml: bool = True
    include_binaries: bool = False
    use_cache: bool = False

    def resolve_file_path(self, base_dir: Path | None = None) -> Path | None:
        if self.file_path is None:
            return None
        if Path(self.file_path).is_absolute() or base_dir is None:
            return Path(self.file_path)
        return base_dir / self.file_path

    def to_parameters(
        self,
        base_dir: Path | None = None,
        overrides: Mapping[str, Any] | None = None,
    ) -> ConnectorParameters:
        """Build host-style parameters, letting non-None ``overrides`` win."""
        values: Dict[str, Any] = {
            METADATA_AS_XML: self.metadata_as_xml,
            INCLUDE_BINARIES: self.include_binaries,
        }
        resolved = self.resolve_file_path(base_dir)
        if resolved is not None:
            values[FILE_PATH] = str(resolved)
        for key, value in (overrides or {}).items():
            if value is not None:
                values[key] = value
        return ConnectorParameters(values)
