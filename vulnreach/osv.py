"""Data model for the OSV vulnerability format.

Only the subset of the format used by the Go vulnerability database is
modelled; for instance SEMVER is the only range type given meaning elsewhere.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Callable, TypeVar

_T = TypeVar("_T")


class AffectsRangeType(str, Enum):
    """Kinds of version ranges in an ``affected`` entry."""

    UNSPECIFIED = "UNSPECIFIED"
    GIT = "GIT"
    SEMVER = "SEMVER"


class Ecosystem(str, Enum):
    """Package ecosystems."""

    GO = "Go"


def _enum_or_str(enum_cls: type[Enum], value: str) -> Any:
    try:
        return enum_cls(value)
    except ValueError:
        return value


def _plain(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


def _as_object(data: Any, what: str) -> dict:
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"{what}: expected an object, got {type(data).__name__}")
    return data


def _as_str(value: Any, what: str) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"{what}: expected a string, got {type(value).__name__}")
    return value


def _get_str(data: dict, key: str) -> str:
    return _as_str(data.get(key), key)


def _get_list(data: dict, key: str, decode: Callable[[Any], _T]) -> list[_T]:
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValueError(f"{key}: expected an array, got {type(value).__name__}")
    return [decode(item) for item in value]


def _get_str_list(data: dict, key: str) -> list[str]:
    return _get_list(data, key, lambda item: _as_str(item, key))


_RFC3339 = re.compile(
    r"(\d{4}-\d{2}-\d{2})[Tt](\d{2}:\d{2}:\d{2})(?:\.(\d+))?([Zz]|[+-]\d{2}:\d{2})"
)


def _parse_time(value: Any, key: str) -> datetime | None:
    text = _as_str(value, key)
    if not text:
        return None
    match = _RFC3339.fullmatch(text)
    if match is None:
        raise ValueError(f"{key}: invalid RFC 3339 time {text!r}")
    date, clock, fraction, zone = match.groups()
    fraction = "." + (fraction or "").ljust(6, "0")[:6]
    offset = "+00:00" if zone in ("Z", "z") else zone
    try:
        return datetime.fromisoformat(f"{date}T{clock}{fraction}{offset}")
    except ValueError as exc:
        raise ValueError(f"{key}: invalid RFC 3339 time {text!r}") from exc


def _format_time(moment: datetime) -> str:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    text = moment.strftime("%Y-%m-%dT%H:%M:%S")
    if moment.microsecond:
        text += "." + f"{moment.microsecond:06d}".rstrip("0")
    offset = moment.utcoffset() or timedelta(0)
    if not offset:
        return text + "Z"
    sign = "-" if offset < timedelta(0) else "+"
    minutes = abs(int(offset.total_seconds())) // 60
    return f"{text}{sign}{minutes // 60:02d}:{minutes % 60:02d}"


@dataclass
class Package:
    """An affected package: its name and ecosystem."""

    name: str = ""
    ecosystem: Ecosystem | str = ""

    @classmethod
    def _from_dict(cls, data: Any) -> Package:
        data = _as_object(data, "package")
        ecosystem = _get_str(data, "ecosystem")
        return cls(
            name=_get_str(data, "name"),
            ecosystem=_enum_or_str(Ecosystem, ecosystem) if ecosystem else "",
        )

    def _to_dict(self) -> dict:
        return {"name": self.name, "ecosystem": _plain(self.ecosystem)}


@dataclass
class RangeEvent:
    """A point where a range opens (introduced) or closes (fixed)."""

    introduced: str = ""
    fixed: str = ""

    @classmethod
    def _from_dict(cls, data: Any) -> RangeEvent:
        data = _as_object(data, "event")
        return cls(introduced=_get_str(data, "introduced"), fixed=_get_str(data, "fixed"))

    def _to_dict(self) -> dict:
        out = {}
        if self.introduced:
            out["introduced"] = self.introduced
        if self.fixed:
            out["fixed"] = self.fixed
        return out


@dataclass
class AffectsRange:
    """A typed list of range events."""

    type: AffectsRangeType | str = AffectsRangeType.UNSPECIFIED
    events: list[RangeEvent] = field(default_factory=list)

    @classmethod
    def _from_dict(cls, data: Any) -> AffectsRange:
        data = _as_object(data, "range")
        return cls(
            type=_enum_or_str(AffectsRangeType, _get_str(data, "type")),
            events=_get_list(data, "events", RangeEvent._from_dict),
        )

    def _to_dict(self) -> dict:
        return {
            "type": _plain(self.type),
            "events": [event._to_dict() for event in self.events],
        }


@dataclass
class Reference:
    """A link to further information about a vulnerability."""

    type: str = ""
    url: str = ""

    @classmethod
    def _from_dict(cls, data: Any) -> Reference:
        data = _as_object(data, "reference")
        return cls(type=_get_str(data, "type"), url=_get_str(data, "url"))

    def _to_dict(self) -> dict:
        return {"type": self.type, "url": self.url}


@dataclass
class DatabaseSpecific:
    """Database-specific data of an affected package."""

    url: str = ""

    @classmethod
    def _from_dict(cls, data: Any) -> DatabaseSpecific:
        data = _as_object(data, "database_specific")
        return cls(url=_get_str(data, "url"))

    def _to_dict(self) -> dict:
        return {"url": self.url}


@dataclass
class EcosystemSpecificImport:
    """An affected package path within a module, with platforms and symbols.

    Empty ``goos`` or ``goarch`` mean every platform; empty ``symbols`` mean
    any use of the package is affected. Methods are named ``<recv>.<method>``.
    """

    path: str = ""
    goos: list[str] = field(default_factory=list)
    goarch: list[str] = field(default_factory=list)
    symbols: list[str] = field(default_factory=list)

    @classmethod
    def _from_dict(cls, data: Any) -> EcosystemSpecificImport:
        data = _as_object(data, "import")
        return cls(
            path=_get_str(data, "path"),
            goos=_get_str_list(data, "goos"),
            goarch=_get_str_list(data, "goarch"),
            symbols=_get_str_list(data, "symbols"),
        )

    def _to_dict(self) -> dict:
        out: dict[str, Any] = {}
        if self.path:
            out["path"] = self.path
        if self.goos:
            out["goos"] = list(self.goos)
        if self.goarch:
            out["goarch"] = list(self.goarch)
        if self.symbols:
            out["symbols"] = list(self.symbols)
        return out


@dataclass
class EcosystemSpecific:
    """Go-specific data: the affected packages within the module."""

    imports: list[EcosystemSpecificImport] = field(default_factory=list)

    @classmethod
    def _from_dict(cls, data: Any) -> EcosystemSpecific:
        data = _as_object(data, "ecosystem_specific")
        return cls(imports=_get_list(data, "imports", EcosystemSpecificImport._from_dict))

    def _to_dict(self) -> dict:
        if not self.imports:
            return {}
        return {"imports": [imp._to_dict() for imp in self.imports]}


@dataclass
class Affected:
    """An affected module with its vulnerable version ranges."""

    package: Package = field(default_factory=Package)
    ranges: list[AffectsRange] = field(default_factory=list)
    database_specific: DatabaseSpecific = field(default_factory=DatabaseSpecific)
    ecosystem_specific: EcosystemSpecific = field(default_factory=EcosystemSpecific)

    @classmethod
    def _from_dict(cls, data: Any) -> Affected:
        data = _as_object(data, "affected")
        return cls(
            package=Package._from_dict(data.get("package")),
            ranges=_get_list(data, "ranges", AffectsRange._from_dict),
            database_specific=DatabaseSpecific._from_dict(data.get("database_specific")),
            ecosystem_specific=EcosystemSpecific._from_dict(data.get("ecosystem_specific")),
        )

    def _to_dict(self) -> dict:
        out: dict[str, Any] = {"package": self.package._to_dict()}
        if self.ranges:
            out["ranges"] = [r._to_dict() for r in self.ranges]
        out["database_specific"] = self.database_specific._to_dict()
        out["ecosystem_specific"] = self.ecosystem_specific._to_dict()
        return out


@dataclass
class Credit:
    """Credit given for an entry."""

    name: str = ""
    contact: list[str] = field(default_factory=list)

    @classmethod
    def _from_dict(cls, data: Any) -> Credit:
        data = _as_object(data, "credit")
        return cls(name=_get_str(data, "name"), contact=_get_str_list(data, "contact"))

    def _to_dict(self) -> dict:
        out: dict[str, Any] = {}
        if self.name:
            out["name"] = self.name
        if self.contact:
            out["contact"] = list(self.contact)
        return out


@dataclass
class Entry:
    """An OSV vulnerability database entry."""

    id: str = ""
    published: datetime | None = None
    modified: datetime | None = None
    withdrawn: datetime | None = None
    aliases: list[str] = field(default_factory=list)
    details: str = ""
    affected: list[Affected] = field(default_factory=list)
    references: list[Reference] = field(default_factory=list)
    credits: list[Credit] = field(default_factory=list)
    schema_version: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> Entry:
        """Build an entry from decoded JSON; raises ValueError on bad shapes."""
        data = _as_object(data, "entry")
        return cls(
            id=_get_str(data, "id"),
            published=_parse_time(data.get("published"), "published"),
            modified=_parse_time(data.get("modified"), "modified"),
            withdrawn=_parse_time(data.get("withdrawn"), "withdrawn"),
            aliases=_get_str_list(data, "aliases"),
            details=_get_str(data, "details"),
            affected=_get_list(data, "affected", Affected._from_dict),
            references=_get_list(data, "references", Reference._from_dict),
            credits=_get_list(data, "credits", Credit._from_dict),
            schema_version=_get_str(data, "schema_version"),
        )

    def to_dict(self) -> dict:
        """Return the entry as JSON-ready data, leaving out empty optional fields."""
        out: dict[str, Any] = {"id": self.id}
        if self.published is not None:
            out["published"] = _format_time(self.published)
        if self.modified is not None:
            out["modified"] = _format_time(self.modified)
        if self.withdrawn is not None:
            out["withdrawn"] = _format_time(self.withdrawn)
        if self.aliases:
            out["aliases"] = list(self.aliases)
        out["details"] = self.details
        out["affected"] = [a._to_dict() for a in self.affected]
        if self.references:
            out["references"] = [r._to_dict() for r in self.references]
        if self.credits:
            out["credits"] = [c._to_dict() for c in self.credits]
        if self.schema_version:
            out["schema_version"] = self.schema_version
        return out

    @classmethod
    def from_json(cls, text: str | bytes) -> Entry:
        """Parse an entry from JSON text."""
        return cls.from_dict(json.loads(text))

    def to_json(self) -> str:
        """Serialise the entry as compact JSON."""
        return json.dumps(self.to_dict(), separators=(",", ":"), ensure_ascii=False)