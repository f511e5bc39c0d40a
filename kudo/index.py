"""The index file of an operator repository."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from functools import cmp_to_key
from typing import IO, Any, Mapping

import yaml

from kudo.repo import Maintainer, Metadata, RepositoryError, _dump_yaml, _text
from kudo.version import Version, parse_version

_DEFAULT_URL = "http://localhost/"

_TIME_RE = re.compile(
    r"^(\d{4}-\d{2}-\d{2})[Tt ](\d{2}:\d{2}:\d{2})(\.\d+)?\s*(Z|z|[+-]\d{2}:?\d{2})?$"
)


class IndexFileError(RepositoryError):
    """Raised when an index file is invalid or lacks a requested entry."""


@dataclass
class PackageVersion(Metadata):
    """One version of an operator listed in an index file."""

    urls: list[str] = field(default_factory=list)
    removed: bool = False
    digest: str = ""


def _cmp(a: Any, b: Any) -> int:
    return (a > b) - (a < b)


def _compare_identifier(x: str, y: str) -> int:
    x_num, y_num = x.isdigit(), y.isdigit()
    if x_num and y_num:
        return _cmp(int(x), int(y))
    if x_num:
        return -1
    if y_num:
        return 1
    return _cmp(x, y)


def _compare_prerelease(a: str, b: str) -> int:
    if a == b:
        return 0
    if not a:
        return 1
    if not b:
        return -1
    a_parts, b_parts = a.split("."), b.split(".")
    for x, y in zip(a_parts, b_parts):
        result = _compare_identifier(x, y)
        if result:
            return result
    return _cmp(len(a_parts), len(b_parts))


def _compare_versions(a: Version, b: Version) -> int:
    result = _cmp((a.major, a.minor, a.patch), (b.major, b.minor, b.patch))
    return result or _compare_prerelease(a.prerelease, b.prerelease)


def _sorted_descending(versions: list[PackageVersion]) -> list[PackageVersion]:
    parsed: list[tuple[Version, PackageVersion]] = []
    broken: list[PackageVersion] = []
    for pv in versions:
        try:
            parsed.append((parse_version(pv.version), pv))
        except ValueError:
            broken.append(pv)
    parsed.sort(key=cmp_to_key(lambda a, b: _compare_versions(a[0], b[0])), reverse=True)
    return [pv for _, pv in parsed] + broken


def _format_time(moment: datetime) -> str:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    text = moment.strftime("%Y-%m-%dT%H:%M:%S")
    if moment.microsecond:
        text += f".{moment.microsecond:06d}".rstrip("0")
    offset = moment.utcoffset() or timedelta(0)
    if offset == timedelta(0):
        return text + "Z"
    total = int(offset.total_seconds())
    sign = "+" if total >= 0 else "-"
    total = abs(total)
    return f"{text}{sign}{total // 3600:02d}:{total % 3600 // 60:02d}"


def _parse_time(value: Any) -> datetime | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    match = _TIME_RE.match(str(value))
    if match is None:
        raise IndexFileError(f"unmarshalling index file: invalid time {value!r}")
    day, clock, fraction, zone = match.groups()
    micro = int((fraction[1:] + "000000")[:6]) if fraction else 0
    if zone in (None, "Z", "z"):
        tz = timezone.utc
    else:
        digits = zone[1:].replace(":", "")
        delta = timedelta(hours=int(digits[:2]), minutes=int(digits[2:]))
        tz = timezone(delta if zone[0] == "+" else -delta)
    base = datetime.strptime(f"{day}T{clock}", "%Y-%m-%dT%H:%M:%S")
    return base.replace(microsecond=micro, tzinfo=tz)


def _package_version_to_dict(pv: PackageVersion) -> dict:
    data: dict[str, Any] = {}
    for key, value in (
        ("name", pv.name),
        ("version", pv.version),
        ("appVersion", pv.app_version),
        ("description", pv.description),
    ):
        if value:
            data[key] = value
    if pv.maintainers:
        data["maintainers"] = [
            {k: v for k, v in (("name", m.name), ("email", m.email)) if v}
            for m in pv.maintainers
        ]
    data["urls"] = list(pv.urls)
    if pv.removed:
        data["removed"] = True
    if pv.digest:
        data["digest"] = pv.digest
    return data


def _package_version_from_dict(raw: Any) -> PackageVersion:
    if not isinstance(raw, Mapping):
        raise IndexFileError("unmarshalling index file: package entry is not a mapping")
    maintainers = []
    for item in raw.get("maintainers") or []:
        if not isinstance(item, Mapping):
            raise IndexFileError("unmarshalling index file: invalid maintainer")
        maintainers.append(
            Maintainer(name=_text(item.get("name")), email=_text(item.get("email")))
        )
    return PackageVersion(
        name=_text(raw.get("name")),
        version=_text(raw.get("version")),
        app_version=_text(raw.get("appVersion")),
        description=_text(raw.get("description")),
        maintainers=maintainers,
        urls=[_text(u) for u in raw.get("urls") or []],
        removed=bool(raw.get("removed", False)),
        digest=_text(raw.get("digest")),
    )


@dataclass
class IndexFile:
    """Index of the operators a repository offers."""

    api_version: str = ""
    entries: dict[str, list[PackageVersion]] = field(default_factory=dict)
    generated: datetime | None = None

    def sort_packages(self) -> None:
        """Sort every entry's versions newest first; unparsable ones go last."""
        for versions in self.entries.values():
            versions[:] = _sorted_descending(versions)

    def _to_yaml(self) -> str:
        data = {
            "apiVersion": self.api_version,
            "entries": {
                name: [_package_version_to_dict(pv) for pv in versions]
                for name, versions in self.entries.items()
            },
            "generated": _format_time(self.generated) if self.generated else None,
        }
        return _dump_yaml(data)

    def write(self, stream: IO[str]) -> None:
        """Write the index as YAML to a text stream."""
        stream.write(self._to_yaml())

    def get_by_name_and_version(self, name: str, version: str = "") -> PackageVersion:
        """Return the named operator at version, or its latest if version is empty."""
        versions = self.entries.get(name)
        if not versions:
            raise IndexFileError(f"no operator found for: {name}")
        for pv in versions:
            if version == "" or pv.version == version:
                return pv
        raise IndexFileError(f"no operator version found for {name}-{version}")

    def add_package_version(self, pv: PackageVersion) -> None:
        """Add an entry; raise if its version is missing or already listed."""
        if pv.version == "":
            raise IndexFileError(f"operator '{pv.name}' is missing version")
        versions = self.entries.setdefault(pv.name, [])
        if any(existing.version == pv.version for existing in versions):
            raise IndexFileError(
                f"operator '{pv.name}' version: {pv.version} already exists"
            )
        versions.append(pv)

    def write_file(self, path: str | os.PathLike) -> None:
        """Sort the entries and write the index to path."""
        self.sort_packages()
        with open(path, "w", encoding="utf-8") as fh:
            self.write(fh)


def parse_index_file(data: bytes | str) -> IndexFile:
    """Parse an index file and sort its packages; it must name an API version."""
    try:
        raw = yaml.safe_load(data)
    except yaml.YAMLError as exc:
        raise IndexFileError(f"unmarshalling index file: {exc}") from exc
    if raw is None:
        raw = {}
    if not isinstance(raw, Mapping):
        raise IndexFileError("unmarshalling index file: document is not a mapping")
    raw_entries = raw.get("entries") or {}
    if not isinstance(raw_entries, Mapping):
        raise IndexFileError("unmarshalling index file: entries is not a mapping")
    entries = {
        _text(name): [_package_version_from_dict(item) for item in versions or []]
        for name, versions in raw_entries.items()
    }
    index = IndexFile(
        api_version=_text(raw.get("apiVersion")),
        entries=entries,
        generated=_parse_time(raw.get("generated")),
    )
    if index.api_version == "":
        raise IndexFileError("no API version specified")
    index.sort_packages()
    return index


def new_index_file(generated: datetime | None) -> IndexFile:
    """Return an empty index generated at the given time."""
    return IndexFile(api_version="v1", generated=generated)


def to_package_version(operator: Any, digest: str, url: str) -> PackageVersion:
    """Build the index entry for an operator served under url."""
    if url == "":
        url = _DEFAULT_URL
    if not url.endswith("/"):
        url += "/"
    return PackageVersion(
        name=operator.name,
        version=operator.version,
        description=operator.description,
        maintainers=list(operator.maintainers or []),
        app_version=operator.app_version,
        urls=[f"{url}{operator.name}-{operator.version}.tgz"],
        digest=digest,
    )