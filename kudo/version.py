"""Build information and semantic version helpers."""

from __future__ import annotations

import os
import platform
import re
import sys
from dataclasses import dataclass, field

# Fallback values used when the build does not stamp real ones in.
_GIT_VERSION = "v0.0.0-master+$Format:%h$"
_GIT_COMMIT = "$Format:%H$"
_BUILD_DATE = "1970-01-01T00:00:00Z"

_SEMVER_RE = re.compile(
    r"^v?([0-9]+)(\.[0-9]+)?(\.[0-9]+)?"
    r"(-([0-9A-Za-z\-]+(\.[0-9A-Za-z\-]+)*))?"
    r"(\+([0-9A-Za-z\-]+(\.[0-9A-Za-z\-]+)*))?$"
)


@dataclass(frozen=True)
class Info:
    """Versioning information about the running code."""

    git_version: str
    git_commit: str
    build_date: str
    python_version: str
    compiler: str
    platform: str

    def __str__(self) -> str:
        return self.git_version


def get_info() -> Info:
    """Return the version information of this codebase."""
    git_version, git_commit = _GIT_VERSION, _GIT_COMMIT
    if "$Format" in git_version:
        git_version = os.environ.get("KUDO_DEV_VERSION") or "dev"
        git_commit = "dev"
    return Info(
        git_version=git_version,
        git_commit=git_commit,
        build_date=_BUILD_DATE,
        python_version=platform.python_version(),
        compiler=platform.python_implementation(),
        platform=f"{sys.platform}/{platform.machine()}",
    )


@dataclass(frozen=True)
class Version:
    """A semantic version."""

    major: int
    minor: int = 0
    patch: int = 0
    prerelease: str = ""
    metadata: str = ""
    original: str = field(default="", compare=False)

    def __str__(self) -> str:
        text = f"{self.major}.{self.minor}.{self.patch}"
        if self.prerelease:
            text += f"-{self.prerelease}"
        if self.metadata:
            text += f"+{self.metadata}"
        return text

    def compare_major_minor(self, other: Version) -> int:
        """Compare only major and minor parts: -1, 0 or 1."""
        mine = (self.major, self.minor)
        theirs = (other.major, other.minor)
        return (mine > theirs) - (mine < theirs)


def parse_version(text: str) -> Version:
    """Parse a semantic version; raise ValueError if it is not one."""
    match = _SEMVER_RE.match(text)
    if match is None:
        raise ValueError(f"Invalid Semantic Version: {text!r}")
    minor = int(match.group(2)[1:]) if match.group(2) else 0
    patch = int(match.group(3)[1:]) if match.group(3) else 0
    return Version(
        major=int(match.group(1)),
        minor=minor,
        patch=patch,
        prerelease=match.group(5) or "",
        metadata=match.group(8) or "",
        original=text,
    )


def from_github_version(text: str) -> Version:
    """Parse a version that may carry a leading "v"."""
    return parse_version(clean(text))


def clean(ver: str) -> str:
    """Return the version without a leading "v"."""
    return ver[1:] if ver.startswith("v") else ver