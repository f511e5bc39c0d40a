"""Location of the local CLI configuration."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass

_VAR_RE = re.compile(r"\$(?:\{([^}]*)\}|([A-Za-z0-9_]+))")


def _expand_env(text: str) -> str:
    def replace(match: re.Match) -> str:
        name = match.group(1) if match.group(1) is not None else match.group(2)
        return os.environ.get(name, "")

    return _VAR_RE.sub(replace, text)


@dataclass(frozen=True)
class Home:
    """Directory holding the CLI configuration; may reference env vars."""

    location: str

    def __str__(self) -> str:
        return _expand_env(self.location)

    def _path(self, *elems: str) -> str:
        parts = [p for p in (str(self), *elems) if p]
        if not parts:
            return ""
        return os.path.normpath(os.path.join(*parts))

    def repository(self) -> str:
        """Path of the local repository directory."""
        return self._path("repository")

    def repository_file(self) -> str:
        """Path of the repositories.yaml file."""
        return self._path("repository", "repositories.yaml")