"""Operator repository configurations and the local repositories file."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Any, Mapping

import yaml

from kudo.home import Home

log = logging.getLogger(__name__)

VERSION = "v1"
DEFAULT_REPO_NAME = "community"


class RepositoryError(Exception):
    """Raised when a repository or its configuration cannot be used."""


@dataclass(frozen=True)
class Maintainer:
    """A maintainer of an operator."""

    name: str = ""
    email: str = ""


@dataclass
class Metadata:
    """Metadata of an operator, as found in its operator.yaml."""

    name: str = ""
    version: str = ""
    app_version: str = ""
    description: str = ""
    maintainers: list[Maintainer] = field(default_factory=list)


@dataclass(frozen=True)
class Configuration:
    """Connection parameters of one operator repository."""

    url: str
    name: str


DEFAULT = Configuration(
    name=DEFAULT_REPO_NAME,
    url="https://kudo-repository.storage.googleapis.com",
)


def _text(value: Any) -> str:
    """Render a YAML scalar as the string a text field would hold."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _dump_yaml(data: Any) -> str:
    return yaml.safe_dump(
        data, default_flow_style=False, sort_keys=True, allow_unicode=True
    )


@dataclass
class Repositories:
    """The set of configured repositories and the one currently in use."""

    repo_version: str = ""
    context: str = ""
    repositories: list[Configuration] = field(default_factory=list)

    def get_configuration(self, name: str) -> Configuration | None:
        """Return the configuration with the given name, or None."""
        return next((r for r in self.repositories if r.name == name), None)

    def current_configuration(self) -> Configuration | None:
        """Return the configuration of the current context, or None."""
        return self.get_configuration(self.context)

    def add(self, *args: Configuration) -> None:
        """Append repository configurations."""
        self.repositories.extend(args)

    def remove(self, name: str) -> bool:
        """Remove every configuration with this name; report if any was found."""
        kept = [r for r in self.repositories if r.name != name]
        found = len(kept) != len(self.repositories)
        self.repositories = kept
        return found

    def set_context(self, context: str) -> None:
        """Switch the current context; raise if no such repository exists."""
        if self.get_configuration(context) is None:
            raise RepositoryError(f"no config found with name: {context}")
        self.context = context

    def write_file(self, path: str | os.PathLike) -> None:
        """Write the repositories file to path."""
        data = {
            "repoVersion": self.repo_version,
            "context": self.context,
            "repositories": [
                {"url": r.url, "name": r.name} for r in self.repositories
            ],
        }
        with open(path, "w", encoding="utf-8") as fh:
            fh.write(_dump_yaml(data))


def new_repositories() -> Repositories:
    """Return repositories holding only the default repository."""
    return Repositories(
        repo_version=VERSION,
        context=DEFAULT_REPO_NAME,
        repositories=[DEFAULT],
    )


def _repositories_from_mapping(raw: Any, path: str) -> Repositories:
    if not isinstance(raw, Mapping):
        raise RepositoryError(f"invalid repositories file {path}")
    configs = []
    for item in raw.get("repositories") or []:
        if item is None:
            continue
        if not isinstance(item, Mapping):
            raise RepositoryError(f"invalid repository entry in {path}")
        configs.append(
            Configuration(url=_text(item.get("url")), name=_text(item.get("name")))
        )
    return Repositories(
        repo_version=_text(raw.get("repoVersion")),
        context=_text(raw.get("context")),
        repositories=configs,
    )


def load_repositories(path: str | os.PathLike) -> Repositories:
    """Read the repositories file at path."""
    path = os.fspath(path)
    if not os.path.exists(path):
        raise RepositoryError(
            f"could not load repositories file ({path}).\n"
            "You might need to run `kudo init` (or "
            "`kudo init --client-only` if kudo is "
            "already installed)"
        )
    with open(path, "rb") as fh:
        data = fh.read()
    try:
        raw = yaml.safe_load(data)
    except yaml.YAMLError as exc:
        raise RepositoryError(f"invalid repositories file {path}: {exc}") from exc
    return _repositories_from_mapping(raw if raw is not None else {}, path)


def configuration_from_settings(home: Home | str, repo_name: str) -> Configuration:
    """Return the configuration of repo_name, or of the current context if empty."""
    if not isinstance(home, Home):
        home = Home(home)
    try:
        repos = load_repositories(home.repository_file())
    except (RepositoryError, OSError) as exc:
        log.debug("using default repositories: %s", exc)
        repos = new_repositories()
    if repo_name == "":
        config = repos.current_configuration()
    else:
        config = repos.get_configuration(repo_name)
    if config is None:
        raise RepositoryError(f"unable to find respository for {repo_name}")
    return config