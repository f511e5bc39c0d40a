"""Client that retrieves index files and packages from a repository."""

from __future__ import annotations

import logging
from urllib.parse import urlsplit, urlunsplit

from kudo.home import Home
from kudo.httpclient import Client, FetchError
from kudo.index import IndexFile, IndexFileError, PackageVersion, parse_index_file
from kudo.repo import Configuration, RepositoryError, configuration_from_settings

log = logging.getLogger(__name__)


def _validate_url(url: str) -> None:
    if url.startswith(":") or any(ord(ch) < 0x20 or ord(ch) == 0x7F for ch in url):
        raise RepositoryError(f"invalid repository URL: {url}")
    try:
        urlsplit(url)
    except ValueError as exc:
        raise RepositoryError(f"invalid repository URL: {url}") from exc


class RepoClient:
    """Access to one operator repository."""

    def __init__(self, config: Configuration, client: Client | None = None) -> None:
        _validate_url(config.url)
        self.config = config
        self.client = client if client is not None else Client()

    def download_index_file(self) -> IndexFile:
        """Fetch and parse the repository's index.yaml."""
        try:
            parts = urlsplit(self.config.url)
        except ValueError as exc:
            raise RepositoryError(f"parsing config url: {exc}") from exc
        path = parts.path.removesuffix("/") + "/index.yaml"
        index_url = urlunsplit(parts._replace(path=path))
        try:
            body = self.client.get(index_url)
        except FetchError as exc:
            raise RepositoryError(f"getting index url: {exc}") from exc
        return parse_index_file(body)

    def _fetch_package(self, pv: PackageVersion) -> bytes:
        last_error: RepositoryError | None = None
        for url in pv.urls:
            log.debug("attempt to retrieve package from url: %s", url)
            try:
                return self.client.get(url)
            except FetchError as exc:
                last_error = RepositoryError(
                    f"unable to read package getting package url: {exc}"
                )
                last_error.__cause__ = exc
                log.error("failure against url: %s  %s", url, last_error)
        log.info("Giving up with err %s", last_error)
        if last_error is None:
            raise RepositoryError(f"unable to read package {pv.name}: no urls")
        raise last_error

    def get_package_bytes(self, name: str, version: str = "") -> bytes:
        """Return the archive of a package; the latest one if version is empty."""
        log.debug("getting package reader for %s, %s", name, version)
        log.debug("repository using: %s", self.config)
        try:
            index = self.download_index_file()
        except RepositoryError as exc:
            raise RepositoryError(
                f"could not download repository index file: {exc}"
            ) from exc
        try:
            pv = index.get_by_name_and_version(name, version)
        except IndexFileError as exc:
            raise RepositoryError(f"getting {name} in index file: {exc}") from exc
        return self._fetch_package(pv)


def client_from_settings(home: Home | str, repo_name: str) -> RepoClient:
    """Return a client for repo_name, or the current repository if it is empty."""
    return RepoClient(configuration_from_settings(home, repo_name))