"""HTTP client used to talk to operator repositories."""

from __future__ import annotations

import re

import requests

from kudo.version import get_info


class FetchError(Exception):
    """Raised when a repository resource cannot be fetched."""


class Client:
    """HTTP client that sends the headers repositories expect."""

    def __init__(self, session: requests.Session | None = None) -> None:
        self._session = session if session is not None else requests.Session()
        self._session.trust_env = True

    def __enter__(self) -> Client:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        self._session.close()

    def get(self, href: str) -> bytes:
        """Fetch href and return the body; raise FetchError on failure."""
        agent = get_info().git_version.removeprefix("v")
        headers = {"User-Agent": f"KUDO/{agent}", "Accept-Encoding": "identity"}
        try:
            resp = self._session.get(href, headers=headers)
        except requests.RequestException as exc:
            raise FetchError(f"failed to fetch {href} : {exc}") from exc
        if resp.status_code != 200:
            raise FetchError(
                f"failed to fetch {href} : {resp.status_code} {resp.reason}"
            )
        return resp.content


_BAD_ESCAPE_RE = re.compile(r"%(?![0-9A-Fa-f]{2})")


def _split_scheme(uri: str) -> tuple[str, str]:
    for i, ch in enumerate(uri):
        if ch.isascii() and ch.isalpha():
            continue
        if ch.isascii() and (ch.isdigit() or ch in "+-."):
            if i == 0:
                return "", uri
            continue
        if ch == ":":
            if i == 0:
                raise ValueError("missing protocol scheme")
            return uri[:i], uri[i + 1:]
        return "", uri
    return "", uri


def _valid_host(authority: str) -> bool:
    host = authority.rpartition("@")[2]
    if host.startswith("["):
        end = host.find("]")
        if end < 0:
            return False
        port = host[end + 1:]
    else:
        idx = host.rfind(":")
        port = host[idx:] if idx >= 0 else ""
    if not port:
        return True
    return port.startswith(":") and port[1:].isdigit() or port == ":"


def is_valid_url(uri: str) -> bool:
    """Return True if uri is an absolute URI or absolute path."""
    if not uri:
        return False
    if any(ord(ch) < 0x20 or ord(ch) == 0x7F for ch in uri):
        return False
    if uri == "*":
        return True
    try:
        scheme, rest = _split_scheme(uri)
    except ValueError:
        return False
    rest = rest.partition("?")[0]
    if not rest.startswith("/"):
        return bool(scheme)
    if _BAD_ESCAPE_RE.search(rest):
        return False
    if scheme and rest.startswith("//"):
        authority = rest[2:].partition("/")[0]
        if not _valid_host(authority):
            return False
    return True