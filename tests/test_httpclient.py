import pytest
import requests
import responses

from kudo.httpclient import Client, FetchError, is_valid_url


@pytest.mark.parametrize(
    "uri, want",
    [
        ("foo", False),
        ("http://kudo.dev", True),
        ("https://kudo.dev", True),
        ("kudo.dev", False),
    ],
    ids=["string", "http", "https", "no-http-prefix"],
)
def test_is_valid_url(uri, want):
    assert is_valid_url(uri) is want


def test_is_valid_url_edge_cases():
    assert is_valid_url("") is False
    assert is_valid_url("/absolute/path") is True
    assert is_valid_url("http://host:port") is False


def test_get_returns_body():
    with responses.RequestsMock() as rsps:
        rsps.add(responses.GET, "http://repo.example.com/index.yaml", body=b"apiVersion: v1\n")
        with Client() as client:
            body = client.get("http://repo.example.com/index.yaml")
        agent = rsps.calls[0].request.headers["User-Agent"]
    assert body == b"apiVersion: v1\n"
    assert agent.startswith("KUDO/")


def test_get_non_200_raises():
    with responses.RequestsMock() as rsps:
        rsps.add(responses.GET, "http://repo.example.com/missing", status=404)
        client = Client()
        with pytest.raises(FetchError, match="failed to fetch http://repo.example.com/missing"):
            client.get("http://repo.example.com/missing")


def test_get_connection_error_raises():
    with responses.RequestsMock() as rsps:
        rsps.add(
            responses.GET,
            "http://repo.example.com/broken",
            body=requests.ConnectionError("boom"),
        )
        with pytest.raises(FetchError):
            Client().get("http://repo.example.com/broken")