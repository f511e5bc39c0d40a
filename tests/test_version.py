import pytest

from kudo.version import Info, clean, from_github_version, get_info, parse_version


@pytest.mark.parametrize(
    "actual, expected, val",
    [
        ("1.5", "1.4", -1),
        ("1.5", "1.5", 0),
        ("1.5", "1.6", 1),
        ("1.5.8", "1.5.0", 0),
    ],
    ids=["early", "same", "newer", "patch-ignored"],
)
def test_compare_major_minor(actual, expected, val):
    assert parse_version(expected).compare_major_minor(parse_version(actual)) == val


@pytest.mark.parametrize(
    "actual, expected",
    [("1.0.0", "1.0.0"), ("v1.0.0", "1.0.0"), ("v1.0", "1.0")],
)
def test_clean(actual, expected):
    assert clean(actual) == expected


def test_from_github_version():
    v = from_github_version("v1.5.2")
    assert (v.major, v.minor, v.patch) == (1, 5, 2)
    assert str(v) == "1.5.2"


def test_parse_prerelease_and_metadata():
    v = parse_version("1.15.6-beta.1+build.7")
    assert v.prerelease == "beta.1"
    assert v.metadata == "build.7"
    assert v.minor == 15


def test_parse_invalid():
    with pytest.raises(ValueError):
        parse_version("not-a-version")


def test_get_info_uses_dev_env(monkeypatch):
    monkeypatch.setenv("KUDO_DEV_VERSION", "v9.9.9")
    info = get_info()
    assert info.git_version == "v9.9.9"
    assert info.git_commit == "dev"
    assert str(info) == "v9.9.9"


def test_get_info_defaults_to_dev(monkeypatch):
    monkeypatch.delenv("KUDO_DEV_VERSION", raising=False)
    info = get_info()
    assert isinstance(info, Info)
    assert info.git_version == "dev"
    assert info.build_date == "1970-01-01T00:00:00Z"