import pytest

from kudo.home import Home
from kudo.repo import (
    DEFAULT,
    Configuration,
    RepositoryError,
    Repositories,
    configuration_from_settings,
    load_repositories,
    new_repositories,
)


def test_load_repositories_error_handling(tmp_path):
    with pytest.raises(RepositoryError) as info:
        load_repositories(tmp_path / "opt")
    contains = (
        "You might need to run `kudo init` (or `kudo init --client-only` "
        "if kudo is already installed)"
    )
    assert contains in str(info.value)


def test_load_repositories_round_trip(tmp_path):
    path = tmp_path / "repositories.yaml"
    new_repositories().write_file(path)
    repos = load_repositories(path)
    assert repos.current_configuration().name == DEFAULT.name
    assert repos.current_configuration().url == DEFAULT.url
    assert repos == new_repositories()


def test_written_file_keys(tmp_path):
    path = tmp_path / "repositories.yaml"
    new_repositories().write_file(path)
    text = path.read_text()
    assert "repoVersion: v1" in text
    assert "context: community" in text


def test_get_configuration_and_missing():
    repos = new_repositories()
    assert repos.get_configuration("community") == DEFAULT
    assert repos.get_configuration("nope") is None


def test_add_and_remove():
    repos = new_repositories()
    local = Configuration(url="http://localhost:8080", name="local")
    other = Configuration(url="http://repo.example.com", name="other")
    repos.add(local, other)
    assert [r.name for r in repos.repositories] == ["community", "local", "other"]
    assert repos.remove("local") is True
    assert [r.name for r in repos.repositories] == ["community", "other"]
    assert repos.remove("local") is False


def test_set_context():
    repos = new_repositories()
    repos.add(Configuration(url="http://localhost:8080", name="local"))
    repos.set_context("local")
    assert repos.current_configuration().url == "http://localhost:8080"
    with pytest.raises(RepositoryError, match="no config found with name: missing"):
        repos.set_context("missing")
    assert repos.context == "local"


def test_empty_repositories_have_no_current():
    assert Repositories().current_configuration() is None


def test_configuration_from_settings_defaults(tmp_path):
    config = configuration_from_settings(Home(str(tmp_path)), "")
    assert config == DEFAULT


def test_configuration_from_settings_unknown(tmp_path):
    with pytest.raises(RepositoryError, match="unable to find respository for nope"):
        configuration_from_settings(Home(str(tmp_path)), "nope")


def test_configuration_from_settings_reads_file(tmp_path):
    (tmp_path / "repository").mkdir()
    repos = new_repositories()
    repos.add(Configuration(url="http://localhost:8080", name="local"))
    repos.set_context("local")
    repos.write_file(tmp_path / "repository" / "repositories.yaml")

    home = Home(str(tmp_path))
    assert configuration_from_settings(home, "").name == "local"
    assert configuration_from_settings(home, "community") == DEFAULT


def test_configuration_from_settings_bad_file_falls_back(tmp_path):
    (tmp_path / "repository").mkdir()
    (tmp_path / "repository" / "repositories.yaml").write_text("- just\n- a list\n")
    assert configuration_from_settings(Home(str(tmp_path)), "") == DEFAULT


def test_load_repositories_rejects_non_mapping(tmp_path):
    path = tmp_path / "repositories.yaml"
    path.write_text("- a\n- b\n")
    with pytest.raises(RepositoryError):
        load_repositories(path)