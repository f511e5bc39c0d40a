# kudo

A library for working with operator repositories: the repository
configuration file kept under the user's home, the `index.yaml` that a
repository publishes, and downloading operator packages from it. Small
helpers for Kubernetes objects, given as plain mappings, are included as
well: checking pod readiness, judging resource health and splitting
multi-document YAML.

## Installation

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Versions (`kudo.version`)

```python
from kudo.version import parse_version, from_github_version, clean, get_info

required = parse_version("1.15")           # Version(major=1, minor=15, patch=0)
server = from_github_version("v1.15.6")    # a leading "v" is accepted
required.compare_major_minor(server)       # 0: only major and minor are compared
clean("v1.0.0")                            # "1.0.0"
str(get_info())                            # the build's version string
```

`parse_version` raises `ValueError` for text that is not a semantic
version. When no release version is stamped into the build, `get_info()`
reports the value of the `KUDO_DEV_VERSION` environment variable, or
`"dev"` if it is unset.

## Repository configuration (`kudo.home`, `kudo.repo`)

`Home` points at the configuration directory; `$NAME` and `${NAME}`
environment references in it are expanded.

```python
from kudo.home import Home
from kudo.repo import (
    Configuration, load_repositories, new_repositories, configuration_from_settings,
)

home = Home("$HOME/.kudo")
home.repository_file()   # .../repository/repositories.yaml

repos = new_repositories()            # holds only the default "community" repository
repos.current_configuration().url
repos.add(Configuration(url="http://localhost:8080", name="local"))
repos.set_context("local")            # RepositoryError if no such repository
repos.remove("local")                 # True if one was removed
repos.write_file(home.repository_file())

repos = load_repositories(home.repository_file())
config = configuration_from_settings(home, "")   # repository of the current context
```

`load_repositories` raises `RepositoryError` when the file does not
exist. `configuration_from_settings` falls back to the default
repositories when the file cannot be read, and raises `RepositoryError`
when the requested repository is not configured.

## Index files (`kudo.index`)

```python
from kudo.index import parse_index_file

with open("index.yaml", "rb") as fh:
    index = parse_index_file(fh.read())

latest = index.get_by_name_and_version("kafka", "")       # newest version
exact = index.get_by_name_and_version("kafka", "0.1.0")
```

Entries are sorted newest first; versions that cannot be parsed go last.
An index without an `apiVersion` is rejected. `add_package_version`
refuses duplicates and entries without a version, `write` writes the
index as YAML to a text stream and `write_file` sorts and stores it at a
path. `new_index_file` creates an empty index, and `to_package_version`
builds an entry for an operator (any object with `name`, `version`,
`description`, `maintainers` and `app_version`) served under a base URL.
All of these raise `IndexFileError` on failure.

## Downloading packages (`kudo.repo_client`, `kudo.httpclient`)

```python
from kudo.home import Home
from kudo.repo_client import client_from_settings

client = client_from_settings(Home("$HOME/.kudo"), "")
index = client.download_index_file()
data = client.get_package_bytes("kafka", "0.2.0")   # raw archive bytes
```

Requests carry a `KUDO/<version>` user agent and honour proxy settings
from the environment. Each URL listed for a package is tried in turn and
the first that answers with status 200 is used; if none does, the last
error is raised as `RepositoryError`. `kudo.httpclient.is_valid_url`
tells whether a string is an absolute URL or path.

## Kubernetes helpers (`kudo.kube`)

```python
from kudo.kube import is_pod_ready, is_healthy, parse_kubernetes_objects, UnhealthyError

objs = parse_kubernetes_objects(text)   # "---" separated documents
is_pod_ready(pod)                       # True if the Ready condition is "True"
is_healthy(deployment)                  # raises UnhealthyError if not ready
```

`is_healthy` judges StatefulSets and Deployments by ready replicas and
Jobs by success; other kinds are taken as healthy.

## What this package does not do

It provides no command-line tool and does not talk to a Kubernetes
cluster: it cannot install operators, instances or operator versions, or
query a server's version. Downloaded packages are returned as raw bytes;
unpacking archives and building an index from a directory of archives is
left to the caller.