"""Operator repository tooling: versions, repository configuration, index files, package downloads and Kubernetes object helpers."""

__version__ = "0.1.0"