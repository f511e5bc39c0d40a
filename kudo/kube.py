"""Helpers for Kubernetes objects represented as plain mappings."""

from __future__ import annotations

import logging
from typing import Any, Mapping

import yaml

log = logging.getLogger(__name__)

OPERATOR_LABEL = "kudo.dev/operator"
OPERATOR_VERSION_ANNOTATION = "kudo.dev/operator-version"
INSTANCE_LABEL = "kudo.dev/instance"
HERITAGE_LABEL = "heritage"
PLAN_ANNOTATION = "kudo.dev/plan"
PHASE_ANNOTATION = "kudo.dev/phase"
STEP_ANNOTATION = "kudo.dev/step"

POD_READY = "Ready"
CONDITION_TRUE = "True"


class UnhealthyError(Exception):
    """Raised when an object is not healthy."""


def is_pod_ready(pod: Mapping[str, Any]) -> bool:
    """Return True if the pod has a true Ready condition."""
    return is_pod_ready_condition_true(pod.get("status") or {})


def get_pod_ready_condition(status: Mapping[str, Any] | None) -> dict | None:
    """Return the Ready condition of a pod status, or None."""
    return get_pod_condition(status, POD_READY)[1]


def get_pod_condition(
    status: Mapping[str, Any] | None, condition_type: str
) -> tuple[int, dict | None]:
    """Return (index, condition) of the given type, or (-1, None)."""
    if status is None:
        return -1, None
    for index, condition in enumerate(status.get("conditions") or []):
        if condition.get("type") == condition_type:
            return index, condition
    return -1, None


def is_pod_ready_condition_true(status: Mapping[str, Any] | None) -> bool:
    """Return True if the status holds a true Ready condition."""
    condition = get_pod_ready_condition(status)
    return condition is not None and condition.get("status") == CONDITION_TRUE


def _name(obj: Mapping[str, Any]) -> str:
    return (obj.get("metadata") or {}).get("name", "")


def is_healthy(obj: Mapping[str, Any]) -> None:
    """Return if obj is healthy; raise UnhealthyError otherwise."""
    kind = (obj.get("apiVersion"), obj.get("kind"))
    spec = obj.get("spec") or {}
    status = obj.get("status") or {}
    name = _name(obj)
    ready = status.get("readyReplicas", 0)

    if kind == ("apps/v1", "StatefulSet"):
        replicas = spec.get("replicas")
        if replicas is None:
            raise UnhealthyError("replicas not set, so can't be healthy")
        if ready == replicas:
            log.info("Statefulset %s is marked healthy", name)
            return
        current = status.get("replicas", 0)
        log.info(
            "HealthUtil: Statefulset %s is NOT healthy. Not enough ready replicas: %s/%s",
            name, ready, current,
        )
        raise UnhealthyError(
            f"ready replicas ({ready}) does not equal requested replicas ({current})"
        )

    if kind == ("apps/v1", "Deployment"):
        replicas = spec.get("replicas")
        if replicas is None:
            raise UnhealthyError("replicas not set, so can't be healthy")
        if ready == replicas:
            log.info("HealthUtil: Deployment %s is marked healthy", name)
            return
        log.info(
            "HealthUtil: Deployment %s is NOT healthy. Not enough ready replicas: %s/%s",
            name, ready, replicas,
        )
        raise UnhealthyError(
            f"ready replicas ({ready}) does not equal requested replicas ({replicas})"
        )

    if kind == ("batch/v1", "Job"):
        if status.get("succeeded", 0) == 1:
            log.info('HealthUtil: Job "%s" is marked healthy', name)
            return
        raise UnhealthyError(f'job "{name}" still running or failed')

    log.info("HealthUtil: Unknown type is marked healthy by default")


def parse_kubernetes_objects(text: str) -> list[dict]:
    """Parse "---" separated YAML documents into Kubernetes objects."""
    objects = []
    for chunk in text.split("---"):
        if chunk in ("", "\n"):
            continue
        try:
            obj = yaml.safe_load(chunk)
        except yaml.YAMLError as exc:
            raise ValueError(f"invalid YAML: {exc}") from exc
        if not isinstance(obj, dict):
            raise ValueError(f"Object 'Kind' is missing in {chunk!r}")
        if not obj.get("kind"):
            raise ValueError(f"Object 'Kind' is missing in {chunk!r}")
        if not obj.get("apiVersion"):
            raise ValueError(f"Object 'apiVersion' is missing in {chunk!r}")
        objects.append(obj)
    return objects