"""Lookups of environments, services and service instances within a project."""

from __future__ import annotations

from typing import Any, Mapping, Optional

from raildev.errors import EnvironmentNotFoundError, ServiceNotFoundError

Node = Mapping[str, Any]


def _nodes(connection: Mapping[str, Any]) -> list[Node]:
    return [edge["node"] for edge in connection["edges"]]


def _environment_by_id(project: Node, environment_id: str) -> Optional[Node]:
    return next(
        (env for env in _nodes(project["environments"]) if env["id"] == environment_id),
        None,
    )


def get_matched_environment(project: Node, environment: str) -> Node:
    """The environment whose name or id equals the argument."""
    for env in _nodes(project["environments"]):
        if env["name"] == environment or env["id"] == environment:
            return env
    raise EnvironmentNotFoundError(environment)


def get_service(project: Node, service_name: str) -> Node:
    """The service whose name matches, ignoring case."""
    wanted = service_name.lower()
    for service in _nodes(project["services"]):
        if service["name"].lower() == wanted:
            return service
    raise ServiceNotFoundError(service_name)


def get_service_ids_in_env(project: Node, environment_id: str) -> set[str]:
    """Ids of all services with an instance in the environment."""
    env = _environment_by_id(project, environment_id)
    if env is None:
        return set()
    return {instance["serviceId"] for instance in _nodes(env["serviceInstances"])}


def find_service_instance(
    project: Node, environment_id: str, service_id: str
) -> Optional[Node]:
    """The service's instance in the environment, or None."""
    env = _environment_by_id(project, environment_id)
    if env is None:
        return None
    return next(
        (
            instance
            for instance in _nodes(env["serviceInstances"])
            if instance["serviceId"] == service_id
        ),
        None,
    )