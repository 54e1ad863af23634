"""Local-develop context for running a single command against local services."""

from __future__ import annotations

from typing import Any, Mapping, Optional

from raildev.compose import build_slug_port_mapping
from raildev.envconfig import EnvironmentConfig
from raildev.local_config import LocalDevConfig
from raildev.overrides import (
    HttpsDomainConfig,
    LocalDevelopContext,
    NetworkMode,
    ServiceDomainConfig,
    override_railway_vars,
)
from raildev.ports import (
    DEFAULT_PORT,
    build_service_endpoints,
    generate_port,
    get_https_domain,
    get_https_mode,
)


def _service_names(project: Mapping[str, Any]) -> dict[str, str]:
    return {
        edge["node"]["id"]: edge["node"]["name"] for edge in project["services"]["edges"]
    }


def build_local_override_context(
    project: Mapping[str, Any],
    environment_id: str,
    config: EnvironmentConfig,
    local_dev_config: Optional[LocalDevConfig] = None,
) -> LocalDevelopContext:
    """Host-network context covering image services and configured code services."""
    slugs = build_service_endpoints(_service_names(project), config)

    ctx = LocalDevelopContext(NetworkMode.HOST)
    domain = get_https_domain(environment_id)
    if domain is not None:
        ctx.https_config = HttpsDomainConfig(
            base_domain=domain, use_port_443=get_https_mode(environment_id)
        )

    for service_id, svc in config.services.items():
        if svc.is_image_based():
            ctx.services[service_id] = ServiceDomainConfig(
                slug=slugs.get(service_id, ""),
                port_mapping=build_slug_port_mapping(service_id, svc),
            )

    if local_dev_config is not None:
        for service_id, svc in config.services.items():
            if not svc.is_code_based():
                continue
            code_config = local_dev_config.get_service(service_id)
            if code_config is None:
                continue
            ports = svc.get_ports()
            if code_config.port is not None:
                port = code_config.port
                external_port = code_config.port
            else:
                port = ports[0] if ports else DEFAULT_PORT
                external_port = generate_port(service_id, port)

            port_mapping = {internal: external_port for internal in ports}
            port_mapping[port] = external_port

            ctx.services[service_id] = ServiceDomainConfig(
                slug=slugs.get(service_id, ""),
                port_mapping=port_mapping,
                https_proxy_port=generate_port(service_id, port),
            )

    return ctx


def apply_local_overrides(
    variables: Mapping[str, str], service_id: str, ctx: LocalDevelopContext
) -> dict[str, str]:
    """Rewrite a service's variables to point at local services."""
    return override_railway_vars(variables, ctx.for_service(service_id), ctx)