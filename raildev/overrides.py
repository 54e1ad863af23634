"""Rewriting of platform variables so services can reach each other locally."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping, MutableMapping, Optional

from raildev.https_proxy import get_mkcert_ca_root

_LOCALHOST = "localhost"


class NetworkMode(Enum):
    """How services reach each other during local development."""

    # Services resolve each other by container name on a Docker network.
    DOCKER = "docker"
    # Everything runs on localhost with port mapping.
    HOST = "host"


@dataclass(frozen=True)
class HttpsDomainConfig:
    base_domain: str
    use_port_443: bool


@dataclass
class ServiceDomainConfig:
    """Per-service input: its slug, port mapping and production public domain."""

    slug: str = ""
    port_mapping: dict[int, int] = field(default_factory=dict)
    public_domain_prod: Optional[str] = None
    https_proxy_port: Optional[int] = None


@dataclass(frozen=True)
class ServiceLocalDomains:
    """Resolved local domain values for one service."""

    private_domain: str
    public_domain: Optional[str]
    tcp_domain: str
    tcp_port: Optional[int]


def _first_port(mapping: Mapping[int, int]) -> Optional[int]:
    return next(iter(mapping.values()), None)


@dataclass
class LocalDevelopContext:
    """Environment-wide settings used to rewrite variables."""

    mode: NetworkMode
    https_config: Optional[HttpsDomainConfig] = None
    services: dict[str, ServiceDomainConfig] = field(default_factory=dict)

    def https_enabled(self) -> bool:
        return self.https_config is not None

    def for_service(self, service_id: str) -> Optional[ServiceLocalDomains]:
        """Local domain values for a service, or None when it is unknown."""
        config = self.services.get(service_id)
        if config is None:
            return None
        private_domain = config.slug if self.mode is NetworkMode.DOCKER else _LOCALHOST
        return ServiceLocalDomains(
            private_domain=private_domain,
            public_domain=self._resolve_public_domain(config),
            tcp_domain=_LOCALHOST,
            tcp_port=_first_port(config.port_mapping),
        )

    def _resolve_public_domain(self, config: ServiceDomainConfig) -> Optional[str]:
        https = self.https_config
        if https is not None:
            if https.use_port_443:
                return f"{config.slug}.{https.base_domain}"
            port = config.https_proxy_port
            if port is None:
                port = _first_port(config.port_mapping)
            if port is None:
                port = 443
            return f"{https.base_domain}:{port}"
        port = _first_port(config.port_mapping)
        return None if port is None else f"{_LOCALHOST}:{port}"

    def public_domain_mapping(self) -> dict[str, str]:
        """Production public domain to local public domain, per service."""
        mapping: dict[str, str] = {}
        for config in self.services.values():
            if config.public_domain_prod is None:
                continue
            local = self._resolve_public_domain(config)
            if local is not None:
                mapping[config.public_domain_prod] = local
        return mapping

    def service_slugs(self) -> list[str]:
        return [config.slug for config in self.services.values()]

    def port_mapping_for_slug(self, slug: str) -> Optional[dict[int, int]]:
        for config in self.services.values():
            if config.slug == slug:
                return config.port_mapping
        return None


def is_deprecated_railway_var(key: str) -> bool:
    """True for platform variables that are no longer provided."""
    if key == "RAILWAY_STATIC_URL":
        return True
    return key.startswith("RAILWAY_SERVICE_") and key.endswith("_URL")


def _colors_enabled() -> bool:
    return "NO_COLOR" not in os.environ and os.environ.get("CLICOLOR") != "0"


def _style(text: str, codes: str) -> str:
    return f"\x1b[{codes}m{text}\x1b[0m" if _colors_enabled() else text


def _dim(text: str) -> str:
    return _style(text, "2")


def _green(text: str) -> str:
    return _style(text, "32")


def print_domain_info(service_name: str, domains: ServiceLocalDomains) -> None:
    print()
    print(f"{_dim('Domain info for')} {_style(service_name, '36')}")
    print(f"  {_dim('RAILWAY_PRIVATE_DOMAIN →')} {_green(domains.private_domain)}")
    if domains.public_domain is not None:
        print(f"  {_dim('RAILWAY_PUBLIC_DOMAIN  →')} {_green(domains.public_domain)}")
    print(f"  {_dim('RAILWAY_TCP_PROXY_DOMAIN →')} {_green(domains.tcp_domain)}")
    if domains.tcp_port is not None:
        print(f"  {_dim('RAILWAY_TCP_PROXY_PORT →')} {_green(str(domains.tcp_port))}")


def print_context_info(ctx: LocalDevelopContext) -> None:
    print()
    print(_dim("Cross-service domain mappings:"))
    mapping = ctx.public_domain_mapping()
    if not mapping:
        print(f"  {_dim('(none)')}")
        return
    for prod, local in mapping.items():
        print(f"  {_style(prod, '33')} {_dim('→')} {_green(local)}")


def _replace_domain_with_port_mapping(
    value: str, domain: str, port_mapping: Mapping[int, int]
) -> str:
    for internal, external in port_mapping.items():
        value = value.replace(f"{domain}:{internal}", f"{_LOCALHOST}:{external}")
    return value.replace(domain, _LOCALHOST)


def _replace_domain_refs(
    value: str, ctx: LocalDevelopContext, public_mapping: Mapping[str, str]
) -> str:
    result = value
    for slug in ctx.service_slugs():
        ports = ctx.port_mapping_for_slug(slug)
        internal_domain = f"{slug}.railway.internal"
        if internal_domain in result:
            if ctx.mode is NetworkMode.DOCKER:
                result = result.replace(internal_domain, slug)
            elif ports is not None:
                result = _replace_domain_with_port_mapping(result, internal_domain, ports)
            else:
                result = result.replace(internal_domain, _LOCALHOST)
        # On the host network, bare "slug:port" references also need rewriting.
        if ctx.mode is NetworkMode.HOST and ports is not None:
            for internal, external in ports.items():
                result = result.replace(f"{slug}:{internal}", f"{_LOCALHOST}:{external}")

    for prod, local in public_mapping.items():
        if not ctx.https_enabled():
            result = result.replace(f"https://{prod}", f"http://{local}")
        result = result.replace(prod, local)
    return result


def override_railway_vars(
    variables: Mapping[str, str],
    service: Optional[ServiceLocalDomains],
    ctx: LocalDevelopContext,
) -> dict[str, str]:
    """Rewrite variables for local use, sorted by key.

    Deprecated variables are dropped. Without a service only cross-service
    references are rewritten.
    """
    public_mapping = ctx.public_domain_mapping()
    result: dict[str, str] = {}
    for key in sorted(variables):
        if is_deprecated_railway_var(key):
            continue
        value = variables[key]
        if service is not None and key == "RAILWAY_PRIVATE_DOMAIN":
            new_value = service.private_domain
        elif service is not None and key == "RAILWAY_PUBLIC_DOMAIN":
            new_value = service.public_domain if service.public_domain is not None else _LOCALHOST
        elif service is not None and key == "RAILWAY_TCP_PROXY_DOMAIN":
            new_value = service.tcp_domain
        elif service is not None and key == "RAILWAY_TCP_PROXY_PORT":
            new_value = str(service.tcp_port) if service.tcp_port is not None else value
        else:
            new_value = _replace_domain_refs(value, ctx, public_mapping)
        result[key] = new_value
    return result


def inject_mkcert_ca_vars(variables: MutableMapping[str, str]) -> None:
    """Point runtimes with their own CA stores at the mkcert root CA.

    Existing values are kept; nothing happens when mkcert or its CA is missing.
    """
    ca_root = get_mkcert_ca_root()
    if ca_root is None:
        return
    ca_file = str(ca_root / "rootCA.pem")
    for key in ("NODE_EXTRA_CA_CERTS", "REQUESTS_CA_BUNDLE", "SSL_CERT_FILE", "CURL_CA_BUNDLE"):
        variables.setdefault(key, ca_file)
    variables.setdefault("SSL_CERT_DIR", str(ca_root))