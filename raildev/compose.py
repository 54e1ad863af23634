"""Docker Compose model and port planning for image-based services."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Optional

import yaml

from raildev.envconfig import ServiceInstance
from raildev.ports import generate_port

_INTEGER = re.compile(r"[+-]?[0-9]+")

# Public HTTP ports are derived from the internal port shifted by this amount.
_PUBLIC_PORT_OFFSET = 10000


def _parse_port(text: str) -> Optional[int]:
    return int(text) if _INTEGER.fullmatch(text) else None


class PortType(Enum):
    HTTP = "http"
    TCP = "tcp"


@dataclass(frozen=True)
class PortInfo:
    internal: int
    external: int
    public_port: int
    port_type: PortType


@dataclass
class DockerComposeService:
    image: str
    command: Optional[str] = None
    restart: Optional[str] = None
    environment: dict[str, str] = field(default_factory=dict)
    ports: list[str] = field(default_factory=list)
    volumes: list[str] = field(default_factory=list)
    networks: list[str] = field(default_factory=list)
    extra_hosts: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Compose representation, leaving out empty and unset fields."""
        out: dict[str, Any] = {"image": self.image}
        if self.command is not None:
            out["command"] = self.command
        if self.restart is not None:
            out["restart"] = self.restart
        if self.environment:
            out["environment"] = {k: self.environment[k] for k in sorted(self.environment)}
        for name in ("ports", "volumes", "networks", "extra_hosts"):
            values = getattr(self, name)
            if values:
                out[name] = list(values)
        return out


@dataclass(frozen=True)
class DockerComposeNetwork:
    driver: str


@dataclass
class DockerComposeFile:
    services: dict[str, DockerComposeService] = field(default_factory=dict)
    # The single "railway" network shared by all services, if any.
    network: Optional[DockerComposeNetwork] = None
    volumes: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "services": {name: self.services[name].to_dict() for name in sorted(self.services)}
        }
        if self.network is not None:
            out["networks"] = {"railway": {"driver": self.network.driver}}
        if self.volumes:
            out["volumes"] = {name: {} for name in sorted(set(self.volumes))}
        return out

    def to_yaml(self) -> str:
        return yaml.safe_dump(self.to_dict(), sort_keys=False, default_flow_style=False)


@dataclass(frozen=True)
class ComposeServiceStatus:
    service: str
    state: str
    health: str
    exit_code: int


def parse_compose_status(data: Mapping[str, Any] | str) -> ComposeServiceStatus:
    """Read one entry of `docker compose ps --format json`."""
    if isinstance(data, str):
        data = json.loads(data)
    if not isinstance(data, Mapping):
        raise ValueError("compose status must be an object")
    try:
        service, state, health, exit_code = (
            data["Service"],
            data["State"],
            data["Health"],
            data["ExitCode"],
        )
    except KeyError as exc:
        raise ValueError(f"missing field {exc.args[0]}") from None
    if not all(isinstance(v, str) for v in (service, state, health)):
        raise ValueError("Service, State and Health must be strings")
    if not isinstance(exit_code, int) or isinstance(exit_code, bool):
        raise ValueError("ExitCode must be an integer")
    return ComposeServiceStatus(service=service, state=state, health=health, exit_code=exit_code)


def volume_name(environment_id: str, volume_id: str) -> str:
    """Docker volume name built from the first 8 characters of each id."""
    if len(environment_id) < 8 or len(volume_id) < 8:
        raise ValueError("environment and volume ids must be at least 8 characters")
    return f"railway_{environment_id[:8]}_{volume_id[:8]}"


def _domain_ports(svc: ServiceInstance) -> list[int]:
    if svc.networking is None:
        return []
    domains = svc.networking.service_domains
    return [
        domains[key].port
        for key in sorted(domains)
        if domains[key] is not None and domains[key].port is not None
    ]


def _tcp_ports(svc: ServiceInstance) -> list[int]:
    if svc.networking is None:
        return []
    parsed = (_parse_port(key) for key in sorted(svc.networking.tcp_proxies))
    return [port for port in parsed if port is not None]


def build_port_infos(service_id: str, svc: ServiceInstance) -> list[PortInfo]:
    """HTTP ports from service domains, then TCP proxy ports, without duplicates."""
    infos: list[PortInfo] = []
    seen: set[int] = set()
    for port in _domain_ports(svc):
        if port not in seen:
            seen.add(port)
            infos.append(
                PortInfo(
                    internal=port,
                    external=generate_port(service_id, port),
                    public_port=generate_port(service_id, port + _PUBLIC_PORT_OFFSET),
                    port_type=PortType.HTTP,
                )
            )
    for port in _tcp_ports(svc):
        if port not in seen:
            seen.add(port)
            external = generate_port(service_id, port)
            infos.append(
                PortInfo(
                    internal=port,
                    external=external,
                    public_port=external,
                    port_type=PortType.TCP,
                )
            )
    return infos


def build_slug_port_mapping(service_id: str, svc: ServiceInstance) -> dict[int, int]:
    """Internal port to generated external port for every exposed port."""
    mapping: dict[int, int] = {}
    for port in _domain_ports(svc) + _tcp_ports(svc):
        mapping.setdefault(port, generate_port(service_id, port))
    return mapping