"""Typed view of an environment's configuration document."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Optional, TypeVar

T = TypeVar("T")

_INTEGER = re.compile(r"[+-]?[0-9]+")


def _parse_int(text: str) -> Optional[int]:
    if _INTEGER.fullmatch(text):
        return int(text)
    return None


@dataclass
class ServiceSource:
    image: Optional[str] = None
    repo: Optional[str] = None
    branch: Optional[str] = None
    root_directory: Optional[str] = None


@dataclass
class DomainConfig:
    port: Optional[int] = None


@dataclass
class ServiceNetworking:
    service_domains: dict[str, Optional[DomainConfig]] = field(default_factory=dict)
    custom_domains: dict[str, Optional[DomainConfig]] = field(default_factory=dict)
    tcp_proxies: dict[str, Optional[dict]] = field(default_factory=dict)
    private_network_endpoint: Optional[str] = None


@dataclass
class ConfigVariable:
    value: Optional[str] = None
    default_value: Optional[str] = None
    description: Optional[str] = None
    is_optional: Optional[bool] = None


@dataclass
class DeployConfig:
    start_command: Optional[str] = None
    healthcheck_path: Optional[str] = None
    num_replicas: Optional[int] = None
    cron_schedule: Optional[str] = None


@dataclass
class BuildConfig:
    builder: Optional[str] = None
    build_command: Optional[str] = None
    dockerfile_path: Optional[str] = None


@dataclass
class VolumeInstance:
    size_mb: Optional[int] = None
    region: Optional[str] = None


@dataclass
class BucketInstance:
    region: Optional[str] = None


@dataclass
class VolumeMount:
    mount_path: Optional[str] = None


@dataclass
class ServiceInstance:
    source: Optional[ServiceSource] = None
    networking: Optional[ServiceNetworking] = None
    variables: dict[str, ConfigVariable] = field(default_factory=dict)
    deploy: Optional[DeployConfig] = None
    build: Optional[BuildConfig] = None
    volume_mounts: dict[str, VolumeMount] = field(default_factory=dict)
    is_deleted: Optional[bool] = None

    def is_image_based(self) -> bool:
        """True when the service runs a prebuilt image rather than a repo."""
        return (
            self.source is not None
            and self.source.image is not None
            and self.source.repo is None
        )

    def is_code_based(self) -> bool:
        """True when the service has no image source."""
        return self.source is None or self.source.image is None

    def get_ports(self) -> list[int]:
        """Distinct ports from domains, then TCP proxies, in key order."""
        ports: list[int] = []
        if self.networking is None:
            return ports
        domains = self.networking.service_domains
        for key in sorted(domains):
            config = domains[key]
            if config is not None and config.port is not None and config.port not in ports:
                ports.append(config.port)
        for key in sorted(self.networking.tcp_proxies):
            port = _parse_int(key)
            if port is not None and port not in ports:
                ports.append(port)
        return ports


@dataclass
class EnvironmentConfig:
    services: dict[str, ServiceInstance] = field(default_factory=dict)
    shared_variables: dict[str, ConfigVariable] = field(default_factory=dict)
    volumes: dict[str, VolumeInstance] = field(default_factory=dict)
    buckets: dict[str, BucketInstance] = field(default_factory=dict)
    private_network_disabled: Optional[bool] = None


def _object(data: Any, what: str) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise ValueError(f"Failed to parse environment config: {what} must be an object")
    return data


def _optional(data: Mapping[str, Any], key: str, parse: Callable[[Any], T]) -> Optional[T]:
    value = data.get(key)
    return None if value is None else parse(value)


def _mapping(
    data: Mapping[str, Any], key: str, parse: Callable[[Any], T]
) -> dict[str, T]:
    raw = data.get(key)
    if raw is None:
        return {}
    raw = _object(raw, key)
    return {name: parse(raw[name]) for name in sorted(raw)}


def _source(data: Any) -> ServiceSource:
    data = _object(data, "source")
    return ServiceSource(
        image=data.get("image"),
        repo=data.get("repo"),
        branch=data.get("branch"),
        root_directory=data.get("rootDirectory"),
    )


def _domain(data: Any) -> Optional[DomainConfig]:
    if data is None:
        return None
    return DomainConfig(port=_object(data, "domain").get("port"))


def _networking(data: Any) -> ServiceNetworking:
    data = _object(data, "networking")
    return ServiceNetworking(
        service_domains=_mapping(data, "serviceDomains", _domain),
        custom_domains=_mapping(data, "customDomains", _domain),
        tcp_proxies=_mapping(
            data, "tcpProxies", lambda v: None if v is None else dict(_object(v, "tcpProxy"))
        ),
        private_network_endpoint=data.get("privateNetworkEndpoint"),
    )


def _variable(data: Any) -> ConfigVariable:
    data = _object(data, "variable")
    return ConfigVariable(
        value=data.get("value"),
        default_value=data.get("defaultValue"),
        description=data.get("description"),
        is_optional=data.get("isOptional"),
    )


def _deploy(data: Any) -> DeployConfig:
    data = _object(data, "deploy")
    return DeployConfig(
        start_command=data.get("startCommand"),
        healthcheck_path=data.get("healthcheckPath"),
        num_replicas=data.get("numReplicas"),
        cron_schedule=data.get("cronSchedule"),
    )


def _build(data: Any) -> BuildConfig:
    data = _object(data, "build")
    return BuildConfig(
        builder=data.get("builder"),
        build_command=data.get("buildCommand"),
        dockerfile_path=data.get("dockerfilePath"),
    )


def _volume(data: Any) -> VolumeInstance:
    data = _object(data, "volume")
    return VolumeInstance(size_mb=data.get("sizeMB", data.get("sizeMb")), region=data.get("region"))


def _bucket(data: Any) -> BucketInstance:
    return BucketInstance(region=_object(data, "bucket").get("region"))


def _mount(data: Any) -> VolumeMount:
    return VolumeMount(mount_path=_object(data, "volumeMount").get("mountPath"))


def _service(data: Any) -> ServiceInstance:
    data = _object(data, "service")
    return ServiceInstance(
        source=_optional(data, "source", _source),
        networking=_optional(data, "networking", _networking),
        variables=_mapping(data, "variables", _variable),
        deploy=_optional(data, "deploy", _deploy),
        build=_optional(data, "build", _build),
        volume_mounts=_mapping(data, "volumeMounts", _mount),
        is_deleted=data.get("isDeleted"),
    )


def parse_environment_config(data: Any) -> EnvironmentConfig:
    """Build an EnvironmentConfig from the decoded JSON document."""
    data = _object(data, "config")
    return EnvironmentConfig(
        services=_mapping(data, "services", _service),
        shared_variables=_mapping(data, "sharedVariables", _variable),
        volumes=_mapping(data, "volumes", _volume),
        buckets=_mapping(data, "buckets", _bucket),
        private_network_disabled=data.get("privateNetworkDisabled"),
    )