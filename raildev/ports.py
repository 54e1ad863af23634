"""Port allocation, slugs and paths for local development."""

from __future__ import annotations

import os
import random
from pathlib import Path
from typing import Mapping

from raildev.envconfig import EnvironmentConfig

DEFAULT_PORT = 8080

PORT_RANGE_MIN = 10000
PORT_RANGE_SIZE = 50000

RANDOM_PORT_MIN = 3000
RANDOM_PORT_MAX = 9000

_U32 = 0xFFFFFFFF


def slugify(name: str) -> str:
    """Lowercase ASCII alphanumerics, with spaces, dashes and underscores as dashes."""
    chars = []
    for c in name:
        if c.isascii() and c.isalnum():
            chars.append(c.lower())
        elif c in " -_":
            chars.append("-")
    return "".join(chars).strip("-")


def generate_port(service_id: str, internal_port: int) -> int:
    """Deterministic external port in [10000, 60000) for a service's internal port."""
    digest = 5381
    for byte in service_id.encode("utf-8"):
        digest = (digest * 33 + byte) & _U32
    digest = (digest + (internal_port & _U32)) & _U32
    return PORT_RANGE_MIN + digest % PORT_RANGE_SIZE


def generate_random_port() -> int:
    """A random port for configuration prompts."""
    return random.randrange(RANDOM_PORT_MIN, RANDOM_PORT_MAX)


def resolve_path(path: os.PathLike | str) -> Path:
    """Canonicalise on POSIX systems; leave the path alone elsewhere or on failure."""
    path = Path(path)
    if os.name == "nt":
        return path
    try:
        return path.resolve(strict=True)
    except (OSError, RuntimeError):
        return path


def get_develop_dir(project_id: str) -> Path:
    return Path.home() / ".railway" / "develop" / project_id


def get_compose_path(project_id: str) -> Path:
    return get_develop_dir(project_id) / "docker-compose.yml"


def is_local_develop_active(project_id: str) -> bool:
    """Local develop mode is active when the compose file exists."""
    return get_compose_path(project_id).exists()


def get_https_domain(project_id: str) -> str | None:
    try:
        return (get_develop_dir(project_id) / "https_domain").read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        return None


def get_https_mode(project_id: str) -> bool:
    """True when the stored certificates were made for port 443."""
    mode_file = get_develop_dir(project_id) / "certs" / "https_mode"
    try:
        return mode_file.read_text(encoding="utf-8").strip() == "port_443"
    except (OSError, UnicodeDecodeError):
        return False


def build_service_endpoints(
    service_names: Mapping[str, str], config: EnvironmentConfig
) -> dict[str, str]:
    """Map service id to its private endpoint, falling back to the slugified name."""
    endpoints = {}
    for service_id, name in service_names.items():
        svc = config.services.get(service_id)
        endpoint = None
        if svc is not None and svc.networking is not None:
            endpoint = svc.networking.private_network_endpoint
        endpoints[service_id] = endpoint if endpoint is not None else slugify(name)
    return endpoints