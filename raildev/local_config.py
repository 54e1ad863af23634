"""Per-project configuration of code services run on the developer's machine."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from raildev.ports import get_develop_dir

_FILE_NAME = "local-dev.json"


@dataclass
class CodeServiceConfig:
    command: str
    directory: str
    port: Optional[int] = None


@dataclass
class LocalDevConfig:
    version: int = 0
    services: dict[str, CodeServiceConfig] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """JSON form; a service's port is left out when unset."""
        services: dict[str, Any] = {}
        for service_id, config in self.services.items():
            entry: dict[str, Any] = {
                "command": config.command,
                "directory": config.directory,
            }
            if config.port is not None:
                entry["port"] = config.port
            services[service_id] = entry
        return {"version": self.version, "services": services}

    def save(self, project_id: str) -> None:
        """Write the configuration atomically through a temporary file."""
        path = config_path(project_id)
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = path.with_suffix(".tmp")
        tmp_path.write_text(json.dumps(self.to_dict(), indent=2), encoding="utf-8")
        os.replace(tmp_path, path)

    def get_service(self, service_id: str) -> Optional[CodeServiceConfig]:
        return self.services.get(service_id)

    def set_service(self, service_id: str, config: CodeServiceConfig) -> None:
        self.services[service_id] = config

    def remove_service(self, service_id: str) -> Optional[CodeServiceConfig]:
        return self.services.pop(service_id, None)


def config_path(project_id: str) -> Path:
    return get_develop_dir(project_id) / _FILE_NAME


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _parse_service(service_id: str, data: Any) -> CodeServiceConfig:
    if not isinstance(data, dict):
        raise ValueError(f"service {service_id} must be an object")
    command = data.get("command")
    directory = data.get("directory")
    if not isinstance(command, str) or not isinstance(directory, str):
        raise ValueError(f"service {service_id} needs string command and directory")
    port = data.get("port")
    if port is not None and (not _is_int(port) or not 0 <= port <= 0xFFFF):
        raise ValueError(f"service {service_id} has an invalid port")
    return CodeServiceConfig(command=command, directory=directory, port=port)


def _parse_config(data: Any) -> LocalDevConfig:
    if not isinstance(data, dict):
        raise ValueError("configuration must be an object")
    version = data.get("version")
    if not _is_int(version) or not 0 <= version <= 0xFFFFFFFF:
        raise ValueError("version must be an unsigned integer")
    services = data.get("services")
    if not isinstance(services, dict):
        raise ValueError("services must be an object")
    return LocalDevConfig(
        version=version,
        services={sid: _parse_service(sid, entry) for sid, entry in services.items()},
    )


def load_local_config(project_id: str) -> LocalDevConfig:
    """Load the project's configuration; an empty one when the file is absent."""
    path = config_path(project_id)
    if not path.exists():
        return LocalDevConfig()
    content = path.read_text(encoding="utf-8")
    try:
        return _parse_config(json.loads(content))
    except ValueError as exc:
        raise ValueError(f"Failed to parse {path}: {exc}") from exc