"""Console summaries of locally started services."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from raildev.compose import PortInfo
from raildev.https_proxy import HttpsConfig
from raildev.ports import slugify


@dataclass
class ServiceSummary:
    name: str
    image: str
    var_count: int
    ports: list[PortInfo] = field(default_factory=list)
    volumes: list[str] = field(default_factory=list)


def _colors_enabled() -> bool:
    return "NO_COLOR" not in os.environ and os.environ.get("CLICOLOR") != "0"


def _style(text: str, codes: str) -> str:
    return f"\x1b[{codes}m{text}\x1b[0m" if _colors_enabled() else text


def _dim(text: str) -> str:
    return _style(text, "2")


def print_code_service_summary(
    service_name: str,
    command: str,
    working_dir: Path,
    var_count: int,
    internal_port: Optional[int],
    proxy_port: Optional[int],
    https_config: Optional[HttpsConfig],
) -> None:
    """Print the command, directory, variable count and URLs of a code service."""
    slug = slugify(service_name)
    print(_style(service_name, "1;32"))
    print(f"  {_dim('Command')}: {command}")
    print(f"  {_dim('Directory')}: {working_dir}")
    print(f"  {_dim('Variables')}: {var_count} variables")
    if internal_port is not None and proxy_port is not None:
        print(f"  {_dim('Networking')}:")
        if https_config is None:
            print(f"    http://localhost:{internal_port}")
        else:
            print(f"    {_dim('Private')}: http://localhost:{internal_port}")
            if https_config.use_port_443:
                public = f"https://{slug}.{https_config.base_domain}"
            else:
                public = f"https://{https_config.base_domain}:{proxy_port}"
            print(f"    {_dim('Public')}:  {public}")
    print()