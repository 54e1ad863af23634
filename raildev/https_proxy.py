"""Local HTTPS certificates and the Caddy reverse-proxy configuration."""

from __future__ import annotations

import socket
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

_PORT_443_MODE = "port_443"
_FALLBACK_MODE = "fallback"


@dataclass
class HttpsConfig:
    project_slug: str
    base_domain: str
    cert_path: Path
    key_path: Path
    use_port_443: bool


@dataclass(frozen=True)
class ServicePort:
    slug: str
    internal_port: int
    external_port: int
    is_http: bool
    is_code_service: bool


def _run(args: Sequence[str]) -> Optional[subprocess.CompletedProcess]:
    try:
        return subprocess.run(list(args), capture_output=True, check=False)
    except OSError:
        return None


def _text(data: bytes | str | None) -> str:
    if data is None:
        return ""
    if isinstance(data, bytes):
        return data.decode("utf-8", errors="replace")
    return data


def is_port_443_available() -> bool:
    """True when port 443 can be bound on all interfaces."""
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            sock.bind(("0.0.0.0", 443))
            sock.listen()
        return True
    except OSError:
        return False


def is_project_proxy_on_443(project_id: str) -> bool:
    """True when this project's proxy container publishes port 443."""
    result = _run(
        [
            "docker",
            "ps",
            "--filter",
            f"name={project_id}-railway-proxy",
            "--format",
            "{{.Ports}}",
        ]
    )
    return result is not None and "443" in _text(result.stdout)


def check_mkcert_installed() -> bool:
    result = _run(["mkcert", "-help"])
    return result is not None and result.returncode == 0


def check_docker_compose_installed() -> bool:
    result = _run(["docker", "compose", "version"])
    return result is not None and result.returncode == 0


def ensure_mkcert_ca() -> None:
    """Install the mkcert root CA; raise RuntimeError on failure."""
    try:
        result = subprocess.run(["mkcert", "-install"], capture_output=True, check=False)
    except OSError as exc:
        raise RuntimeError("Failed to run mkcert -install") from exc
    if result.returncode != 0:
        raise RuntimeError(f"mkcert -install failed: {_text(result.stderr)}")


def get_mkcert_ca_root() -> Optional[Path]:
    """The mkcert CA root directory, or None when mkcert or its root CA is missing."""
    result = _run(["mkcert", "-CAROOT"])
    if result is None or result.returncode != 0:
        return None
    path = Path(_text(result.stdout).strip())
    return path if (path / "rootCA.pem").exists() else None


def certs_exist(output_dir: Path, use_port_443: bool) -> bool:
    """True when certificates of the requested kind are already present."""
    output_dir = Path(output_dir)
    if not (output_dir / "cert.pem").exists() or not (output_dir / "key.pem").exists():
        return False
    try:
        mode = (output_dir / "https_mode").read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        # Certificates without a mode file predate port 443 support.
        return not use_port_443
    return (mode.strip() == _PORT_443_MODE) == use_port_443


def get_existing_certs(project_slug: str, output_dir: Path, use_port_443: bool) -> HttpsConfig:
    output_dir = Path(output_dir)
    return HttpsConfig(
        project_slug=project_slug,
        base_domain=f"{project_slug}.railway.localhost",
        cert_path=output_dir / "cert.pem",
        key_path=output_dir / "key.pem",
        use_port_443=use_port_443,
    )


def generate_certs(project_slug: str, output_dir: Path, use_port_443: bool) -> HttpsConfig:
    """Create certificates with mkcert and record which mode they were made for."""
    output_dir = Path(output_dir)
    base_domain = f"{project_slug}.railway.localhost"
    cert_path = output_dir / "cert.pem"
    key_path = output_dir / "key.pem"

    output_dir.mkdir(parents=True, exist_ok=True)

    cmd = ["mkcert", "-cert-file", str(cert_path), "-key-file", str(key_path)]
    if use_port_443:
        cmd.append(f"*.{base_domain}")
    cmd.append(base_domain)

    try:
        result = subprocess.run(cmd, capture_output=True, check=False)
    except OSError as exc:
        raise RuntimeError("Failed to run mkcert") from exc
    if result.returncode != 0:
        raise RuntimeError(f"mkcert failed: {_text(result.stderr)}")

    mode = _PORT_443_MODE if use_port_443 else _FALLBACK_MODE
    (output_dir / "https_mode").write_text(mode, encoding="utf-8")

    return HttpsConfig(
        project_slug=project_slug,
        base_domain=base_domain,
        cert_path=cert_path,
        key_path=key_path,
        use_port_443=use_port_443,
    )


def generate_caddyfile(services: Sequence[ServicePort], https_config: HttpsConfig) -> str:
    """Caddy configuration proxying every HTTP service over TLS."""
    parts = ["{\n", "    auto_https off\n", "}\n\n"]
    for svc in services:
        if not svc.is_http:
            continue
        if https_config.use_port_443:
            site = f"{svc.slug}.{https_config.base_domain}"
        else:
            site = f"{https_config.base_domain}:{svc.external_port}"
        # Code services run on the host; image services inside the Docker network.
        if svc.is_code_service:
            upstream = f"host.docker.internal:{svc.internal_port}"
        else:
            upstream = f"{svc.slug}:{svc.internal_port}"
        parts.append(f"{site} {{\n")
        parts.append("    tls /certs/cert.pem /certs/key.pem\n")
        parts.append(f"    reverse_proxy {upstream}\n")
        parts.append("}\n\n")
    return "".join(parts)