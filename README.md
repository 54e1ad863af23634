# raildev

Building blocks for running a Railway project on your own machine. The package
turns an environment's configuration document into typed objects and gives each
service stable local ports. It rewrites Railway variables so they point at
local hosts, builds docker-compose and Caddy configuration, and runs local code
services and collects their logs.

## Installation

```
pip install .
```

Some helpers start external tools: `docker compose` for image services and
`mkcert` for local HTTPS certificates. Install them if you use those helpers.

## Overview

| Module | Purpose |
| --- | --- |
| `raildev.envconfig` | `parse_environment_config` builds `EnvironmentConfig` / `ServiceInstance` from the decoded JSON config |
| `raildev.ports` | `slugify`, deterministic `generate_port`, develop directory paths, `build_service_endpoints` |
| `raildev.compose` | `DockerComposeFile` (`to_dict`, `to_yaml`), `build_port_infos`, `build_slug_port_mapping`, `volume_name`, `parse_compose_status` |
| `raildev.https_proxy` | mkcert checks, `generate_certs`, `certs_exist`, `generate_caddyfile` |
| `raildev.overrides` | `LocalDevelopContext`, `override_railway_vars`, `inject_mkcert_ca_vars` |
| `raildev.local_override` | `build_local_override_context`, `apply_local_overrides` |
| `raildev.local_config` | Per-project `LocalDevConfig` in `~/.railway/develop/<project>/local-dev.json` |
| `raildev.code_runner` | `ProcessManager` runs commands through the shell and puts `LogLine`s on an `asyncio.Queue` |
| `raildev.session` | `DevelopSessionLock`: one develop session per project at a time |
| `raildev.log_store` | Bounded log buffers per service and for local / image streams |
| `raildev.tui_app` | `TuiApp`: tab, scroll and follow-mode state driven by `handle_key` / `handle_mouse` |
| `raildev.docker_logs` | `parse_log_line` for `docker compose logs` output, `spawn_docker_logs` |
| `raildev.deployment` | `take_last_n_logs`, `stream_logs` with reconnect and backoff |
| `raildev.projects` | Environment, service and service-instance lookups in project data |
| `raildev.variables` | `parse_variable` for `KEY=VALUE` arguments |
| `raildev.database` | `DatabaseType` and `database_type_from_slug` |
| `raildev.messages` | JSON messages of the remote terminal protocol |
| `raildev.errors` | `RailwayError` and its subclasses |

## Examples

Stable local ports:

```python
from raildev.ports import generate_port, slugify

slugify("My Service")               # "my-service"
generate_port("service-123", 3000)  # always the same port in 10000-59999
```

Rewriting variables for services on the host network:

```python
from raildev.overrides import (
    LocalDevelopContext, NetworkMode, ServiceDomainConfig, override_railway_vars,
)

ctx = LocalDevelopContext(NetworkMode.HOST)
ctx.services["svc-redis"] = ServiceDomainConfig(slug="redis", port_mapping={6379: 16379})

override_railway_vars({"REDIS_URL": "redis://redis.railway.internal:6379"}, None, ctx)
# {"REDIS_URL": "redis://localhost:16379"}
```

Parsing a `KEY=VALUE` argument:

```python
from raildev.variables import parse_variable

parse_variable("DATABASE_URL=postgres://localhost/db")
# Variable(key="DATABASE_URL", value="postgres://localhost/db")
```

Holding the develop session lock:

```python
from raildev.session import try_acquire

with try_acquire("project-id"):
    ...  # a second session for the same project raises SessionBusyError
```

## What the package does not do

- It has no command-line program; every feature is a Python function or class.
- It does not talk to the Railway API. Project data, environment configs and
  log subscriptions are passed in by the caller: `projects` and
  `build_local_override_context` take the decoded project data, and
  `stream_logs` takes a callable that opens the log stream.
- It does not open the remote terminal connection; `raildev.messages` only
  builds and parses the messages.
- It does not draw the log dashboard; `TuiApp` holds its state and handles
  key names and mouse-wheel events given to it.

## Running the tests

```
pip install -e ".[test]"
pytest
```