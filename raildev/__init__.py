"""Local development helpers for Railway projects: ports, variable overrides, compose and HTTPS config, local processes and logs."""

__version__ = "4.16.1"