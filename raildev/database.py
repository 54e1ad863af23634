"""Database kinds that can be added to a project."""

from __future__ import annotations

from enum import Enum

_SLUGS = {
    "PostgreSQL": "postgres",
    "MySQL": "mysql",
    "Redis": "redis",
    "MongoDB": "mongo",
}


class DatabaseType(Enum):
    POSTGRESQL = "PostgreSQL"
    MYSQL = "MySQL"
    REDIS = "Redis"
    MONGODB = "MongoDB"

    def __str__(self) -> str:
        return self.value

    def to_slug(self) -> str:
        """The short name used on the command line and in templates."""
        return _SLUGS[self.value]


def database_type_from_slug(slug: str) -> DatabaseType:
    """Look up a database type by its slug; raise ValueError when unknown."""
    for kind in DatabaseType:
        if kind.to_slug() == slug:
            return kind
    choices = ", ".join(kind.to_slug() for kind in DatabaseType)
    raise ValueError(f"invalid value '{slug}' (possible values: {choices})")