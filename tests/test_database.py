import pytest

from raildev.database import DatabaseType, database_type_from_slug


def test_slugs():
    assert DatabaseType.POSTGRESQL.to_slug() == "postgres"
    assert DatabaseType.MYSQL.to_slug() == "mysql"
    assert DatabaseType.REDIS.to_slug() == "redis"
    assert DatabaseType.MONGODB.to_slug() == "mongo"


def test_display_names():
    assert str(database_type_from_slug("postgres")) == "PostgreSQL"
    assert str(database_type_from_slug("mongo")) == "MongoDB"
    assert str(database_type_from_slug("mysql")) == "MySQL"


def test_variant_order():
    found = [database_type_from_slug(s) for s in ("postgres", "mysql", "redis", "mongo")]
    assert found == list(DatabaseType)


@pytest.mark.parametrize("kind", list(DatabaseType))
def test_slug_round_trip(kind):
    assert database_type_from_slug(kind.to_slug()) is kind


def test_unknown_slug_raises():
    with pytest.raises(ValueError, match="sqlite"):
        database_type_from_slug("sqlite")


def test_slug_lookup_is_case_sensitive():
    with pytest.raises(ValueError):
        database_type_from_slug("Postgres")