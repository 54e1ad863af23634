import pytest

from raildev.errors import EnvironmentNotFoundError, ServiceNotFoundError
from raildev.projects import (
    find_service_instance,
    get_matched_environment,
    get_service,
    get_service_ids_in_env,
)


@pytest.fixture
def project():
    return {
        "id": "proj-1",
        "services": {
            "edges": [
                {"node": {"id": "svc-1", "name": "api"}},
                {"node": {"id": "svc-2", "name": "Worker"}},
            ]
        },
        "environments": {
            "edges": [
                {
                    "node": {
                        "id": "env-1",
                        "name": "production",
                        "deletedAt": None,
                        "serviceInstances": {
                            "edges": [
                                {"node": {"serviceId": "svc-1", "serviceName": "api"}},
                                {"node": {"serviceId": "svc-2", "serviceName": "Worker"}},
                            ]
                        },
                    }
                },
                {
                    "node": {
                        "id": "env-2",
                        "name": "staging",
                        "deletedAt": None,
                        "serviceInstances": {"edges": []},
                    }
                },
            ]
        },
    }


def test_matched_environment_by_name(project):
    assert get_matched_environment(project, "staging")["id"] == "env-2"


def test_matched_environment_by_id(project):
    assert get_matched_environment(project, "env-1")["name"] == "production"


def test_matched_environment_missing(project):
    with pytest.raises(EnvironmentNotFoundError) as info:
        get_matched_environment(project, "preview")
    assert info.value.environment == "preview"
    assert 'Environment "preview" not found.' in str(info.value)


def test_get_service_ignores_case(project):
    assert get_service(project, "API")["id"] == "svc-1"
    assert get_service(project, "worker")["id"] == "svc-2"


def test_get_service_missing(project):
    with pytest.raises(ServiceNotFoundError) as info:
        get_service(project, "db")
    assert str(info.value) == 'Service "db" not found.'


def test_service_ids_in_env(project):
    assert get_service_ids_in_env(project, "env-1") == {"svc-1", "svc-2"}
    assert get_service_ids_in_env(project, "env-2") == set()
    assert get_service_ids_in_env(project, "env-unknown") == set()


def test_find_service_instance(project):
    instance = find_service_instance(project, "env-1", "svc-2")
    assert instance["serviceName"] == "Worker"


def test_find_service_instance_missing(project):
    assert find_service_instance(project, "env-2", "svc-1") is None
    assert find_service_instance(project, "env-unknown", "svc-1") is None
    assert find_service_instance(project, "env-1", "svc-9") is None