import httpx

from compliance_portal.api.deps import get_reference_data_service
from compliance_portal.application.services.reference_data_service import ReferenceDataService
from compliance_portal.configs.auxiliary import ReferenceDataSettings


def test_static_lists_when_no_remote_source(client):
    # Arrange
    service = ReferenceDataService(ReferenceDataSettings(api_base_url=None))
    client.app.dependency_overrides[get_reference_data_service] = lambda: service

    # Act
    verticals = client.get("/api/v1/reference-data/verticals")
    document_types = client.get("/api/v1/reference-data/document-types")

    # Assert
    assert verticals.status_code == 200
    assert verticals.json()["source"] == "static"
    assert verticals.json()["items"]
    assert document_types.json()["source"] == "static"
    assert all(set(item) == {"name", "display_name"} for item in document_types.json()["items"])


def test_remote_values_are_served_when_available(client):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=[{"name": "igaming", "display_name": "iGaming"}])

    service = ReferenceDataService(
        ReferenceDataSettings(api_base_url="https://reference.example/api"),
        transport=httpx.MockTransport(handler),
    )
    client.app.dependency_overrides[get_reference_data_service] = lambda: service

    response = client.get("/api/v1/reference-data/verticals")

    assert response.json() == {"items": [{"name": "igaming", "display_name": "iGaming"}], "source": "api"}
