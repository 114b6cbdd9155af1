"""
Test suite for ReferenceDataService.

Covers the remote API tier (via httpx MockTransport), retry then static
fallback, and payload parsing.

System role: Verification of reference data lookup
"""

import httpx
import pytest

from compliance_portal.application.services.reference_data_service import (
    STATIC_DOCUMENT_TYPES,
    STATIC_VERTICALS,
    ReferenceDataService,
    display_name,
    parse_items,
)
from compliance_portal.configs.auxiliary import ReferenceDataSettings
from compliance_portal.core.exceptions import ReferenceDataError


def api_settings(**overrides) -> ReferenceDataSettings:
    values = {"api_base_url": "https://reference.example/api/", "api_key": "secret", "max_retries": 2, "base_delay": 0}
    values.update(overrides)
    return ReferenceDataSettings(**values)


class TestParseItems:
    def test_slug_list(self) -> None:
        items = parse_items(["sports-online", "igaming"])

        assert [(i.name, i.display_name) for i in items] == [("sports-online", "Sports Online"), ("igaming", "Igaming")]

    def test_wrapped_objects(self) -> None:
        items = parse_items({"items": [{"name": "aml", "displayName": "Anti-Money Laundering"}]})

        assert items[0].display_name == "Anti-Money Laundering"

    def test_data_wrapper_and_missing_display_name(self) -> None:
        assert parse_items({"data": [{"name": "statute"}]})[0].display_name == "Statute"

    @pytest.mark.parametrize("payload", [{"count": 3}, "aml", [{"label": "no name"}], [42]])
    def test_bad_payloads_raise(self, payload) -> None:
        with pytest.raises(ReferenceDataError):
            parse_items(payload)

    def test_display_name(self) -> None:
        assert display_name("technical-bulletin") == "Technical Bulletin"


class TestReferenceDataService:
    @pytest.mark.asyncio
    async def test_static_when_api_unset(self) -> None:
        service = ReferenceDataService(ReferenceDataSettings(api_base_url=None))

        verticals = await service.get_verticals()
        document_types = await service.get_document_types()

        assert verticals.source == "static"
        assert [i.name for i in verticals.items] == STATIC_VERTICALS
        assert [i.name for i in document_types.items] == STATIC_DOCUMENT_TYPES

    @pytest.mark.asyncio
    async def test_api_tier_used_when_available(self) -> None:
        # Arrange
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=["sports-online", "lottery"])

        service = ReferenceDataService(api_settings(), transport=httpx.MockTransport(handler))

        # Act
        response = await service.get_verticals()

        # Assert
        assert response.source == "api"
        assert [i.name for i in response.items] == ["sports-online", "lottery"]
        assert str(seen[0].url) == "https://reference.example/api/verticals"
        assert seen[0].headers["Authorization"] == "Bearer secret"

    @pytest.mark.asyncio
    async def test_transient_failure_is_retried(self) -> None:
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            if len(calls) == 1:
                return httpx.Response(503)
            return httpx.Response(200, json={"items": ["aml"]})

        service = ReferenceDataService(api_settings(), transport=httpx.MockTransport(handler))

        response = await service.get_document_types()

        assert response.source == "api"
        assert len(calls) == 2

    @pytest.mark.asyncio
    async def test_persistent_failure_falls_back_to_static(self) -> None:
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(500)

        service = ReferenceDataService(api_settings(max_retries=2), transport=httpx.MockTransport(handler))

        response = await service.get_document_types()

        assert response.source == "static"
        assert [i.name for i in response.items] == STATIC_DOCUMENT_TYPES
        assert len(calls) == 3

    @pytest.mark.asyncio
    async def test_empty_or_malformed_payload_falls_back(self) -> None:
        service = ReferenceDataService(
            api_settings(max_retries=0),
            transport=httpx.MockTransport(lambda request: httpx.Response(200, json=[])),
        )

        assert (await service.get_verticals()).source == "static"

    @pytest.mark.asyncio
    async def test_non_json_body_falls_back(self) -> None:
        service = ReferenceDataService(
            api_settings(max_retries=0),
            transport=httpx.MockTransport(lambda request: httpx.Response(200, text="<html>oops</html>")),
        )

        assert (await service.get_verticals()).source == "static"
