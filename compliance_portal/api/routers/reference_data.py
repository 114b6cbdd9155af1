"""
Reference data API endpoints.

Routes: GET /reference-data/verticals, GET /reference-data/document-types

Dependencies: compliance_portal.application.services
System role: Classification vocabulary HTTP API
"""

from fastapi import APIRouter, Depends

from compliance_portal.api.deps import get_reference_data_service
from compliance_portal.application.services.reference_data_service import ReferenceDataService
from compliance_portal.models.reference_data import ReferenceDataResponse

router = APIRouter(prefix="/reference-data", tags=["reference-data"])


@router.get("/verticals", response_model=ReferenceDataResponse)
async def get_verticals(
    service: ReferenceDataService = Depends(get_reference_data_service),
) -> ReferenceDataResponse:
    return await service.get_verticals()


@router.get("/document-types", response_model=ReferenceDataResponse)
async def get_document_types(
    service: ReferenceDataService = Depends(get_reference_data_service),
) -> ReferenceDataResponse:
    return await service.get_document_types()
