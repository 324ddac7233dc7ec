"""Privacy routes - PII scanning, upload validation and data subject requests."""

import uuid

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from app.api.deps import client_ip, get_db, limit_per_client, reject_automated_clients
from app.core.security import validate_secure_file
from app.models.users import User
from app.schemas.api import (
    DataSubjectResponse,
    FileValidationRequest,
    FileValidationResponse,
    PIIScanRequest,
    PIIScanResponse,
)
from app.services.privacy_service import PrivacyService, scan_for_pii

router = APIRouter(tags=["privacy"])


@router.post("/privacy/scan", response_model=PIIScanResponse)
@limit_per_client()
def scan(request: Request, payload: PIIScanRequest):
    return PIIScanResponse(pii_fields=scan_for_pii(payload.data))


@router.post("/privacy/validate-file", response_model=FileValidationResponse)
@limit_per_client()
def validate_file(request: Request, payload: FileValidationRequest):
    result = validate_secure_file(payload.file_name, payload.file_size, payload.file_type)
    return FileValidationResponse(is_valid=result.is_valid, reason=result.reason)


@router.post(
    "/users/{user_id}/data-requests/{request_type}",
    response_model=DataSubjectResponse,
    dependencies=[Depends(reject_automated_clients)],
)
@limit_per_client()
def data_subject_request(
    user_id: uuid.UUID,
    request_type: str,
    request: Request,
    db: Session = Depends(get_db),
):
    """
    Handle a data subject request.

    - access: export the user's profile (decrypted), claims, saved searches and notifications
    - erasure: delete the user and everything tied to them
    """
    if not db.get(User, user_id):
        raise HTTPException(status_code=404, detail=f"User '{user_id}' not found")

    result = PrivacyService(db).handle_data_subject_request(user_id, request_type, ip_address=client_ip(request))
    return DataSubjectResponse(**result)
