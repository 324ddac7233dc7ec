import uuid
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field

from app.schemas.notifications import Frequency


class HealthResponse(BaseModel):
    database: str
    data_sources: int = 0
    last_acquisition_status: str | None = None
    last_acquisition_at: datetime | None = None


# -----------------------------------------------------------------------------
# Lawsuits
# -----------------------------------------------------------------------------


class DefendantOut(BaseModel):
    id: uuid.UUID
    company_name: str
    company_info: Optional[dict] = None

    class Config:
        from_attributes = True


class LawsuitOut(BaseModel):
    id: uuid.UUID
    name: str
    case_number: str
    court: str
    judge: Optional[str] = None
    category: Optional[str] = None
    settlement_info: Optional[dict] = None
    eligibility_criteria: Optional[dict] = None
    required_evidence: Optional[list] = None
    important_dates: Optional[dict] = None
    opt_out_deadline: Optional[datetime] = None
    success_metrics: Optional[dict] = None
    source_info: Optional[dict] = None
    defendants: list[DefendantOut] = []

    class Config:
        from_attributes = True


class SocialProofOut(BaseModel):
    total_claims: int
    approved_claims: int
    average_payout: Optional[float] = None


class SearchParams(BaseModel):
    query: Optional[str] = None
    category: Optional[str] = None
    deadline_after: Optional[datetime] = None
    deadline_before: Optional[datetime] = None
    page: int = Field(1, ge=1)
    limit: int = Field(10, ge=1, le=100)


class SearchResult(BaseModel):
    lawsuits: list[LawsuitOut]
    total: int
    page: int
    limit: int
    has_more: bool


class SavedSearchCreate(BaseModel):
    search_query: SearchParams


class SavedSearchNotificationUpdate(BaseModel):
    enabled: bool
    frequency: Optional[Frequency] = None


class SavedSearchOut(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    search_query: dict
    notification_enabled: bool
    notification_frequency: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


# -----------------------------------------------------------------------------
# Users
# -----------------------------------------------------------------------------


class UserProfileUpdate(BaseModel):
    name: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    demographics: Optional[dict] = None
    preferences: Optional[dict] = None
    privacy_settings: Optional[dict] = None


class UserOut(BaseModel):
    id: uuid.UUID
    email: str
    name: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    demographics: Optional[dict] = None
    preferences: Optional[dict] = None
    privacy_settings: Optional[dict] = None
    account_tier: str


class UserActionIn(BaseModel):
    action: str = Field(min_length=1)
    details: dict[str, Any] = Field(default_factory=dict)


# -----------------------------------------------------------------------------
# Data sources & acquisition
# -----------------------------------------------------------------------------


class ReliabilityMetrics(BaseModel):
    accuracy: float = Field(ge=0.0, le=1.0)
    completeness: float = Field(ge=0.0, le=1.0)
    timeliness: float = Field(ge=0.0, le=1.0)


class DataSourceCreate(BaseModel):
    name: str
    url: str
    reliability_metrics: ReliabilityMetrics
    scraping_config: Optional[dict] = None
    data_mapping: Optional[dict] = None


class AttemptIn(BaseModel):
    success: bool


class DataSourceOut(BaseModel):
    id: uuid.UUID
    name: str
    url: str
    reliability_metrics: dict
    success_history: dict
    priority_score: float


class AcquisitionTriggerResponse(BaseModel):
    success: bool
    source: str
    records_processed: int
    error: str | None = None


class AcquisitionRunOut(BaseModel):
    run_id: uuid.UUID
    source_id: Optional[uuid.UUID] = None
    source_name: str
    status: str
    records_processed: int
    error_message: str | None = None
    started_at: datetime
    ended_at: datetime | None
    duration_seconds: float | None = None

    class Config:
        from_attributes = True


# -----------------------------------------------------------------------------
# Privacy
# -----------------------------------------------------------------------------


class PIIScanRequest(BaseModel):
    data: dict[str, Any]


class PIIScanResponse(BaseModel):
    pii_fields: list[str]


class FileValidationRequest(BaseModel):
    file_name: str
    file_size: int = Field(ge=0)
    file_type: str


class FileValidationResponse(BaseModel):
    is_valid: bool
    reason: Optional[str] = None


class DataSubjectResponse(BaseModel):
    success: bool
    data: Optional[dict[str, Any]] = None
    message: Optional[str] = None
