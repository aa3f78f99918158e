"""Request and response schemas for projects, uploads, bids and requirements."""

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field

ProjectStatus = Literal["draft", "collecting_bids", "analyzing", "comparing", "completed", "cancelled"]
TimelineUrgency = Literal["flexible", "within_month", "within_2_weeks", "asap"]

DEFAULT_PROJECT_NAME = "My Heat Pump Project"


class ProjectCreate(BaseModel):
    project_name: str = Field(default=DEFAULT_PROJECT_NAME, min_length=1)
    status: ProjectStatus = "draft"
    property_zip: Optional[str] = None
    property_state: Optional[str] = None
    project_details: Optional[str] = None
    session_id: Optional[str] = None
    notification_email: Optional[EmailStr] = None
    notify_on_completion: bool = True


class ProjectUpdate(BaseModel):
    project_name: Optional[str] = Field(default=None, min_length=1)
    property_zip: Optional[str] = None
    property_state: Optional[str] = None
    project_details: Optional[str] = None
    selected_bid_id: Optional[UUID] = None
    decision_notes: Optional[str] = None


class ProjectStatusUpdate(BaseModel):
    status: ProjectStatus


class NotificationSettingsUpdate(BaseModel):
    notification_email: Optional[EmailStr] = None
    notify_on_completion: bool = True


class DataSharingConsentUpdate(BaseModel):
    consent: bool


class PdfUploadCreate(BaseModel):
    file_name: str = Field(..., min_length=1)
    file_path: str = Field(..., min_length=1)
    file_size_bytes: Optional[int] = Field(default=None, ge=0)


class ExtractionStatusResponse(BaseModel):
    """Progress of one upload through MindPal extraction."""

    model_config = ConfigDict(populate_by_name=True)

    pdf_upload_id: UUID = Field(..., serialization_alias="pdfUploadId")
    status: str
    progress: int
    confidence: Optional[Decimal] = None
    bid_id: Optional[UUID] = Field(None, serialization_alias="bidId")
    error: Optional[str] = None
    mindpal_status: Optional[str] = Field(None, serialization_alias="mindpalStatus")
    processing_started_at: Optional[datetime] = Field(None, serialization_alias="processingStartedAt")
    processing_completed_at: Optional[datetime] = Field(None, serialization_alias="processingCompletedAt")
    retry_count: int = Field(0, serialization_alias="retryCount")


class BidUpdate(BaseModel):
    contractor_name: Optional[str] = Field(default=None, min_length=1)
    contractor_company: Optional[str] = None
    contractor_phone: Optional[str] = None
    contractor_email: Optional[str] = None
    contractor_license: Optional[str] = None
    total_bid_amount: Optional[Decimal] = Field(default=None, ge=0)
    estimated_days: Optional[int] = Field(default=None, ge=0)
    labor_warranty_years: Optional[Decimal] = None
    equipment_warranty_years: Optional[Decimal] = None
    scope_summary: Optional[str] = None
    user_notes: Optional[str] = None


class RequirementsUpdate(BaseModel):
    priority_price: int = Field(default=3, ge=1, le=5)
    priority_warranty: int = Field(default=3, ge=1, le=5)
    priority_efficiency: int = Field(default=3, ge=1, le=5)
    priority_timeline: int = Field(default=3, ge=1, le=5)
    priority_reputation: int = Field(default=3, ge=1, le=5)
    timeline_urgency: TimelineUrgency = "flexible"
    budget_range: Optional[str] = None
    specific_concerns: List[str] = Field(default_factory=list)
    must_have_features: List[str] = Field(default_factory=list)
    nice_to_have_features: List[str] = Field(default_factory=list)
    additional_notes: Optional[str] = None


class ProjectStats(BaseModel):
    total_bids: int = Field(0, serialization_alias="totalBids")
    average_price: float = Field(0, serialization_alias="averagePrice")
    lowest_price: float = Field(0, serialization_alias="lowestPrice")
    highest_price: float = Field(0, serialization_alias="highestPrice")
    best_value_bid_id: Optional[UUID] = Field(None, serialization_alias="bestValueBidId")
    best_quality_bid_id: Optional[UUID] = Field(None, serialization_alias="bestQualityBidId")


class AnalysisRequest(BaseModel):
    pdf_upload_ids: List[UUID] = Field(..., min_length=1)
    user_priorities: Dict[str, Any] = Field(default_factory=dict)


class AdminBatchDeleteRequest(BaseModel):
    project_ids: List[UUID] = Field(..., min_length=1)
