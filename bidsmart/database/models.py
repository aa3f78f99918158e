"""SQLAlchemy models for all database tables."""

import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    JSON,
    Boolean,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    TIMESTAMP,
    Uuid,
    func,
)
from sqlalchemy.dialects.postgresql import ARRAY, JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bidsmart.core.database import Base

# Postgres column types, with JSON stand-ins so the schema also builds on SQLite
JsonDocument = JSON().with_variant(JSONB(), "postgresql")
TextList = JSON().with_variant(ARRAY(Text), "postgresql")


class Project(Base):
    """A homeowner's bid comparison session."""

    __tablename__ = "projects"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    user_id: Mapped[uuid.UUID | None] = mapped_column(Uuid(as_uuid=True), nullable=True, index=True)
    session_id: Mapped[str | None] = mapped_column(String, nullable=True)
    project_name: Mapped[str] = mapped_column(String, nullable=False, default="My Heat Pump Project")
    status: Mapped[str] = mapped_column(
        String, nullable=False, default="draft"
    )  # draft | collecting_bids | analyzing | comparing | completed | cancelled

    property_zip: Mapped[str | None] = mapped_column(String, nullable=True)
    property_state: Mapped[str | None] = mapped_column(String, nullable=True)
    project_details: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Decision tracking
    selected_bid_id: Mapped[uuid.UUID | None] = mapped_column(Uuid(as_uuid=True), nullable=True)
    decision_date: Mapped[datetime | None] = mapped_column(TIMESTAMP(timezone=True), nullable=True)
    decision_notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Demo flags
    is_demo: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_public_demo: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # Completion notification
    notification_email: Mapped[str | None] = mapped_column(String, nullable=True)
    notify_on_completion: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    notification_sent_at: Mapped[datetime | None] = mapped_column(TIMESTAMP(timezone=True), nullable=True)

    # Analysis tracking
    analysis_queued_at: Mapped[datetime | None] = mapped_column(TIMESTAMP(timezone=True), nullable=True)
    mindpal_run_id: Mapped[str | None] = mapped_column(String, nullable=True)
    rerun_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    data_sharing_consent: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    data_sharing_consented_at: Mapped[datetime | None] = mapped_column(TIMESTAMP(timezone=True), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now(), nullable=False
    )

    # Relationships
    pdf_uploads: Mapped[list["PdfUpload"]] = relationship(
        "PdfUpload", back_populates="project", cascade="all, delete-orphan", passive_deletes=True
    )
    bids: Mapped[list["ContractorBid"]] = relationship(
        "ContractorBid", back_populates="project", cascade="all, delete-orphan", passive_deletes=True
    )
    requirements: Mapped["ProjectRequirements | None"] = relationship(
        "ProjectRequirements", back_populates="project", cascade="all, delete-orphan", passive_deletes=True, uselist=False
    )


class PdfUpload(Base):
    """One uploaded bid PDF and its extraction status."""

    __tablename__ = "pdf_uploads"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    project_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True
    )
    file_name: Mapped[str] = mapped_column(String, nullable=False)
    file_path: Mapped[str] = mapped_column(String, nullable=False)
    file_size_bytes: Mapped[int | None] = mapped_column(Integer, nullable=True)
    file_hash: Mapped[str | None] = mapped_column(String, nullable=True)
    status: Mapped[str] = mapped_column(
        String, nullable=False, default="uploaded"
    )  # uploaded | processing | extracted | verified | review_needed | failed

    mindpal_status: Mapped[str | None] = mapped_column(String, nullable=True)
    mindpal_run_id: Mapped[str | None] = mapped_column(String, nullable=True)

    extracted_bid_id: Mapped[uuid.UUID | None] = mapped_column(Uuid(as_uuid=True), nullable=True)
    extraction_confidence: Mapped[Decimal | None] = mapped_column(Numeric(6, 2), nullable=True)
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    retry_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    uploaded_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now(), nullable=False
    )
    processing_started_at: Mapped[datetime | None] = mapped_column(TIMESTAMP(timezone=True), nullable=True)
    processing_completed_at: Mapped[datetime | None] = mapped_column(TIMESTAMP(timezone=True), nullable=True)
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now(), nullable=False
    )

    # Relationships
    project: Mapped["Project"] = relationship("Project", back_populates="pdf_uploads")
    extractions: Mapped[list["MindpalExtraction"]] = relationship(
        "MindpalExtraction", back_populates="pdf_upload", cascade="all, delete-orphan", passive_deletes=True
    )


class MindpalExtraction(Base):
    """Audit record of one MindPal callback."""

    __tablename__ = "mindpal_extractions"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    pdf_upload_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("pdf_uploads.id", ondelete="CASCADE"), nullable=False, index=True
    )
    raw_json: Mapped[dict] = mapped_column(JsonDocument, nullable=False)
    parsed_successfully: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    parsing_errors: Mapped[list | None] = mapped_column(JsonDocument, nullable=True)
    mapped_bid_id: Mapped[uuid.UUID | None] = mapped_column(Uuid(as_uuid=True), nullable=True)
    overall_confidence: Mapped[Decimal | None] = mapped_column(Numeric(6, 2), nullable=True)
    field_confidences: Mapped[dict | None] = mapped_column(JsonDocument, nullable=True)
    extracted_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now(), nullable=False
    )
    processed_at: Mapped[datetime | None] = mapped_column(TIMESTAMP(timezone=True), nullable=True)

    pdf_upload: Mapped["PdfUpload"] = relationship("PdfUpload", back_populates="extractions")


class ContractorBid(Base):
    """Structured bid data mapped from one extraction."""

    __tablename__ = "contractor_bids"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    project_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True
    )
    pdf_upload_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("pdf_uploads.id", ondelete="SET NULL"), nullable=True
    )

    # Contractor
    contractor_name: Mapped[str] = mapped_column(String, nullable=False)
    contractor_company: Mapped[str | None] = mapped_column(String, nullable=True)
    contractor_phone: Mapped[str | None] = mapped_column(String, nullable=True)
    contractor_email: Mapped[str | None] = mapped_column(String, nullable=True)
    contractor_license: Mapped[str | None] = mapped_column(String, nullable=True)
    contractor_license_state: Mapped[str | None] = mapped_column(String, nullable=True)
    contractor_website: Mapped[str | None] = mapped_column(String, nullable=True)
    contractor_contact_name: Mapped[str | None] = mapped_column(String, nullable=True)
    contractor_address: Mapped[str | None] = mapped_column(String, nullable=True)

    # Pricing
    total_bid_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=0)
    labor_cost: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    equipment_cost: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    materials_cost: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    permit_cost: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    disposal_cost: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    electrical_cost: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    total_before_rebates: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    estimated_rebates: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    total_after_rebates: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)

    # Timeline
    estimated_days: Mapped[int | None] = mapped_column(Integer, nullable=True)
    start_date_available: Mapped[str | None] = mapped_column(String, nullable=True)

    # Warranty
    labor_warranty_years: Mapped[Decimal | None] = mapped_column(Numeric(5, 2), nullable=True)
    equipment_warranty_years: Mapped[Decimal | None] = mapped_column(Numeric(5, 2), nullable=True)
    additional_warranty_details: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Payment terms
    deposit_required: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    deposit_percentage: Mapped[Decimal | None] = mapped_column(Numeric(5, 2), nullable=True)
    payment_schedule: Mapped[str | None] = mapped_column(Text, nullable=True)
    financing_offered: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    financing_terms: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Scope
    scope_summary: Mapped[str | None] = mapped_column(Text, nullable=True)
    inclusions: Mapped[list[str] | None] = mapped_column(TextList, nullable=True)
    exclusions: Mapped[list[str] | None] = mapped_column(TextList, nullable=True)
    scope_permit_included: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    scope_disposal_included: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    scope_electrical_included: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    scope_ductwork_included: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    scope_thermostat_included: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    scope_manual_j_included: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    scope_commissioning_included: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    scope_air_handler_included: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    scope_line_set_included: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    scope_disconnect_included: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    scope_pad_included: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    scope_drain_line_included: Mapped[bool | None] = mapped_column(Boolean, nullable=True)

    # Dates
    bid_date: Mapped[str | None] = mapped_column(String, nullable=True)
    valid_until: Mapped[str | None] = mapped_column(String, nullable=True)

    # Extraction metadata
    extraction_confidence: Mapped[str] = mapped_column(
        String, nullable=False, default="manual"
    )  # high | medium | low | manual
    extraction_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    verified_by_user: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    verified_at: Mapped[datetime | None] = mapped_column(TIMESTAMP(timezone=True), nullable=True)

    user_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_favorite: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now(), nullable=False
    )

    # Relationships
    project: Mapped["Project"] = relationship("Project", back_populates="bids")
    line_items: Mapped[list["BidLineItem"]] = relationship(
        "BidLineItem", back_populates="bid", cascade="all, delete-orphan", passive_deletes=True
    )
    equipment: Mapped[list["BidEquipment"]] = relationship(
        "BidEquipment", back_populates="bid", cascade="all, delete-orphan", passive_deletes=True
    )
    faqs: Mapped[list["BidFaq"]] = relationship(
        "BidFaq", back_populates="bid", cascade="all, delete-orphan", passive_deletes=True
    )
    questions: Mapped[list["BidQuestion"]] = relationship(
        "BidQuestion", back_populates="bid", cascade="all, delete-orphan", passive_deletes=True
    )
    score: Mapped["BidScore | None"] = relationship(
        "BidScore", back_populates="bid", cascade="all, delete-orphan", passive_deletes=True, uselist=False
    )


class BidLineItem(Base):
    """Priced line of a contractor bid."""

    __tablename__ = "bid_line_items"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    bid_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("contractor_bids.id", ondelete="CASCADE"), nullable=False, index=True
    )
    item_type: Mapped[str] = mapped_column(String, nullable=False, default="other")
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    quantity: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=1)
    unit_price: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    total_price: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    brand: Mapped[str | None] = mapped_column(String, nullable=True)
    model_number: Mapped[str | None] = mapped_column(String, nullable=True)
    confidence: Mapped[str] = mapped_column(String, nullable=False, default="manual")
    source_text: Mapped[str | None] = mapped_column(Text, nullable=True)
    line_order: Mapped[int | None] = mapped_column(Integer, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now(), nullable=False
    )

    bid: Mapped["ContractorBid"] = relationship("ContractorBid", back_populates="line_items")


class BidEquipment(Base):
    """Equipment unit quoted in a bid."""

    __tablename__ = "bid_equipment"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    bid_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("contractor_bids.id", ondelete="CASCADE"), nullable=False, index=True
    )
    equipment_type: Mapped[str | None] = mapped_column(String, nullable=True)
    brand: Mapped[str | None] = mapped_column(String, nullable=True)
    model_number: Mapped[str | None] = mapped_column(String, nullable=True)
    model_name: Mapped[str | None] = mapped_column(String, nullable=True)

    capacity_btu: Mapped[int | None] = mapped_column(Integer, nullable=True)
    capacity_tons: Mapped[Decimal | None] = mapped_column(Numeric(5, 2), nullable=True)
    seer_rating: Mapped[Decimal | None] = mapped_column(Numeric(5, 2), nullable=True)
    seer2_rating: Mapped[Decimal | None] = mapped_column(Numeric(5, 2), nullable=True)
    hspf_rating: Mapped[Decimal | None] = mapped_column(Numeric(5, 2), nullable=True)
    hspf2_rating: Mapped[Decimal | None] = mapped_column(Numeric(5, 2), nullable=True)
    eer_rating: Mapped[Decimal | None] = mapped_column(Numeric(5, 2), nullable=True)

    variable_speed: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    stages: Mapped[int | None] = mapped_column(
        Integer, nullable=True, comment="1 = single, 2 = two-stage, 99 = variable"
    )
    refrigerant_type: Mapped[str | None] = mapped_column(String, nullable=True)
    sound_level_db: Mapped[Decimal | None] = mapped_column(Numeric(5, 1), nullable=True)
    voltage: Mapped[int | None] = mapped_column(Integer, nullable=True)
    energy_star_certified: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    energy_star_most_efficient: Mapped[bool | None] = mapped_column(Boolean, nullable=True)

    equipment_cost: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    confidence: Mapped[str] = mapped_column(String, nullable=False, default="manual")
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now(), nullable=False
    )

    bid: Mapped["ContractorBid"] = relationship("ContractorBid", back_populates="equipment")


class BidFaq(Base):
    """Frequently asked question answered from the bid."""

    __tablename__ = "bid_faqs"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    bid_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("contractor_bids.id", ondelete="CASCADE"), nullable=False, index=True
    )
    faq_key: Mapped[str | None] = mapped_column(String, nullable=True)
    question_text: Mapped[str | None] = mapped_column(Text, nullable=True)
    answer_text: Mapped[str | None] = mapped_column(Text, nullable=True)
    answer_confidence: Mapped[str | None] = mapped_column(String, nullable=True)
    is_answered: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    display_order: Mapped[int | None] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now(), nullable=False
    )

    bid: Mapped["ContractorBid"] = relationship("ContractorBid", back_populates="faqs")


class BidQuestion(Base):
    """Clarification question to ask the contractor."""

    __tablename__ = "bid_questions"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    bid_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("contractor_bids.id", ondelete="CASCADE"), nullable=False, index=True
    )
    question_text: Mapped[str | None] = mapped_column(Text, nullable=True)
    question_category: Mapped[str | None] = mapped_column(
        String, nullable=True
    )  # pricing | warranty | equipment | timeline | scope | credentials
    priority: Mapped[str | None] = mapped_column(String, nullable=True)
    is_answered: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    answer_text: Mapped[str | None] = mapped_column(Text, nullable=True)
    answered_at: Mapped[datetime | None] = mapped_column(TIMESTAMP(timezone=True), nullable=True)
    auto_generated: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    missing_field: Mapped[str | None] = mapped_column(String, nullable=True)
    display_order: Mapped[int | None] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now(), nullable=False
    )

    bid: Mapped["ContractorBid"] = relationship("ContractorBid", back_populates="questions")


class BidScore(Base):
    """Comparison scores computed by the calculate_bid_scores function."""

    __tablename__ = "bid_scores"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    bid_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("contractor_bids.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    overall_score: Mapped[Decimal | None] = mapped_column(Numeric(5, 2), nullable=True)
    price_score: Mapped[Decimal | None] = mapped_column(Numeric(5, 2), nullable=True)
    quality_score: Mapped[Decimal | None] = mapped_column(Numeric(5, 2), nullable=True)
    value_score: Mapped[Decimal | None] = mapped_column(Numeric(5, 2), nullable=True)
    completeness_score: Mapped[Decimal | None] = mapped_column(Numeric(5, 2), nullable=True)
    calculated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now(), nullable=False
    )

    bid: Mapped["ContractorBid"] = relationship("ContractorBid", back_populates="score")


class ProjectRequirements(Base):
    """Homeowner priorities captured by the questionnaire."""

    __tablename__ = "project_requirements"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    project_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    priority_price: Mapped[int] = mapped_column(Integer, nullable=False, default=3)
    priority_warranty: Mapped[int] = mapped_column(Integer, nullable=False, default=3)
    priority_efficiency: Mapped[int] = mapped_column(Integer, nullable=False, default=3)
    priority_timeline: Mapped[int] = mapped_column(Integer, nullable=False, default=3)
    priority_reputation: Mapped[int] = mapped_column(Integer, nullable=False, default=3)
    timeline_urgency: Mapped[str] = mapped_column(
        String, nullable=False, default="flexible"
    )  # flexible | within_month | within_2_weeks | asap
    budget_range: Mapped[str | None] = mapped_column(String, nullable=True)
    specific_concerns: Mapped[list[str]] = mapped_column(TextList, nullable=False, default=list)
    must_have_features: Mapped[list[str]] = mapped_column(TextList, nullable=False, default=list)
    nice_to_have_features: Mapped[list[str]] = mapped_column(TextList, nullable=False, default=list)
    additional_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(TIMESTAMP(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now(), nullable=False
    )

    project: Mapped["Project"] = relationship("Project", back_populates="requirements")


class AdminUser(Base):
    """Admin dashboard account; the password hash is a pgcrypto ``crypt`` hash."""

    __tablename__ = "admin_users"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    email: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    name: Mapped[str | None] = mapped_column(String, nullable=True)
    password_hash: Mapped[str] = mapped_column(String, nullable=False)
    is_super_admin: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    last_login_at: Mapped[datetime | None] = mapped_column(TIMESTAMP(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now(), nullable=False
    )

    sessions: Mapped[list["AdminSession"]] = relationship(
        "AdminSession", back_populates="admin_user", cascade="all, delete-orphan", passive_deletes=True
    )


class AdminSession(Base):
    """Bearer token issued by the admin login, valid for 24 hours."""

    __tablename__ = "admin_sessions"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    admin_user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("admin_users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    session_token: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    expires_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now(), nullable=False
    )

    admin_user: Mapped["AdminUser"] = relationship("AdminUser", back_populates="sessions")


class UserFeedback(Base):
    """Free-text product feedback from the in-app feedback panel."""

    __tablename__ = "user_feedback"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    type: Mapped[str] = mapped_column(String, nullable=False)  # liked | wishlist | bug
    message: Mapped[str] = mapped_column(Text, nullable=False)
    url: Mapped[str | None] = mapped_column(String, nullable=True)
    user_agent: Mapped[str | None] = mapped_column(String, nullable=True)
    timestamp: Mapped[datetime | None] = mapped_column(TIMESTAMP(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now(), nullable=False
    )


class ContractorInstallationReview(Base):
    """Homeowner's review of the contractor they hired, one per project."""

    __tablename__ = "contractor_installation_reviews"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    project_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    bid_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("contractor_bids.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), nullable=False)

    overall_rating: Mapped[int] = mapped_column(Integer, nullable=False)
    quality_of_work_rating: Mapped[int] = mapped_column(Integer, nullable=False)
    professionalism_rating: Mapped[int] = mapped_column(Integer, nullable=False)
    communication_rating: Mapped[int] = mapped_column(Integer, nullable=False)
    timeliness_rating: Mapped[int] = mapped_column(Integer, nullable=False)

    used_checklist: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    checklist_completeness_rating: Mapped[int | None] = mapped_column(Integer, nullable=True)
    would_recommend: Mapped[bool] = mapped_column(Boolean, nullable=False)
    completed_on_time: Mapped[bool] = mapped_column(Boolean, nullable=False)
    stayed_within_budget: Mapped[bool] = mapped_column(Boolean, nullable=False)
    critical_items_verified: Mapped[bool] = mapped_column(Boolean, nullable=False)
    photo_documentation_provided: Mapped[bool] = mapped_column(Boolean, nullable=False)

    issues_encountered: Mapped[list[str]] = mapped_column(TextList, nullable=False, default=list)
    positive_comments: Mapped[str | None] = mapped_column(Text, nullable=True)
    improvement_suggestions: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now(), nullable=False
    )


class EmailVerification(Base):
    """Six-digit code emailed to prove ownership of an address."""

    __tablename__ = "email_verifications"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    email: Mapped[str] = mapped_column(String, nullable=False, index=True)
    code: Mapped[str] = mapped_column(String, nullable=False)
    expires_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)
    ip_address: Mapped[str | None] = mapped_column(String, nullable=True)
    user_agent: Mapped[str | None] = mapped_column(String, nullable=True)
    verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    verified_at: Mapped[datetime | None] = mapped_column(TIMESTAMP(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now(), nullable=False
    )


class VerifiedSession(Base):
    """Report lookup session granted after a code was verified."""

    __tablename__ = "verified_sessions"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    email: Mapped[str] = mapped_column(String, nullable=False, index=True)
    session_token: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    expires_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)
    ip_address: Mapped[str | None] = mapped_column(String, nullable=True)
    user_agent: Mapped[str | None] = mapped_column(String, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now(), nullable=False
    )
