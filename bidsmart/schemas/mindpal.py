"""MindPal extraction payload schemas.

Every field MindPal sends is optional, and a field whose value does not fit its
type is read as missing rather than rejecting the payload. The payload is
validated once here and turned into one of three outcomes (failed, partial,
successful) so the callback handler never has to probe nested dictionaries
itself.
"""

from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidatorFunctionWrapHandler,
    field_validator,
)
from pydantic import ValidationError as PydanticValidationError

REVIEW_CONFIDENCE_THRESHOLD = 70


class PayloadModel(BaseModel):
    """Base for payload fragments: unknown keys are ignored."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    @field_validator("*", mode="wrap")
    @classmethod
    def unreadable_as_missing(cls, value: Any, handler: ValidatorFunctionWrapHandler) -> Any:
        try:
            return handler(value)
        except PydanticValidationError:
            return None


class ContractorInfo(PayloadModel):
    company_name: Optional[str] = None
    contact_name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    license_number: Optional[str] = None
    license_state: Optional[str] = None
    website: Optional[str] = None
    confidence: Optional[Union[float, str]] = None


class RebateMention(PayloadModel):
    name: Optional[str] = None
    amount: Optional[float] = None
    type: Optional[str] = None


class PricingInfo(PayloadModel):
    total_amount: Optional[float] = None
    equipment_cost: Optional[float] = None
    labor_cost: Optional[float] = None
    materials_cost: Optional[float] = None
    permit_cost: Optional[float] = None
    disposal_cost: Optional[float] = None
    electrical_cost: Optional[float] = None
    rebates_mentioned: Optional[List[RebateMention]] = None
    price_before_rebates: Optional[float] = None
    price_after_rebates: Optional[float] = None
    confidence: Optional[Union[float, str]] = None


class TimelineInfo(PayloadModel):
    estimated_days: Optional[float] = None
    estimated_hours: Optional[float] = None
    start_date_available: Optional[str] = None
    bid_valid_until: Optional[str] = None
    confidence: Optional[Union[float, str]] = None


class WarrantyInfo(PayloadModel):
    labor_warranty_years: Optional[float] = None
    equipment_warranty_years: Optional[float] = None
    compressor_warranty_years: Optional[float] = None
    warranty_details: Optional[str] = None
    confidence: Optional[Union[float, str]] = None


class PaymentTermsInfo(PayloadModel):
    deposit_required: Optional[bool] = None
    deposit_amount: Optional[float] = None
    deposit_percentage: Optional[float] = None
    payment_schedule: Optional[str] = None
    financing_offered: Optional[bool] = None
    financing_terms: Optional[str] = None
    confidence: Optional[Union[float, str]] = None


class ScopeInfo(PayloadModel):
    summary: Optional[str] = None
    inclusions: Optional[List[str]] = None
    exclusions: Optional[List[str]] = None
    permit_included: Optional[bool] = None
    disposal_included: Optional[bool] = None
    electrical_work_included: Optional[bool] = None
    ductwork_included: Optional[bool] = None
    thermostat_included: Optional[bool] = None
    manual_j_included: Optional[bool] = None
    commissioning_included: Optional[bool] = None
    air_handler_included: Optional[bool] = None
    line_set_included: Optional[bool] = None
    disconnect_included: Optional[bool] = None
    pad_included: Optional[bool] = None
    drain_line_included: Optional[bool] = None
    confidence: Optional[Union[float, str]] = None


class DatesInfo(PayloadModel):
    bid_date: Optional[str] = None
    quote_date: Optional[str] = None
    valid_until: Optional[str] = None


class EquipmentInfo(PayloadModel):
    equipment_type: Optional[str] = None
    brand: Optional[str] = None
    model_number: Optional[str] = None
    model_name: Optional[str] = None
    capacity_btu: Optional[float] = None
    capacity_tons: Optional[float] = None
    seer_rating: Optional[float] = None
    seer2_rating: Optional[float] = None
    hspf_rating: Optional[float] = None
    hspf2_rating: Optional[float] = None
    eer_rating: Optional[float] = None
    variable_speed: Optional[bool] = None
    stages: Optional[str] = None
    refrigerant: Optional[str] = None
    voltage: Optional[float] = None
    sound_level_db: Optional[float] = None
    energy_star: Optional[bool] = None
    energy_star_most_efficient: Optional[bool] = None
    equipment_cost: Optional[float] = None
    confidence: Optional[Union[float, str]] = None


class LineItemInfo(PayloadModel):
    item_type: Optional[str] = None
    description: Optional[str] = None
    quantity: Optional[float] = None
    unit_price: Optional[float] = None
    total_price: Optional[float] = None
    brand: Optional[str] = None
    model_number: Optional[str] = None
    source_text: Optional[str] = None
    confidence: Optional[Union[float, str]] = None


class FaqInfo(PayloadModel):
    faq_key: Optional[str] = None
    question_text: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("question_text", "question")
    )
    answer_text: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("answer_text", "answer")
    )
    answer_confidence: Optional[Union[float, str]] = None
    is_answered: Optional[bool] = None
    display_order: Optional[int] = None


class QuestionInfo(PayloadModel):
    question_text: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("question_text", "question")
    )
    question_category: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("question_category", "category")
    )
    priority: Optional[str] = None
    missing_field: Optional[str] = None
    display_order: Optional[int] = None


class ExtractionNote(PayloadModel):
    type: Optional[str] = None
    message: Optional[str] = None
    field: Optional[str] = None


class ExtractionErrorInfo(PayloadModel):
    code: Optional[str] = None
    message: Optional[str] = None
    details: Optional[str] = None


class MindPalCallbackPayload(PayloadModel):
    """Body of a MindPal extraction callback."""

    request_id: Optional[str] = None
    signature: Optional[str] = None
    timestamp: Optional[str] = None
    status: Optional[str] = None
    extraction_timestamp: Optional[str] = None
    overall_confidence: Optional[Union[float, str]] = None

    contractor_info: Optional[ContractorInfo] = None
    pricing: Optional[PricingInfo] = None
    timeline: Optional[TimelineInfo] = None
    warranty: Optional[WarrantyInfo] = None
    payment_terms: Optional[PaymentTermsInfo] = None
    scope_of_work: Optional[ScopeInfo] = None
    dates: Optional[DatesInfo] = None

    equipment: Optional[List[EquipmentInfo]] = None
    line_items: Optional[List[LineItemInfo]] = None
    faqs: Optional[List[FaqInfo]] = None
    questions: Optional[List[QuestionInfo]] = None

    field_confidences: Optional[Dict[str, Any]] = None
    extraction_notes: Optional[List[ExtractionNote]] = None
    error: Optional[ExtractionErrorInfo] = None

    @property
    def numeric_confidence(self) -> Optional[float]:
        """Overall confidence as a number, or None when absent or categorical."""
        value = self.overall_confidence
        if isinstance(value, (int, float)):
            return float(value)
        if isinstance(value, str):
            try:
                return float(value)
            except ValueError:
                return None
        return None


class FailedExtraction(BaseModel):
    """MindPal reported failure, or the payload could not be read."""

    kind: Literal["failed"] = "failed"
    message: str
    payload: Optional[MindPalCallbackPayload] = None


class PartialExtraction(BaseModel):
    """Some fields were extracted; the result always needs review."""

    kind: Literal["partial"] = "partial"
    payload: MindPalCallbackPayload

    @property
    def needs_review(self) -> bool:
        return True


class SuccessfulExtraction(BaseModel):
    """A complete extraction; review depends on the confidence score."""

    kind: Literal["success"] = "success"
    payload: MindPalCallbackPayload

    @property
    def needs_review(self) -> bool:
        confidence = self.payload.numeric_confidence
        return confidence is None or confidence < REVIEW_CONFIDENCE_THRESHOLD


ExtractionOutcome = Union[FailedExtraction, PartialExtraction, SuccessfulExtraction]


def parse_extraction(raw: Any) -> ExtractionOutcome:
    """Validate a raw callback body into a typed outcome.

    Only a body that is not a JSON object is reported as a failed extraction;
    unreadable fields inside an object are dropped one by one.

    Args:
        raw: Decoded JSON body of the callback

    Returns:
        FailedExtraction, PartialExtraction or SuccessfulExtraction
    """
    if not isinstance(raw, dict):
        return FailedExtraction(message="Invalid extraction payload: body is not an object")

    payload = MindPalCallbackPayload.model_validate(raw)
    status = (payload.status or "").strip().lower()

    if status == "failed":
        message = payload.error.message if payload.error and payload.error.message else "Extraction failed"
        return FailedExtraction(message=message, payload=payload)

    if status == "partial":
        return PartialExtraction(payload=payload)

    return SuccessfulExtraction(payload=payload)
