"""Pure mapping from a validated MindPal payload to table rows.

Nothing in this module touches the database; it only shapes dictionaries that
the callback service hands to repositories.
"""

from decimal import Decimal
from typing import Any, Dict, List, Optional
from uuid import UUID

from bidsmart.schemas.mindpal import (
    ContractorInfo,
    DatesInfo,
    MindPalCallbackPayload,
    PaymentTermsInfo,
    PricingInfo,
    ScopeInfo,
    TimelineInfo,
    WarrantyInfo,
)
from bidsmart.utils.mappers import (
    map_confidence_to_level,
    map_equipment_stages,
    map_line_item_type,
)

DEFAULT_CONTRACTOR_NAME = "Unknown Contractor"

# bid column -> scope_of_work attribute
SCOPE_FLAGS = {
    "scope_permit_included": "permit_included",
    "scope_disposal_included": "disposal_included",
    "scope_electrical_included": "electrical_work_included",
    "scope_ductwork_included": "ductwork_included",
    "scope_thermostat_included": "thermostat_included",
    "scope_manual_j_included": "manual_j_included",
    "scope_commissioning_included": "commissioning_included",
    "scope_air_handler_included": "air_handler_included",
    "scope_line_set_included": "line_set_included",
    "scope_disconnect_included": "disconnect_included",
    "scope_pad_included": "pad_included",
    "scope_drain_line_included": "drain_line_included",
}


def _decimal(value: Optional[float]) -> Optional[Decimal]:
    if value is None:
        return None
    return Decimal(str(value))


def _int(value: Optional[float]) -> Optional[int]:
    if value is None:
        return None
    return int(round(value))


def _first(*values: Any) -> Any:
    """Return the first truthy value, else None."""
    for value in values:
        if value:
            return value
    return None


def _sum_rebates(pricing: PricingInfo) -> Optional[Decimal]:
    if pricing.rebates_mentioned is None:
        return None
    return _decimal(sum((rebate.amount or 0) for rebate in pricing.rebates_mentioned))


def format_extraction_notes(payload: MindPalCallbackPayload) -> Optional[str]:
    """Render extraction notes as ``[type] message`` lines."""
    if not payload.extraction_notes:
        return None
    return "\n".join(f"[{note.type}] {note.message}" for note in payload.extraction_notes)


def build_bid_record(
    payload: MindPalCallbackPayload,
    project_id: UUID,
    pdf_upload_id: UUID,
) -> Dict[str, Any]:
    """Flatten the nested payload groups into a contractor_bids row.

    Absent groups and fields become None, except for the contractor name,
    total amount and financing flag which have defaults.
    """
    contractor = payload.contractor_info or ContractorInfo()
    pricing = payload.pricing or PricingInfo()
    timeline = payload.timeline or TimelineInfo()
    warranty = payload.warranty or WarrantyInfo()
    terms = payload.payment_terms or PaymentTermsInfo()
    scope = payload.scope_of_work or ScopeInfo()
    dates = payload.dates or DatesInfo()

    record: Dict[str, Any] = {
        "project_id": project_id,
        "pdf_upload_id": pdf_upload_id,
        # Contractor
        "contractor_name": contractor.company_name or DEFAULT_CONTRACTOR_NAME,
        "contractor_company": contractor.company_name,
        "contractor_phone": contractor.phone,
        "contractor_email": contractor.email,
        "contractor_license": contractor.license_number,
        "contractor_license_state": contractor.license_state,
        "contractor_website": contractor.website,
        "contractor_contact_name": contractor.contact_name,
        "contractor_address": contractor.address,
        # Pricing
        "total_bid_amount": _decimal(pricing.total_amount or 0),
        "labor_cost": _decimal(pricing.labor_cost),
        "equipment_cost": _decimal(pricing.equipment_cost),
        "materials_cost": _decimal(pricing.materials_cost),
        "permit_cost": _decimal(pricing.permit_cost),
        "disposal_cost": _decimal(pricing.disposal_cost),
        "electrical_cost": _decimal(pricing.electrical_cost),
        "total_before_rebates": _decimal(pricing.price_before_rebates),
        "estimated_rebates": _sum_rebates(pricing),
        "total_after_rebates": _decimal(pricing.price_after_rebates),
        # Timeline
        "estimated_days": _int(timeline.estimated_days),
        "start_date_available": timeline.start_date_available,
        # Warranty
        "labor_warranty_years": _decimal(warranty.labor_warranty_years),
        "equipment_warranty_years": _decimal(warranty.equipment_warranty_years),
        "additional_warranty_details": warranty.warranty_details,
        # Payment terms
        "deposit_required": _decimal(terms.deposit_amount),
        "deposit_percentage": _decimal(terms.deposit_percentage),
        "payment_schedule": terms.payment_schedule,
        "financing_offered": terms.financing_offered or False,
        "financing_terms": terms.financing_terms,
        # Scope
        "scope_summary": scope.summary,
        "inclusions": scope.inclusions,
        "exclusions": scope.exclusions,
        # Dates
        "bid_date": _first(dates.bid_date, dates.quote_date),
        "valid_until": _first(dates.valid_until, timeline.bid_valid_until),
        # Extraction metadata
        "extraction_confidence": map_confidence_to_level(payload.overall_confidence),
        "extraction_notes": format_extraction_notes(payload),
        "verified_by_user": False,
        "is_favorite": False,
    }

    for column, attribute in SCOPE_FLAGS.items():
        record[column] = getattr(scope, attribute)

    return record


def build_line_item_rows(payload: MindPalCallbackPayload, bid_id: UUID) -> List[Dict[str, Any]]:
    """Rows for bid_line_items, ordered as they appear in the payload."""
    rows = []
    for index, item in enumerate(payload.line_items or []):
        rows.append(
            {
                "bid_id": bid_id,
                "item_type": map_line_item_type(item.item_type),
                "description": item.description,
                "quantity": _decimal(item.quantity or 1),
                "unit_price": _decimal(item.unit_price),
                "total_price": _decimal(item.total_price),
                "brand": item.brand,
                "model_number": item.model_number,
                "confidence": map_confidence_to_level(item.confidence or payload.overall_confidence),
                "source_text": item.source_text,
                "line_order": index,
            }
        )
    return rows


def build_equipment_rows(payload: MindPalCallbackPayload, bid_id: UUID) -> List[Dict[str, Any]]:
    """Rows for bid_equipment."""
    return [
        {
            "bid_id": bid_id,
            "equipment_type": eq.equipment_type,
            "brand": eq.brand,
            "model_number": eq.model_number,
            "model_name": eq.model_name,
            "capacity_btu": _int(eq.capacity_btu),
            "capacity_tons": _decimal(eq.capacity_tons),
            "seer_rating": _decimal(eq.seer_rating),
            "seer2_rating": _decimal(eq.seer2_rating),
            "hspf_rating": _decimal(eq.hspf_rating),
            "hspf2_rating": _decimal(eq.hspf2_rating),
            "eer_rating": _decimal(eq.eer_rating),
            "variable_speed": eq.variable_speed,
            "stages": map_equipment_stages(eq.stages),
            "refrigerant_type": eq.refrigerant,
            "sound_level_db": _decimal(eq.sound_level_db),
            "voltage": _int(eq.voltage),
            "energy_star_certified": eq.energy_star,
            "energy_star_most_efficient": eq.energy_star_most_efficient,
            "equipment_cost": _decimal(eq.equipment_cost),
            "confidence": map_confidence_to_level(eq.confidence or payload.overall_confidence),
        }
        for eq in payload.equipment or []
    ]


def build_faq_rows(payload: MindPalCallbackPayload, bid_id: UUID) -> List[Dict[str, Any]]:
    """Rows for bid_faqs. ``is_answered`` defaults to whether an answer exists."""
    rows = []
    for index, faq in enumerate(payload.faqs or []):
        rows.append(
            {
                "bid_id": bid_id,
                "faq_key": faq.faq_key,
                "question_text": faq.question_text,
                "answer_text": faq.answer_text,
                "answer_confidence": (
                    map_confidence_to_level(faq.answer_confidence)
                    if faq.answer_confidence is not None
                    else None
                ),
                "is_answered": faq.is_answered if faq.is_answered is not None else bool(faq.answer_text),
                "display_order": faq.display_order if faq.display_order is not None else index,
            }
        )
    return rows


def build_question_rows(payload: MindPalCallbackPayload, bid_id: UUID) -> List[Dict[str, Any]]:
    """Rows for bid_questions; all are auto-generated and unanswered."""
    rows = []
    for index, question in enumerate(payload.questions or []):
        rows.append(
            {
                "bid_id": bid_id,
                "question_text": question.question_text,
                "question_category": question.question_category,
                "priority": question.priority,
                "is_answered": False,
                "auto_generated": True,
                "missing_field": question.missing_field,
                "display_order": question.display_order if question.display_order is not None else index,
            }
        )
    return rows
