"""Tests for parsing MindPal callback bodies into extraction outcomes."""

from bidsmart.schemas.mindpal import (
    FailedExtraction,
    PartialExtraction,
    SuccessfulExtraction,
    parse_extraction,
)


class TestParseExtraction:
    """Classification of callback bodies."""

    def test_failed_status_uses_error_message(self):
        outcome = parse_extraction(
            {"status": "failed", "error": {"code": "OCR", "message": "Could not read PDF"}}
        )

        assert isinstance(outcome, FailedExtraction)
        assert outcome.message == "Could not read PDF"

    def test_failed_status_without_message(self):
        outcome = parse_extraction({"status": "FAILED"})

        assert isinstance(outcome, FailedExtraction)
        assert outcome.message == "Extraction failed"

    def test_partial_always_needs_review(self):
        outcome = parse_extraction({"status": "partial", "overall_confidence": 99})

        assert isinstance(outcome, PartialExtraction)
        assert outcome.needs_review

    def test_success_with_high_confidence(self):
        outcome = parse_extraction({"status": "success", "overall_confidence": 85})

        assert isinstance(outcome, SuccessfulExtraction)
        assert not outcome.needs_review

    def test_success_below_threshold_needs_review(self):
        assert parse_extraction({"status": "success", "overall_confidence": 69.9}).needs_review
        assert not parse_extraction({"status": "success", "overall_confidence": 70}).needs_review

    def test_missing_or_categorical_confidence_needs_review(self):
        assert parse_extraction({"status": "success"}).needs_review
        assert parse_extraction({"status": "success", "overall_confidence": "high"}).needs_review

    def test_numeric_string_confidence(self):
        outcome = parse_extraction({"status": "success", "overall_confidence": "88"})

        assert outcome.payload.numeric_confidence == 88.0
        assert not outcome.needs_review

    def test_unknown_status_is_treated_as_success(self):
        outcome = parse_extraction({"overall_confidence": 90})

        assert isinstance(outcome, SuccessfulExtraction)

    def test_malformed_group_is_dropped(self):
        outcome = parse_extraction(
            {"status": "success", "pricing": "eighteen thousand", "contractor_info": {"company_name": "Acme HVAC"}}
        )

        assert isinstance(outcome, SuccessfulExtraction)
        assert outcome.payload.pricing is None
        assert outcome.payload.contractor_info.company_name == "Acme HVAC"

    def test_mistyped_fields_read_as_missing(self):
        outcome = parse_extraction(
            {
                "status": "success",
                "overall_confidence": 80,
                "equipment": [{"brand": "Daikin", "stages": 2}],
                "timeline": {"estimated_days": "3-5", "start_date_available": "next week"},
                "pricing": {"total_amount": 14000, "labor_cost": "$2,000"},
            }
        )

        assert isinstance(outcome, SuccessfulExtraction)
        payload = outcome.payload
        assert payload.equipment[0].brand == "Daikin"
        assert payload.equipment[0].stages is None
        assert payload.timeline.estimated_days is None
        assert payload.timeline.start_date_available == "next week"
        assert payload.pricing.total_amount == 14000
        assert payload.pricing.labor_cost is None

    def test_mistyped_list_is_dropped(self):
        payload = parse_extraction({"status": "success", "line_items": "see attached", "faqs": [7]}).payload

        assert payload.line_items is None
        assert payload.faqs is None

    def test_body_that_is_not_an_object(self):
        outcome = parse_extraction(["not", "an", "object"])

        assert isinstance(outcome, FailedExtraction)
        assert outcome.message == "Invalid extraction payload: body is not an object"
        assert outcome.payload is None

    def test_unknown_keys_are_ignored(self):
        outcome = parse_extraction(
            {"status": "success", "overall_confidence": 90, "contractor_info": {"company_name": "A", "rating": 5}}
        )

        assert outcome.payload.contractor_info.company_name == "A"

    def test_faq_and_question_aliases(self, acme_extraction):
        payload = parse_extraction(acme_extraction).payload

        assert payload.faqs[0].question_text == "What is covered?"
        assert payload.faqs[0].answer_text == "Parts and labor"
        assert payload.questions[0].question_category == "electrical"
