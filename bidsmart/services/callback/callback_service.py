"""MindPal callback ingestion.

Turns one signed extraction callback into an audit row, a contractor bid with
its child rows, upload/extraction status updates and, when the project's last
upload finishes, a project status change plus a completion notification.

Writes are independent commits. A failed child insert leaves the bid and the
other children in place, and nothing prevents a replayed callback from
creating a second bid for the same upload.

A failed write rolls the session back, which expires every loaded row, so
ids are copied into locals as soon as a row is loaded or inserted.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Optional
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from bidsmart.core.config import settings
from bidsmart.core.exceptions import BidCreationError, PdfUploadNotFoundError, ValidationError
from bidsmart.core.signing import verify_callback
from bidsmart.database.models import PdfUpload
from bidsmart.repositories.bid_repository import (
    BidEquipmentRepository,
    BidFaqRepository,
    BidLineItemRepository,
    BidQuestionRepository,
    ContractorBidRepository,
)
from bidsmart.repositories.pdf_upload_repository import (
    MindpalExtractionRepository,
    PdfUploadRepository,
)
from bidsmart.repositories.project_repository import ProjectRepository
from bidsmart.schemas.mindpal import FailedExtraction, parse_extraction
from bidsmart.services.base_service import BaseService
from bidsmart.services.callback import bid_mapper
from bidsmart.services.notification_service import CompletionNotifier
from bidsmart.services.scoring_service import ScoringService
from bidsmart.utils.best_effort import run_best_effort
from bidsmart.utils.logging import get_logger

LOGGER = get_logger(__name__)

TERMINAL_UPLOAD_STATUSES = frozenset({"extracted", "verified", "review_needed", "failed"})
SUCCESSFUL_UPLOAD_STATUSES = frozenset({"extracted", "verified", "review_needed"})
MIN_SUCCESSFUL_UPLOADS = 2


def is_project_complete(statuses: Iterable[str]) -> bool:
    """True when every upload is terminal and at least two succeeded."""
    statuses = list(statuses)
    if not statuses:
        return False
    if any(status not in TERMINAL_UPLOAD_STATUSES for status in statuses):
        return False
    successful = sum(1 for status in statuses if status in SUCCESSFUL_UPLOAD_STATUSES)
    return successful >= MIN_SUCCESSFUL_UPLOADS


def _db_error_message(error: SQLAlchemyError) -> str:
    return str(getattr(error, "orig", None) or error)


class CallbackService(BaseService):
    """Processes MindPal extraction callbacks."""

    def __init__(
        self,
        session: AsyncSession,
        scoring_service: Optional[ScoringService] = None,
        notifier: Optional[CompletionNotifier] = None,
        callback_secret: Optional[str] = None,
    ):
        super().__init__(session)
        self.upload_repo = PdfUploadRepository(session)
        self.extraction_repo = MindpalExtractionRepository(session)
        self.project_repo = ProjectRepository(session)
        self.bid_repo = ContractorBidRepository(session)
        self.line_item_repo = BidLineItemRepository(session)
        self.equipment_repo = BidEquipmentRepository(session)
        self.faq_repo = BidFaqRepository(session)
        self.question_repo = BidQuestionRepository(session)
        self.scoring_service = scoring_service or ScoringService()
        self.notifier = notifier or CompletionNotifier()
        self.callback_secret = (
            callback_secret if callback_secret is not None else settings.mindpal_callback_secret
        )

    def validate(self, payload: Any, now: Optional[datetime] = None):
        if not isinstance(payload, dict):
            raise ValidationError("Request body must be a JSON object")

    async def run(self, payload: Dict[str, Any], now: Optional[datetime] = None) -> Dict[str, Any]:
        """Handle one callback.

        Args:
            payload: Decoded JSON body
            now: Reference time for the replay window

        Returns:
            ``{success, status}`` for failed extractions, otherwise
            ``{success, status, bidId, projectComplete}``
        """
        verify_callback(
            request_id=payload.get("request_id"),
            timestamp=payload.get("timestamp"),
            signature=payload.get("signature"),
            secret=self.callback_secret,
            now=now,
        )

        upload = await self._get_upload(payload["request_id"])
        upload_id, project_id = upload.id, upload.project_id
        extraction_id = await self._record_extraction(upload_id, payload)

        outcome = parse_extraction(payload)

        if isinstance(outcome, FailedExtraction):
            await self._mark_failed(upload_id, extraction_id, outcome.message)
            return {"success": True, "status": "failed"}

        extracted = outcome.payload

        bid_record = bid_mapper.build_bid_record(extracted, project_id, upload_id)
        try:
            bid = await self.bid_repo.create(**bid_record)
        except SQLAlchemyError as e:
            message = _db_error_message(e)
            LOGGER.error(f"Failed to create bid for upload {upload_id}: {message}")
            await self.upload_repo.update(
                upload_id,
                status="failed",
                error_message=f"Failed to create bid: {message}",
                processing_completed_at=datetime.now(timezone.utc),
            )
            raise BidCreationError("Failed to create bid record", original_error=e)
        bid_id = bid.id

        await self._insert_children(extracted, bid_id)

        status = "review_needed" if outcome.needs_review else "extracted"
        completed_at = datetime.now(timezone.utc)

        await self.upload_repo.update(
            upload_id,
            status=status,
            extracted_bid_id=bid_id,
            extraction_confidence=extracted.numeric_confidence,
            mindpal_status="completed",
            processing_completed_at=completed_at,
            error_message=None,
        )

        if extraction_id is not None:
            await self.extraction_repo.update(
                extraction_id,
                parsed_successfully=True,
                mapped_bid_id=bid_id,
                overall_confidence=extracted.numeric_confidence,
                field_confidences=extracted.field_confidences,
                processed_at=completed_at,
            )

        await run_best_effort("calculate_bid_scores", self.scoring_service.calculate_bid_scores(bid_id))

        project_complete = await self._complete_project_if_ready(project_id)

        LOGGER.info(
            f"Processed callback for upload {upload_id}",
            extra={"bid_id": str(bid_id), "status": status, "project_complete": project_complete},
        )

        return {
            "success": True,
            "status": status,
            "bidId": str(bid_id),
            "projectComplete": project_complete,
        }

    async def _get_upload(self, request_id: Any) -> PdfUpload:
        try:
            upload_id = UUID(str(request_id))
        except ValueError:
            LOGGER.error(f"PDF upload not found: {request_id}")
            raise PdfUploadNotFoundError("PDF upload not found")

        upload = await self.upload_repo.get_by_id(upload_id)
        if upload is None:
            LOGGER.error(f"PDF upload not found: {request_id}")
            raise PdfUploadNotFoundError("PDF upload not found")
        return upload

    async def _record_extraction(self, pdf_upload_id: UUID, payload: Dict[str, Any]) -> Optional[UUID]:
        """Store the raw payload and return the audit row id.

        A failure here is logged and processing continues without an audit row.
        """
        try:
            extraction = await self.extraction_repo.create(
                pdf_upload_id=pdf_upload_id,
                raw_json=payload,
                parsed_successfully=False,
                extracted_at=datetime.now(timezone.utc),
            )
        except SQLAlchemyError as e:
            LOGGER.error(f"Failed to store extraction for upload {pdf_upload_id}: {_db_error_message(e)}")
            return None
        return extraction.id

    async def _mark_failed(self, upload_id: UUID, extraction_id: Optional[UUID], message: str) -> None:
        LOGGER.warning(f"Extraction failed for upload {upload_id}: {message}")
        await self.upload_repo.update(
            upload_id,
            status="failed",
            error_message=message,
            mindpal_status="failed",
            processing_completed_at=datetime.now(timezone.utc),
        )
        if extraction_id is not None:
            await self.extraction_repo.update(
                extraction_id,
                parsed_successfully=False,
                parsing_errors=[message],
            )

    async def _insert_children(self, payload, bid_id: UUID) -> None:
        children = (
            ("line items", self.line_item_repo, bid_mapper.build_line_item_rows(payload, bid_id)),
            ("equipment", self.equipment_repo, bid_mapper.build_equipment_rows(payload, bid_id)),
            ("faqs", self.faq_repo, bid_mapper.build_faq_rows(payload, bid_id)),
            ("questions", self.question_repo, bid_mapper.build_question_rows(payload, bid_id)),
        )

        for name, repo, rows in children:
            if not rows:
                continue
            try:
                await repo.create_many(rows)
            except SQLAlchemyError as e:
                LOGGER.error(f"Failed to create {name} for bid {bid_id}: {_db_error_message(e)}")

    async def _complete_project_if_ready(self, project_id: UUID) -> bool:
        statuses = await self.upload_repo.list_statuses(project_id)
        if not is_project_complete(statuses):
            return False

        await self.project_repo.update_status(project_id, "comparing")
        LOGGER.info(f"Project {project_id} ready for comparison")

        await run_best_effort("send_completion_notification", self.notifier.notify(project_id))
        return True
