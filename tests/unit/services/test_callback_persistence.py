"""Callback processing against a real async session.

The handler's failure paths roll the session back, which expires every row it
already loaded. These tests run the real repositories on an in-memory SQLite
database so those paths go through the same ORM machinery as production.
"""

from unittest.mock import AsyncMock, MagicMock
from uuid import UUID, uuid4

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from bidsmart.core.database import Base
from bidsmart.core.exceptions import BidCreationError
from bidsmart.database.models import (
    BidEquipment,
    BidLineItem,
    ContractorBid,
    MindpalExtraction,
    PdfUpload,
    Project,
)
from bidsmart.services.callback import bid_mapper
from bidsmart.services.callback.callback_service import CallbackService


@pytest.fixture
async def db_session():
    engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_maker() as session:
        yield session

    await engine.dispose()


@pytest.fixture
async def upload_id(db_session) -> UUID:
    """Seed a project with one upload that is waiting for MindPal."""
    project_id, pdf_upload_id = uuid4(), uuid4()
    db_session.add(Project(id=project_id, project_name="Heat pump quotes", status="analyzing"))
    db_session.add(
        PdfUpload(
            id=pdf_upload_id,
            project_id=project_id,
            file_name="acme.pdf",
            file_path=f"projects/{project_id}/acme.pdf",
            status="processing",
        )
    )
    await db_session.commit()
    db_session.expunge_all()
    return pdf_upload_id


def build_service(session, callback_secret) -> CallbackService:
    scoring = MagicMock()
    scoring.calculate_bid_scores = AsyncMock(return_value=None)
    notifier = MagicMock()
    notifier.notify = AsyncMock(return_value={})
    return CallbackService(session, scoring_service=scoring, notifier=notifier, callback_secret=callback_secret)


async def upload_state(session, pdf_upload_id):
    result = await session.execute(
        select(PdfUpload.status, PdfUpload.error_message, PdfUpload.extracted_bid_id).where(
            PdfUpload.id == pdf_upload_id
        )
    )
    return result.one()


async def count_rows(session, model, *criteria) -> int:
    return await session.scalar(select(func.count()).select_from(model).where(*criteria))


class TestCallbackWriteFailures:

    async def test_child_insert_failure_keeps_bid(
        self, db_session, upload_id, callback_secret, signed_callback, acme_extraction, monkeypatch
    ):
        monkeypatch.setattr(
            bid_mapper,
            "build_line_item_rows",
            lambda payload, bid_id: [{"bid_id": None, "item_type": "equipment", "description": "Crane"}],
        )
        service = build_service(db_session, callback_secret)

        result = await service.execute(signed_callback(upload_id, **acme_extraction))

        assert result["status"] == "extracted"
        bid_id = UUID(result["bidId"])

        status, error_message, extracted_bid_id = await upload_state(db_session, upload_id)
        assert status == "extracted"
        assert error_message is None
        assert extracted_bid_id == bid_id

        assert await count_rows(db_session, ContractorBid, ContractorBid.id == bid_id) == 1
        assert await count_rows(db_session, BidLineItem, BidLineItem.bid_id == bid_id) == 0
        assert await count_rows(db_session, BidEquipment, BidEquipment.bid_id == bid_id) == 1

        parsed = await db_session.scalar(
            select(MindpalExtraction.parsed_successfully).where(MindpalExtraction.pdf_upload_id == upload_id)
        )
        assert parsed is True

    async def test_bid_insert_failure_marks_upload_failed(
        self, db_session, upload_id, callback_secret, signed_callback, acme_extraction, monkeypatch
    ):
        build_bid_record = bid_mapper.build_bid_record
        monkeypatch.setattr(
            bid_mapper,
            "build_bid_record",
            lambda *args: {**build_bid_record(*args), "contractor_name": None},
        )
        service = build_service(db_session, callback_secret)

        with pytest.raises(BidCreationError):
            await service.execute(signed_callback(upload_id, **acme_extraction))

        status, error_message, extracted_bid_id = await upload_state(db_session, upload_id)
        assert status == "failed"
        assert error_message.startswith("Failed to create bid: ")
        assert extracted_bid_id is None

        assert await count_rows(db_session, ContractorBid) == 0
        assert await count_rows(db_session, MindpalExtraction, MindpalExtraction.pdf_upload_id == upload_id) == 1
