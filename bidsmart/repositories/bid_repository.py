"""Repositories for contractor bids and their child rows."""

from typing import List, Sequence, Type, TypeVar
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bidsmart.database.models import (
    BidEquipment,
    BidFaq,
    BidLineItem,
    BidQuestion,
    BidScore,
    ContractorBid,
)
from bidsmart.repositories.base_repository import BaseRepository

ChildType = TypeVar("ChildType")


class ContractorBidRepository(BaseRepository[ContractorBid]):
    """Data access for the contractor_bids table."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, ContractorBid)

    async def list_by_project(self, project_id: UUID) -> List[ContractorBid]:
        query = (
            select(ContractorBid)
            .where(ContractorBid.project_id == project_id)
            .order_by(ContractorBid.created_at.asc())
        )
        return await self._fetch_all(query, f"listing bids for project {project_id}")


class BidChildRepository(BaseRepository[ChildType]):
    """Shared access pattern for tables keyed by ``bid_id``."""

    order_column: str = "created_at"

    def __init__(self, session: AsyncSession, model: Type[ChildType]):
        super().__init__(session, model)

    async def list_by_bid(self, bid_id: UUID) -> List[ChildType]:
        return await self.list_by_bids([bid_id])

    async def list_by_bids(self, bid_ids: Sequence[UUID]) -> List[ChildType]:
        if not bid_ids:
            return []

        query = (
            select(self.model)
            .where(self.model.bid_id.in_(list(bid_ids)))
            .order_by(getattr(self.model, self.order_column).asc())
        )
        return await self._fetch_all(query, f"listing {self.model.__name__} rows")


class BidLineItemRepository(BidChildRepository[BidLineItem]):
    order_column = "line_order"

    def __init__(self, session: AsyncSession):
        super().__init__(session, BidLineItem)


class BidEquipmentRepository(BidChildRepository[BidEquipment]):
    def __init__(self, session: AsyncSession):
        super().__init__(session, BidEquipment)


class BidFaqRepository(BidChildRepository[BidFaq]):
    order_column = "display_order"

    def __init__(self, session: AsyncSession):
        super().__init__(session, BidFaq)


class BidQuestionRepository(BidChildRepository[BidQuestion]):
    order_column = "display_order"

    def __init__(self, session: AsyncSession):
        super().__init__(session, BidQuestion)


class BidScoreRepository(BidChildRepository[BidScore]):
    order_column = "calculated_at"

    def __init__(self, session: AsyncSession):
        super().__init__(session, BidScore)
