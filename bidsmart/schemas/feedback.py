"""Request schemas for product feedback and contractor installation reviews."""

from datetime import datetime
from typing import Annotated, List, Literal, Optional
from uuid import UUID

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator

FeedbackType = Literal["liked", "wishlist", "bug"]

Rating = Annotated[int, Field(ge=1, le=5)]


class FeedbackCreate(BaseModel):
    """Feedback panel submission; the message is stored trimmed."""

    model_config = ConfigDict(str_strip_whitespace=True)

    type: FeedbackType
    message: str = Field(..., min_length=1, max_length=500)
    url: Optional[str] = None
    user_agent: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("userAgent", "user_agent")
    )
    timestamp: Optional[datetime] = None


class ContractorReviewCreate(BaseModel):
    """Homeowner's review of the installing contractor."""

    project_id: UUID
    contractor_bid_id: UUID

    overall_rating: Rating
    quality_of_work_rating: Rating
    professionalism_rating: Rating
    communication_rating: Rating
    timeliness_rating: Rating

    used_checklist: bool = False
    checklist_completeness_rating: Optional[int] = None

    would_recommend: bool
    completed_on_time: bool
    stayed_within_budget: bool
    critical_items_verified: bool
    photo_documentation_provided: bool

    issues_encountered: List[str] = Field(default_factory=list)
    positive_comments: Optional[str] = None
    improvement_suggestions: Optional[str] = None

    @model_validator(mode="after")
    def check_checklist_rating(self) -> "ContractorReviewCreate":
        # The completeness rating only means something when the checklist was used
        if not self.used_checklist:
            self.checklist_completeness_rating = None
        elif self.checklist_completeness_rating is not None and not 1 <= self.checklist_completeness_rating <= 5:
            raise ValueError("Checklist completeness rating must be between 1 and 5")
        return self
