"""Tests for admin login, email verification codes, feedback and contractor reviews."""

from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest
from sqlalchemy.exc import SQLAlchemyError

from bidsmart.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    BidNotFoundError,
    DatabaseError,
    EmailDeliveryError,
    ProjectNotFoundError,
    RateLimitError,
)
from bidsmart.database.models import ContractorInstallationReview
from bidsmart.schemas.feedback import ContractorReviewCreate, FeedbackCreate
from bidsmart.services.admin_auth_service import SESSION_TTL, AdminAuthService
from bidsmart.services.feedback_service import FeedbackService
from bidsmart.services.verification_service import (
    CODE_TTL,
    MAX_CODES_PER_WINDOW,
    VerificationService,
    generate_code,
)


class TestAdminLogin:

    @pytest.fixture
    def admin(self):
        return SimpleNamespace(
            id=uuid4(), email="ops@theswitchison.org", name="Ops", is_super_admin=True, password_hash="$2a$06$hash"
        )

    def _service(self, admin, password_ok=True):
        service = AdminAuthService(MagicMock())
        service.admin_repo = AsyncMock()
        service.admin_repo.get_by_email.return_value = admin
        service.admin_repo.verify_password.return_value = password_ok
        service.session_repo = AsyncMock()
        return service

    async def test_issues_session(self, admin):
        service = self._service(admin)
        before = datetime.now(timezone.utc)

        result = await service.login("ops@theswitchison.org", "hunter2")

        assert len(result["session_token"]) == 64
        assert result["admin"] == {
            "id": str(admin.id), "email": admin.email, "name": "Ops", "is_super_admin": True
        }
        stored = service.session_repo.create.await_args.kwargs
        assert stored["admin_user_id"] == admin.id
        assert stored["session_token"] == result["session_token"]
        assert stored["expires_at"] - before >= SESSION_TTL
        assert datetime.fromisoformat(result["expires_at"]) == stored["expires_at"]
        service.admin_repo.verify_password.assert_awaited_once_with("hunter2", "$2a$06$hash")
        assert "last_login_at" in service.admin_repo.update.await_args.kwargs

    async def test_unknown_email(self, admin):
        service = self._service(None)

        with pytest.raises(AuthenticationError) as exc_info:
            await service.login("nobody@example.com", "x")

        assert exc_info.value.message == "Invalid email or password"
        service.session_repo.create.assert_not_awaited()

    async def test_wrong_password(self, admin):
        service = self._service(admin, password_ok=False)

        with pytest.raises(AuthenticationError) as exc_info:
            await service.login(admin.email, "wrong")

        assert exc_info.value.message == "Invalid email or password"
        service.session_repo.create.assert_not_awaited()

    async def test_session_insert_failure(self, admin):
        service = self._service(admin)
        service.session_repo.create.side_effect = SQLAlchemyError("unique violation")

        with pytest.raises(DatabaseError) as exc_info:
            await service.login(admin.email, "hunter2")

        assert exc_info.value.message == "Failed to create session"

    async def test_last_login_failure_is_ignored(self, admin):
        service = self._service(admin)
        service.admin_repo.update.side_effect = SQLAlchemyError("timeout")

        result = await service.login(admin.email, "hunter2")

        assert result["session_token"]

    async def test_session_lookup(self, admin):
        service = self._service(admin)
        service.session_repo.get_active_admin.return_value = admin

        identity = await service.get_session_admin("a" * 64)

        assert identity.email == admin.email
        assert identity.is_super_admin is True

    async def test_expired_session(self, admin):
        service = self._service(admin)
        service.session_repo.get_active_admin.return_value = None

        assert await service.get_session_admin("a" * 64) is None


class TestVerificationCodes:

    def _service(self, recent=0, api_key="re_test"):
        email_client = MagicMock()
        email_client.api_key = api_key
        email_client.send = AsyncMock(return_value={"id": "email-1"})
        service = VerificationService(MagicMock(), email_client=email_client)
        service.verification_repo = AsyncMock()
        service.verification_repo.count_since.return_value = recent
        service.session_repo = AsyncMock()
        return service

    def test_code_shape(self):
        for _ in range(50):
            code = generate_code()
            assert len(code) == 6
            assert code.isdigit()
            assert code[0] != "0"

    async def test_code_is_emailed(self):
        service = self._service()

        result = await service.send_code("Owner@Example.com", ip_address="203.0.113.9", user_agent="pytest")

        assert result == {"message": "Verification code sent to your email"}
        stored = service.verification_repo.create.await_args.kwargs
        assert stored["email"] == "owner@example.com"
        assert stored["ip_address"] == "203.0.113.9"
        assert stored["expires_at"] - datetime.now(timezone.utc) <= CODE_TTL
        send = service.email_client.send.await_args.kwargs
        assert send["to"] == "owner@example.com"
        assert stored["code"] in send["html"]

    async def test_code_returned_without_email_key(self):
        service = self._service(api_key="")

        result = await service.send_code("owner@example.com")

        assert result["code"] == service.verification_repo.create.await_args.kwargs["code"]
        service.email_client.send.assert_not_awaited()

    async def test_rate_limited(self):
        service = self._service(recent=MAX_CODES_PER_WINDOW)

        with pytest.raises(RateLimitError) as exc_info:
            await service.send_code("owner@example.com")

        assert exc_info.value.status_code == 429
        service.verification_repo.create.assert_not_awaited()

    async def test_email_failure(self):
        service = self._service()
        service.email_client.send.side_effect = EmailDeliveryError("Failed to send email: 422")

        with pytest.raises(EmailDeliveryError) as exc_info:
            await service.send_code("owner@example.com")

        assert exc_info.value.message == "Failed to send verification email"

    async def test_verify_opens_session(self):
        service = self._service()
        verification = SimpleNamespace(id=uuid4())
        service.verification_repo.find_valid.return_value = verification

        result = await service.verify_code("Owner@Example.com", "123456")

        assert result["email"] == "owner@example.com"
        assert len(result["sessionToken"]) == 64
        assert service.verification_repo.find_valid.await_args.args[:2] == ("owner@example.com", "123456")
        assert service.verification_repo.update.await_args.kwargs["verified"] is True
        assert service.session_repo.create.await_args.kwargs["session_token"] == result["sessionToken"]

    async def test_verify_rejects_unknown_code(self):
        service = self._service()
        service.verification_repo.find_valid.return_value = None

        with pytest.raises(AuthenticationError):
            await service.verify_code("owner@example.com", "000000")

        service.session_repo.create.assert_not_awaited()


REVIEW = {
    "overall_rating": 5,
    "quality_of_work_rating": 4,
    "professionalism_rating": 5,
    "communication_rating": 4,
    "timeliness_rating": 3,
    "used_checklist": True,
    "checklist_completeness_rating": 4,
    "would_recommend": True,
    "completed_on_time": False,
    "stayed_within_budget": True,
    "critical_items_verified": True,
    "photo_documentation_provided": False,
    "issues_encountered": ["Thermostat wiring redone"],
}


class TestFeedbackService:

    @pytest.fixture
    def owner(self):
        return uuid4()

    @pytest.fixture
    def project(self, owner):
        return SimpleNamespace(id=uuid4(), user_id=owner)

    def _service(self, project, bid=None, existing=None):
        service = FeedbackService(MagicMock())
        service.feedback_repo = AsyncMock()
        service.project_repo = AsyncMock()
        service.project_repo.get_by_id.return_value = project
        service.bid_repo = AsyncMock()
        service.bid_repo.get_by_id.return_value = bid
        service.review_repo = AsyncMock()
        service.review_repo.get_by_project.return_value = existing
        return service

    def _review(self, project, bid_id, **overrides):
        return ContractorReviewCreate(project_id=project.id, contractor_bid_id=bid_id, **{**REVIEW, **overrides})

    async def test_feedback_defaults_timestamp(self, project):
        service = self._service(project)
        service.feedback_repo.create.return_value = SimpleNamespace(id=uuid4())

        await service.submit_feedback(FeedbackCreate(type="bug", message="  Upload button froze  "))

        stored = service.feedback_repo.create.await_args.kwargs
        assert stored["message"] == "Upload button froze"
        assert stored["url"] is None
        assert stored["timestamp"] is not None

    async def test_first_review_is_created(self, project, owner):
        bid = SimpleNamespace(id=uuid4(), project_id=project.id)
        service = self._service(project, bid=bid)
        service.review_repo.create.return_value = ContractorInstallationReview(
            id=uuid4(), project_id=project.id, bid_id=bid.id, user_id=owner, overall_rating=5
        )

        result = await service.submit_contractor_review(owner, self._review(project, bid.id))

        assert result["updated"] is False
        assert result["review"]["overall_rating"] == 5
        stored = service.review_repo.create.await_args.kwargs
        assert stored["project_id"] == project.id
        assert stored["bid_id"] == bid.id
        assert stored["user_id"] == owner
        assert stored["checklist_completeness_rating"] == 4
        assert "contractor_bid_id" not in stored

    async def test_second_review_replaces_first(self, project, owner):
        bid = SimpleNamespace(id=uuid4(), project_id=project.id)
        existing = SimpleNamespace(id=uuid4())
        service = self._service(project, bid=bid, existing=existing)
        service.review_repo.update.return_value = ContractorInstallationReview(id=existing.id, overall_rating=2)

        result = await service.submit_contractor_review(owner, self._review(project, bid.id, overall_rating=2))

        assert result["updated"] is True
        assert service.review_repo.update.await_args.args == (existing.id,)
        assert service.review_repo.update.await_args.kwargs["overall_rating"] == 2
        service.review_repo.create.assert_not_awaited()

    async def test_unknown_project(self, project, owner):
        service = self._service(None)

        with pytest.raises(ProjectNotFoundError):
            await service.submit_contractor_review(owner, self._review(project, uuid4()))

    async def test_other_users_project(self, project):
        service = self._service(project)

        with pytest.raises(AuthorizationError) as exc_info:
            await service.submit_contractor_review(uuid4(), self._review(project, uuid4()))

        assert exc_info.value.message == "Not authorized to review this project"

    async def test_bid_from_another_project(self, project, owner):
        service = self._service(project, bid=SimpleNamespace(id=uuid4(), project_id=uuid4()))

        with pytest.raises(BidNotFoundError):
            await service.submit_contractor_review(owner, self._review(project, uuid4()))

        service.review_repo.create.assert_not_awaited()


class TestReviewSchema:

    def test_checklist_rating_dropped_when_unused(self):
        review = ContractorReviewCreate(
            project_id=uuid4(), contractor_bid_id=uuid4(),
            **{**REVIEW, "used_checklist": False, "checklist_completeness_rating": 9},
        )

        assert review.checklist_completeness_rating is None

    def test_checklist_rating_out_of_range(self):
        with pytest.raises(ValueError, match="Checklist completeness rating must be between 1 and 5"):
            ContractorReviewCreate(
                project_id=uuid4(), contractor_bid_id=uuid4(), **{**REVIEW, "checklist_completeness_rating": 6}
            )

    @pytest.mark.parametrize("rating", [0, 6])
    def test_rating_bounds(self, rating):
        with pytest.raises(ValueError):
            ContractorReviewCreate(
                project_id=uuid4(), contractor_bid_id=uuid4(), **{**REVIEW, "overall_rating": rating}
            )
