"""
Gahoi Sathi — Shared API dependencies

Lazily-built service singletons (wired together once per process) and the
bearer-token authentication dependencies used by every router.
"""

from __future__ import annotations

import structlog
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.errors import AuthenticationError, AuthorizationError
from app.models.user import User
from app.services.answer_service import AnswerService
from app.services.auth_service import AuthService
from app.services.interest_service import InterestService
from app.services.message_service import MessageService
from app.services.notification_service import NotificationService
from app.services.profile_view_service import ProfileViewService
from app.services.push_service import PushService
from app.services.question_service import QuestionService
from app.services.realtime_service import get_realtime_hub
from app.services.report_service import ReportService
from app.services.shortlist_service import ShortlistService
from app.services.user_service import UserService
from app.utils.storage import Storage, create_storage

logger = structlog.get_logger("sathi.api.deps")

_bearer = HTTPBearer(auto_error=False)

# ── Service singletons ────────────────────────────────────────────────────────

_storage: Storage | None = None
_push_service: PushService | None = None
_notification_service: NotificationService | None = None
_profile_view_service: ProfileViewService | None = None
_interest_service: InterestService | None = None
_shortlist_service: ShortlistService | None = None
_report_service: ReportService | None = None
_message_service: MessageService | None = None
_question_service: QuestionService | None = None
_answer_service: AnswerService | None = None
_auth_service: AuthService | None = None
_user_service: UserService | None = None


def get_storage() -> Storage:
    global _storage
    if _storage is None:
        _storage = create_storage()
    return _storage


def get_push_service() -> PushService:
    global _push_service
    if _push_service is None:
        _push_service = PushService()
    return _push_service


def get_notification_service() -> NotificationService:
    global _notification_service
    if _notification_service is None:
        _notification_service = NotificationService(get_push_service(), get_realtime_hub())
    return _notification_service


def get_profile_view_service() -> ProfileViewService:
    global _profile_view_service
    if _profile_view_service is None:
        _profile_view_service = ProfileViewService(get_notification_service())
    return _profile_view_service


def get_interest_service() -> InterestService:
    global _interest_service
    if _interest_service is None:
        _interest_service = InterestService(get_notification_service())
    return _interest_service


def get_shortlist_service() -> ShortlistService:
    global _shortlist_service
    if _shortlist_service is None:
        _shortlist_service = ShortlistService(get_notification_service())
    return _shortlist_service


def get_report_service() -> ReportService:
    global _report_service
    if _report_service is None:
        _report_service = ReportService()
    return _report_service


def get_message_service() -> MessageService:
    global _message_service
    if _message_service is None:
        _message_service = MessageService(
            get_notification_service(),
            get_profile_view_service(),
            get_realtime_hub(),
        )
    return _message_service


def get_question_service() -> QuestionService:
    global _question_service
    if _question_service is None:
        _question_service = QuestionService()
    return _question_service


def get_answer_service() -> AnswerService:
    global _answer_service
    if _answer_service is None:
        _answer_service = AnswerService()
    return _answer_service


def get_auth_service() -> AuthService:
    global _auth_service
    if _auth_service is None:
        _auth_service = AuthService(get_push_service())
    return _auth_service


def get_user_service() -> UserService:
    global _user_service
    if _user_service is None:
        _user_service = UserService(get_storage())
    return _user_service


# ── Authentication ────────────────────────────────────────────────────────────

async def get_bearer_token(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
) -> str:
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Authentication required")
    return credentials.credentials


async def get_current_user(
    token: str = Depends(get_bearer_token),
    db: AsyncSession = Depends(get_db),
) -> User:
    return await get_auth_service().authenticate(token, db)


async def get_optional_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
    db: AsyncSession = Depends(get_db),
) -> User | None:
    """Resolve the caller when a token is sent; anonymous otherwise."""
    if credentials is None:
        return None
    return await get_auth_service().authenticate(credentials.credentials, db)


async def require_admin(user: User = Depends(get_current_user)) -> User:
    if not user.is_admin:
        raise AuthorizationError("Admin access required")
    return user
