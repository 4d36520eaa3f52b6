"""
Gahoi Sathi — ORM model registry.

Importing every model here ensures that Alembic (and any other tool that
inspects ``Base.metadata``) discovers all tables automatically.
"""

from app.models.user import User, UserSession
from app.models.interest import Interest
from app.models.message import Message
from app.models.notification import Notification
from app.models.question import Answer, Question, Vote
from app.models.profile_view import ProfileView
from app.models.push_subscription import PushSubscription
from app.models.shortlist import Shortlist
from app.models.report import ProfileReport

__all__ = [
    "User",
    "UserSession",
    "Interest",
    "Message",
    "Notification",
    "Question",
    "Answer",
    "Vote",
    "ProfileView",
    "PushSubscription",
    "Shortlist",
    "ProfileReport",
]
