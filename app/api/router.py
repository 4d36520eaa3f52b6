"""
Gahoi Sathi — Main API Router

Aggregates all sub-routers under a single prefix so that ``app.main``
can mount the entire API surface with one ``include_router`` call.
"""

from fastapi import APIRouter

from app.api import (
    answers,
    auth,
    interests,
    messages,
    notifications,
    photos,
    profile_views,
    push,
    questions,
    realtime,
    reports,
    shortlist,
    users,
)

router = APIRouter()

router.include_router(auth.router, prefix="/auth", tags=["Auth"])
router.include_router(users.router, prefix="/users", tags=["Users"])
router.include_router(photos.router, prefix="/photos", tags=["Photos"])
router.include_router(interests.router, prefix="/interests", tags=["Interests"])
router.include_router(messages.router, prefix="/messages", tags=["Messages"])
router.include_router(notifications.router, prefix="/notifications", tags=["Notifications"])
router.include_router(profile_views.router, prefix="/profile-views", tags=["Profile Views"])
router.include_router(shortlist.router, prefix="/shortlist", tags=["Shortlist"])
router.include_router(reports.router, prefix="/reports", tags=["Reports"])
router.include_router(questions.router, prefix="/questions", tags=["Questions"])
router.include_router(answers.router, prefix="/answers", tags=["Answers"])
router.include_router(push.router, prefix="/push", tags=["Push"])
router.include_router(realtime.router, tags=["Realtime"])
