from .health import health
from .meetings import meeting_detail, meetings_collection, participant_detail, participants_collection
from .users import (
    user_detail,
    users_collection,
    users_login,
    users_me,
    users_password_reset,
    users_register,
    users_social,
)

__all__ = [
    "health",
    "users_collection",
    "user_detail",
    "users_me",
    "users_login",
    "users_register",
    "users_social",
    "users_password_reset",
    "meetings_collection",
    "meeting_detail",
    "participants_collection",
    "participant_detail",
]
