from .global_controller import GlobalController
from .meeting_controller import MeetingController, ParticipantController, meeting_controller, participant_controller
from .user_controller import UserController, user_controller

__all__ = [
    "GlobalController",
    "MeetingController",
    "ParticipantController",
    "UserController",
    "meeting_controller",
    "participant_controller",
    "user_controller",
]
