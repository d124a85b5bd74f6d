# Models are stored in Firebase Firestore, not the Django DB.
#
# Firestore documents use camelCase keys; these dataclasses hold the same
# records with Python attribute names and convert on the way out.
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .constants import PARTICIPANT_ROLES, ROLE_GUEST, STATUS_OFFLINE


def _missing(payload: Dict[str, Any], *keys) -> List[str]:
    return [key for key in keys if payload.get(key) in (None, "")]


def _flag(payload: Dict[str, Any], key: str, default: bool) -> bool:
    value = payload.get(key)
    if value is None:
        return default
    if not isinstance(value, bool):
        raise ValueError(f"{key} must be a boolean")
    return value


def check_capacity(participants: Any, capacity: Any) -> int:
    """Validate a participant list against a meeting capacity and return the capacity as an int."""
    if not isinstance(participants, list):
        raise ValueError("participants must be a list of user ids")
    if isinstance(capacity, bool):
        raise ValueError("maxParticipants must be an integer")
    try:
        capacity = int(capacity)
    except (TypeError, ValueError):
        raise ValueError("maxParticipants must be an integer")
    if capacity < 1:
        raise ValueError("maxParticipants must be at least 1")
    if len(participants) > capacity:
        raise ValueError("participants exceed maxParticipants")
    return capacity


@dataclass
class UserProfile:
    """Profile stored at users/{uid}. The password only lives in Firebase Auth."""
    id: str
    first_name: str
    last_name: str
    email: str
    age: int = 0
    photo: str = ""
    oauth: List[str] = field(default_factory=list)
    status: str = STATUS_OFFLINE

    def to_document(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "email": self.email,
            "age": self.age,
            "photo": self.photo,
            "oauth": list(self.oauth),
            "status": self.status,
        }

    def summary(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "email": self.email,
        }


@dataclass
class Meeting:
    host_uid: str
    title: str
    description: str = ""
    participants: List[str] = field(default_factory=list)
    max_participants: int = 10
    active: bool = True
    start_time: Optional[Any] = None
    end_time: Optional[Any] = None

    @classmethod
    def from_payload(cls, payload: Dict[str, Any], host_uid: str, default_capacity: int) -> "Meeting":
        missing = _missing(payload, "title")
        if missing:
            raise ValueError(f"Missing required fields: {', '.join(missing)}")

        participants = payload.get("participants")
        if participants is None:
            participants = [host_uid]
        capacity = check_capacity(participants, payload.get("maxParticipants", default_capacity))

        return cls(
            host_uid=host_uid,
            title=str(payload["title"]),
            description=str(payload.get("description") or ""),
            participants=[str(uid) for uid in participants],
            max_participants=capacity,
            active=_flag(payload, "active", True),
            start_time=payload.get("startTime"),
            end_time=payload.get("endTime"),
        )

    def to_document(self) -> Dict[str, Any]:
        return {
            "hostUid": self.host_uid,
            "title": self.title,
            "description": self.description,
            "participants": list(self.participants),
            "maxParticipants": self.max_participants,
            "active": self.active,
            "startTime": self.start_time,
            "endTime": self.end_time,
        }


@dataclass
class Participant:
    meeting_id: str
    role: str = ROLE_GUEST
    is_muted: bool = False
    is_camera_on: bool = True
    hand_raised: bool = False
    joined_at: Optional[Any] = None

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "Participant":
        missing = _missing(payload, "meetingId")
        if missing:
            raise ValueError(f"Missing required fields: {', '.join(missing)}")

        role = payload.get("role") or ROLE_GUEST
        if role not in PARTICIPANT_ROLES:
            raise ValueError(f"role must be one of: {', '.join(sorted(PARTICIPANT_ROLES))}")

        return cls(
            meeting_id=str(payload["meetingId"]),
            role=role,
            is_muted=_flag(payload, "isMuted", False),
            is_camera_on=_flag(payload, "isCameraOn", True),
            hand_raised=_flag(payload, "handRaised", False),
        )

    def to_document(self) -> Dict[str, Any]:
        return {
            "meetingId": self.meeting_id,
            "role": self.role,
            "joinedAt": self.joined_at,
            "isMuted": self.is_muted,
            "isCameraOn": self.is_camera_on,
            "handRaised": self.hand_raised,
        }
