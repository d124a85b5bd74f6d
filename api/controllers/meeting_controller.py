import logging

from django.conf import settings
from django.http import JsonResponse
from firebase_admin import firestore

from ..dao import meeting_dao, participant_dao
from ..firebase_service import FirestoreUnavailableError
from ..http import error_response, json_body, store_unavailable
from ..models import Meeting, Participant, check_capacity
from .global_controller import GlobalController

logger = logging.getLogger("api")


class MeetingController(GlobalController):
    def __init__(self):
        super().__init__(meeting_dao)

    def create(self, request) -> JsonResponse:
        """Create a meeting hosted by the authenticated caller."""
        data, error = json_body(request)
        if error:
            return error

        host_uid = request.firebase_user["uid"]
        try:
            meeting = Meeting.from_payload(data, host_uid, settings.MEETING_MAX_PARTICIPANTS)
        except ValueError as e:
            return error_response("invalid_meeting", str(e), 400)

        try:
            meeting_id = self.dao.create(meeting.to_document())
        except FirestoreUnavailableError:
            return store_unavailable()
        except Exception as e:
            logger.error(f"[MEETINGS/CREATE] {e}")
            return error_response("create_failed", str(e), 400)

        logger.info(f"[MEETINGS/CREATE] {meeting_id} host={host_uid}")
        return JsonResponse({"id": meeting_id, **meeting.to_document()}, status=201)

    def update(self, request, doc_id: str) -> JsonResponse:
        """Patch a meeting, re-checking capacity against the merged record."""
        data, error = json_body(request)
        if error:
            return error

        try:
            current = self.dao.get_by_id(doc_id)
        except FirestoreUnavailableError:
            return store_unavailable()
        except Exception as e:
            logger.error(f"[MEETINGS/UPDATE] {doc_id}: {e}")
            return error_response("update_failed", str(e), 400)
        if current is None:
            return error_response("not_found", "Not found", 404)

        merged = {**current, **data}
        try:
            capacity = check_capacity(
                merged.get("participants") or [],
                merged.get("maxParticipants", settings.MEETING_MAX_PARTICIPANTS),
            )
        except ValueError as e:
            return error_response("invalid_meeting", str(e), 400)
        if "maxParticipants" in data:
            data = {**data, "maxParticipants": capacity}

        return self._apply_update(doc_id, data)


class ParticipantController(GlobalController):
    def __init__(self):
        super().__init__(participant_dao)

    def create(self, request) -> JsonResponse:
        data, error = json_body(request)
        if error:
            return error

        try:
            participant = Participant.from_payload(data)
        except ValueError as e:
            return error_response("invalid_participant", str(e), 400)
        participant.joined_at = firestore.SERVER_TIMESTAMP

        try:
            participant_id = self.dao.create(participant.to_document())
        except FirestoreUnavailableError:
            return store_unavailable()
        except Exception as e:
            logger.error(f"[PARTICIPANTS/CREATE] {e}")
            return error_response("create_failed", str(e), 400)

        return JsonResponse({"id": participant_id}, status=201)


meeting_controller = MeetingController()
participant_controller = ParticipantController()
