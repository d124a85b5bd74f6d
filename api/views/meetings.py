from ..controllers import meeting_controller, participant_controller
from .resources import collection_view, detail_view

meetings_collection = collection_view(meeting_controller)
meeting_detail = detail_view(meeting_controller)

participants_collection = collection_view(participant_controller)
participant_detail = detail_view(participant_controller)
