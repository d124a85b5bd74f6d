import logging

from django.http import HttpResponse, JsonResponse

from ..dao import DocumentNotFoundError
from ..firebase_service import FirestoreUnavailableError
from ..http import error_response, json_body, store_unavailable

logger = logging.getLogger("api")


class GlobalController:
    """
    Generic CRUD controller. Maps HTTP verbs onto a DAO and DAO outcomes onto
    status codes; validation is left to the DAO and the store.
    """

    def __init__(self, dao):
        self.dao = dao

    @property
    def tag(self) -> str:
        return self.dao.collection_name.upper()

    def create(self, request) -> JsonResponse:
        data, error = json_body(request)
        if error:
            return error
        try:
            doc_id = self.dao.create(data)
        except FirestoreUnavailableError:
            return store_unavailable()
        except Exception as e:
            logger.error(f"[{self.tag}/CREATE] {e}")
            return error_response("create_failed", str(e), 400)
        return JsonResponse({"id": doc_id}, status=201)

    def read(self, request, doc_id: str) -> JsonResponse:
        try:
            item = self.dao.get_by_id(doc_id)
        except FirestoreUnavailableError:
            return store_unavailable()
        except Exception as e:
            logger.error(f"[{self.tag}/READ] {doc_id}: {e}")
            return error_response("not_found", str(e), 404)
        if not item:
            return error_response("not_found", "Not found", 404)
        return JsonResponse(item)

    def update(self, request, doc_id: str) -> JsonResponse:
        data, error = json_body(request)
        if error:
            return error
        return self._apply_update(doc_id, data)

    def _apply_update(self, doc_id: str, data) -> JsonResponse:
        try:
            self.dao.update(doc_id, data)
            item = self.dao.get_by_id(doc_id)
        except FirestoreUnavailableError:
            return store_unavailable()
        except DocumentNotFoundError:
            return error_response("not_found", "Not found", 404)
        except Exception as e:
            logger.error(f"[{self.tag}/UPDATE] {doc_id}: {e}")
            return error_response("update_failed", str(e), 400)
        return JsonResponse(item)

    def delete(self, request, doc_id: str) -> HttpResponse:
        logger.info(f"[{self.tag}/DELETE] id={doc_id}")
        try:
            deleted = self.dao.delete(doc_id)
        except FirestoreUnavailableError:
            return store_unavailable()
        except Exception as e:
            logger.error(f"[{self.tag}/DELETE] {doc_id}: {e}")
            return error_response("delete_failed", str(e), 500)
        if not deleted:
            return error_response("not_found", "Not found", 404)
        return HttpResponse(status=204)

    def get_all(self, request) -> JsonResponse:
        # Query string parameters become equality filters
        filters = {key: request.GET.get(key) for key in request.GET}
        try:
            items = self.dao.get_all(filters or None)
        except FirestoreUnavailableError:
            return store_unavailable()
        except Exception as e:
            logger.error(f"[{self.tag}/LIST] {e}")
            return error_response("list_failed", str(e), 400)
        return JsonResponse(items, safe=False)
