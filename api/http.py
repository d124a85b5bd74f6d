import json
from typing import Tuple

from django.http import JsonResponse


def json_body(request) -> Tuple[dict, JsonResponse]:
    try:
        body = request.body.decode("utf-8") if request.body else "{}"
        data = json.loads(body)
        if not isinstance(data, dict):
            raise ValueError("JSON body must be an object")
        return data, None
    except (json.JSONDecodeError, UnicodeDecodeError, ValueError) as exc:
        return None, error_response("invalid_json", f"Invalid JSON body: {exc}", 400)


def error_response(code: str, message: str, status: int) -> JsonResponse:
    return JsonResponse({"error": code, "message": message}, status=status)


def store_unavailable() -> JsonResponse:
    return error_response(
        "firestore_unavailable",
        "Firebase Firestore is not configured",
        503,
    )
