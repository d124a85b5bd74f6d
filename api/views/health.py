from django.http import JsonResponse, HttpResponseNotAllowed
from django.views.decorators.csrf import csrf_exempt

from .. import email_service
from ..firebase_service import is_available


@csrf_exempt
def health(request):
    if request.method != "GET":
        return HttpResponseNotAllowed(["GET"])

    firebase_ok = is_available()

    return JsonResponse({
        "status": "ok",
        "firestore": "connected" if firebase_ok else "not_configured",
        "auth": "configured" if firebase_ok else "not_configured",
        "email": "configured" if email_service.is_configured() else "not_configured",
    })
