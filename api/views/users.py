import logging

from django.http import HttpResponseNotAllowed
from django.views.decorators.csrf import csrf_exempt

from ..auth import require_auth
from ..controllers import user_controller
from .resources import collection_view, detail_view

logger = logging.getLogger("api")

# Listing and creating profiles is public; changing one needs a token
users_collection = collection_view(user_controller, protected=())
user_detail = detail_view(user_controller, protected=("PUT", "DELETE"))


@csrf_exempt
@require_auth
def users_me(request):
    if request.method != "GET":
        return HttpResponseNotAllowed(["GET"])
    return user_controller.me(request)


@csrf_exempt
def users_login(request):
    logger.info(f"[USERS/LOGIN] {request.method} from {request.META.get('REMOTE_ADDR')}")
    if request.method != "POST":
        return HttpResponseNotAllowed(["POST"])
    return user_controller.login(request)


@csrf_exempt
def users_register(request):
    logger.info(f"[USERS/REGISTER] {request.method} from {request.META.get('REMOTE_ADDR')}")
    if request.method != "POST":
        return HttpResponseNotAllowed(["POST"])
    return user_controller.register(request)


@csrf_exempt
def users_social(request):
    logger.info(f"[USERS/SOCIAL] {request.method} from {request.META.get('REMOTE_ADDR')}")
    if request.method != "POST":
        return HttpResponseNotAllowed(["POST"])
    return user_controller.social_login(request)


@csrf_exempt
def users_password_reset(request):
    logger.info(f"[USERS/PASSWORD_RESET] {request.method} from {request.META.get('REMOTE_ADDR')}")
    if request.method != "POST":
        return HttpResponseNotAllowed(["POST"])
    return user_controller.password_reset(request)
