"""
View factories that expose a controller's CRUD operations on a collection
URL and an item URL.
"""
from django.http import HttpResponseNotAllowed
from django.views.decorators.csrf import csrf_exempt

from ..auth import authenticate


def _dispatch(request, handlers, protected, *args):
    handler = handlers.get(request.method)
    if handler is None:
        return HttpResponseNotAllowed(sorted(handlers))

    if request.method in protected:
        _, error = authenticate(request)
        if error:
            return error

    return handler(request, *args)


def collection_view(controller, protected=("GET", "POST")):
    """GET lists, POST creates."""

    @csrf_exempt
    def view(request):
        handlers = {"GET": controller.get_all, "POST": controller.create}
        return _dispatch(request, handlers, protected)

    return view


def detail_view(controller, protected=("GET", "PUT", "DELETE")):
    """GET reads, PUT updates, DELETE removes the item named in the URL."""

    @csrf_exempt
    def view(request, doc_id):
        handlers = {
            "GET": controller.read,
            "PUT": controller.update,
            "DELETE": controller.delete,
        }
        return _dispatch(request, handlers, protected, doc_id)

    return view
