from django.http import JsonResponse
from django.utils.decorators import method_decorator
from django.views.generic import View

from api.decorators import gnap_view
from core.parser import FormOrJsonParser
from core.schemas import ClientSchema
from gnapserver.container import get_container


@method_decorator(gnap_view, name="dispatch")
class ClientRegistrationView(View):
    """
    Registers a new client and its key. Clients that already exist are
    updated through their grant requests instead.
    """

    def post(self, request):
        candidate = ClientSchema.model_validate(FormOrJsonParser().parse_body(request))
        registry = get_container().clients
        if registry.find_by_instance_id(candidate.instance_id) or (
            registry.find_by_key_id(candidate.key_id)
        ):
            return JsonResponse({"error": "invalid_client"}, status=409)
        client = registry.register_client(candidate)
        return JsonResponse(client.to_json(), status=201)


@method_decorator(gnap_view, name="dispatch")
class ClientView(View):
    def get(self, request, client_id):
        client = get_container().clients.find_by_id(client_id)
        if client is None:
            return JsonResponse({"error": "invalid_client"}, status=404)
        return JsonResponse(client.to_json())
