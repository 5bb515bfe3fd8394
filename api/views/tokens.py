from django.http import HttpResponse, JsonResponse
from django.views.decorators.http import require_POST

from api.decorators import gnap_view
from core.parser import FormOrJsonParser
from core.schemas import TokenRequestSchema
from gnapserver.container import get_container


@gnap_view
@require_POST
def introspect(request):
    body = TokenRequestSchema.model_validate(FormOrJsonParser().parse_body(request))
    introspection = get_container().tokens.introspect_token(body.token)
    return JsonResponse(introspection.to_json())


@gnap_view
@require_POST
def revoke(request):
    body = TokenRequestSchema.model_validate(FormOrJsonParser().parse_body(request))
    if get_container().tokens.revoke_token(body.token):
        return HttpResponse(status=200)
    return HttpResponse(status=404)
