import jwt
from django.http import HttpResponse, JsonResponse
from django.utils.decorators import method_decorator
from django.views.generic import View
from jwt.exceptions import PyJWTError

from api.decorators import gnap_view
from core.exceptions import InvalidRequestError
from core.parser import FormOrJsonParser
from core.schemas import GrantRequestSchema
from gnapserver.container import get_container


def read_signed_body(request) -> tuple[dict, str]:
    """
    Reads an application/jose body: a compact JWS whose payload is the
    grant request. The signature is checked later, against the stored key
    for the client the payload names.
    """
    try:
        assertion = request.body.decode("ascii").strip()
        payload = jwt.decode(assertion, options={"verify_signature": False})
    except (UnicodeDecodeError, PyJWTError):
        raise InvalidRequestError("Body is not a compact JWS")
    return payload, assertion


@method_decorator(gnap_view, name="dispatch")
class GrantRequestView(View):
    """
    Where clients start a new grant.
    """

    def post(self, request):
        signed_assertion = None
        if request.content_type == "application/jose":
            body, signed_assertion = read_signed_body(request)
        else:
            body = FormOrJsonParser().parse_body(request)
        grant_request = GrantRequestSchema.model_validate(body)
        response = get_container().grants.process_grant_request(
            grant_request, signed_assertion
        )
        return JsonResponse(response.to_json(), status=201)


@method_decorator(gnap_view, name="dispatch")
class GrantContinuationView(View):
    """
    The continuation URI for a grant: poll it, or delete it to revoke.
    """

    def post(self, request, grant_id):
        response = get_container().grants.process_continuation(
            grant_id, request.continuation_token
        )
        return JsonResponse(response.to_json())

    def get(self, request, grant_id):
        return self.post(request, grant_id)

    def delete(self, request, grant_id):
        get_container().grants.revoke_grant(grant_id, request.continuation_token)
        return HttpResponse(status=204)
