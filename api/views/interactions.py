from urllib.parse import urlparse

from django.http import HttpResponseRedirect, JsonResponse
from django.shortcuts import render
from django.utils.decorators import method_decorator
from django.views.generic import View

from api.decorators import gnap_view
from core.parser import FormOrJsonParser
from core.schemas import InteractionFinishSchema
from gnapserver.container import get_container
from grants.models import GrantStates


class ClientRedirect(HttpResponseRedirect):
    """
    Sends the user back to the client, on whatever scheme it registered
    (apps often use their own).
    """

    def __init__(self, redirect_uri, **kwargs):
        self.allowed_schemes = [urlparse(redirect_uri).scheme]
        super().__init__(redirect_uri, **kwargs)


class InteractionPageView(View):
    """
    Shows the resource owner what's being asked for, so they can approve or
    deny it. Subclasses pick how.
    """

    template_name = "interactions/consent.html"

    def get(self, request, grant_id):
        services = get_container()
        grant = services.grants.find_by_id(grant_id)
        if grant is None:
            return render(
                request,
                "interactions/error.html",
                {"error": "Grant not found"},
                status=404,
            )
        interactions = services.interactions.find_active_interactions(grant_id)
        if not interactions or grant.state != GrantStates.pending:
            return render(
                request,
                "interactions/error.html",
                {"error": "No active interactions found"},
                status=400,
            )
        return render(
            request,
            self.template_name,
            {
                "grant": grant,
                "interaction": interactions[0],
                "resources": list(grant.resources.all()),
                "user_code": next(
                    (i.user_code for i in interactions if i.user_code), None
                ),
            },
        )


class RedirectInteractionView(InteractionPageView):
    template_name = "interactions/consent.html"


class UserCodeInteractionView(InteractionPageView):
    template_name = "interactions/user_code.html"


@method_decorator(gnap_view, name="dispatch")
class AppInteractionView(View):
    """
    What an app needs to show its own consent screen.
    """

    def get(self, request, grant_id):
        services = get_container()
        grant = services.grants.find_by_id(grant_id)
        if grant is None:
            return JsonResponse({"error": "invalid_request"}, status=404)
        if not services.interactions.find_active_interactions(grant_id):
            return JsonResponse({"error": "invalid_interaction"}, status=400)
        return JsonResponse(
            {
                "grant_id": grant.id,
                "client_name": (
                    grant.client.display_name
                    if grant.client and grant.client.display_name
                    else "Unknown Client"
                ),
            }
        )


@method_decorator(gnap_view, name="dispatch")
class InteractionFinishView(View):
    """
    Receives the resource owner's decision.
    """

    def post(self, request, grant_id):
        body = InteractionFinishSchema.model_validate(
            FormOrJsonParser().parse_body(request)
        )
        user_id = None
        if request.user.is_authenticated:
            user_id = str(request.user.pk)
        outcome = get_container().grants.finish_interaction(
            grant_id,
            body.interaction_id,
            approved=body.approved,
            nonce=body.nonce,
            user_id=user_id,
        )
        if outcome.redirect_uri:
            return ClientRedirect(outcome.redirect_uri)
        return JsonResponse(
            {
                "instance_id": outcome.grant.id,
                "interact_ref": outcome.interact_ref,
            }
        )
