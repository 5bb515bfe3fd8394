from django.contrib import admin as djadmin
from django.urls import path

from api.views import clients, grants, interactions, tokens

urlpatterns = [
    # Grant negotiation
    path("grant", grants.GrantRequestView.as_view(), name="grant_request"),
    path(
        "grant/<grant_id>",
        grants.GrantContinuationView.as_view(),
        name="grant_continue",
    ),
    # Interactions
    path(
        "interact/redirect/<grant_id>",
        interactions.RedirectInteractionView.as_view(),
        name="interaction_redirect",
    ),
    path(
        "interact/app/<grant_id>",
        interactions.AppInteractionView.as_view(),
        name="interaction_app",
    ),
    path(
        "interact/user-code/<grant_id>",
        interactions.UserCodeInteractionView.as_view(),
        name="interaction_user_code",
    ),
    path(
        "interact/finish/<grant_id>",
        interactions.InteractionFinishView.as_view(),
        name="interaction_finish",
    ),
    # Tokens
    path("token/introspect", tokens.introspect, name="token_introspect"),
    path("token/revoke", tokens.revoke, name="token_revoke"),
    # Clients
    path("clients", clients.ClientRegistrationView.as_view(), name="client_register"),
    path("clients/<client_id>", clients.ClientView.as_view(), name="client"),
    # Django admin
    path("djadmin/", djadmin.site.urls),
]
