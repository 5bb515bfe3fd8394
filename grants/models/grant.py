from django.db import models
from django.utils import timezone

from core.ids import generate_id
from stator.graph import State, StateGraph
from stator.models import StateField, StatorModel


class GrantStates(StateGraph):
    pending = State()
    processing = State()
    approved = State()
    denied = State()
    revoked = State()
    expired = State()

    pending.transitions_to(processing)
    pending.transitions_to(approved)
    pending.transitions_to(denied)
    processing.transitions_to(approved)
    processing.transitions_to(denied)

    # Revocation and expiry can catch any grant that isn't already done for
    pending.transitions_to(revoked)
    pending.transitions_to(expired)
    processing.transitions_to(revoked)
    processing.transitions_to(expired)
    approved.transitions_to(revoked)
    approved.transitions_to(expired)
    denied.transitions_to(revoked)
    denied.transitions_to(expired)


class GrantRequest(StatorModel):
    """
    One negotiation between a client and us for some access.
    The id is what the protocol calls the instance_id.
    """

    id = models.CharField(
        primary_key=True, max_length=36, default=generate_id, editable=False
    )

    # Null for requests that didn't identify a client
    client = models.ForeignKey(
        "clients.Client",
        on_delete=models.PROTECT,
        blank=True,
        null=True,
        related_name="grants",
    )

    state = StateField(GrantStates)

    # Where to send the user back to after a redirect interaction
    redirect_uri = models.TextField(blank=True, null=True)

    # Opaque, round-tripped for the client
    client_state = models.JSONField(blank=True, null=True)

    # The resource owner, once bound by an interaction
    user_id = models.CharField(max_length=500, blank=True, null=True)

    expires = models.DateTimeField(db_index=True)

    # Set once, when access tokens are first minted
    tokens_issued = models.DateTimeField(blank=True, null=True)

    created = models.DateTimeField(auto_now_add=True)
    updated = models.DateTimeField(auto_now=True)

    state_touch_fields = ["updated"]

    def __str__(self):
        return f"Grant {self.id} ({self.state})"

    @property
    def expired(self) -> bool:
        return self.expires <= timezone.now()
