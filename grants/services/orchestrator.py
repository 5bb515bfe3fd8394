import dataclasses
import logging
from datetime import timedelta
from urllib.parse import urlencode, urlparse, urlunparse

from django.db import transaction
from django.utils import timezone

from clients.services.registry import ClientRegistry
from core.exceptions import (
    ClientAuthenticationError,
    GrantExpiredError,
    GrantNotFoundError,
    InvalidContinuationError,
    InvalidInteractionError,
    InvalidRequestError,
    UserDeniedError,
)
from core.schemas import (
    AccessTokenSchema,
    ContinueSchema,
    GrantRequestSchema,
    GrantResponseSchema,
)
from grants.models import GrantRequest, GrantStates
from interactions.models import Interaction
from interactions.services.engine import InteractionService, compute_interaction_hash
from resources.services.ledger import ResourceLedger
from stator.graph import State
from tokens.models import AccessToken
from tokens.services.engine import TokenService

logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class FinishOutcome:
    """
    What happened when the resource owner approved a grant. redirect_uri is
    only set for grants that asked to have the user sent back.
    """

    grant: GrantRequest
    interact_ref: str
    redirect_uri: str | None = None
    hash: str | None = None


def with_query(uri: str, **params) -> str:
    """
    Adds query parameters to a URI, keeping any it already has.
    """
    parts = list(urlparse(uri))
    extra = urlencode({key: value for key, value in params.items() if value})
    parts[4] = f"{parts[4]}&{extra}" if parts[4] else extra
    return urlunparse(parts)


class GrantService:
    """
    Drives grants through their lifecycle: creation, continuation polls,
    interaction outcomes, revocation and expiry.
    """

    # Seconds we suggest clients wait between continuation polls
    continue_wait = 5

    def __init__(
        self,
        clients: ClientRegistry,
        interactions: InteractionService,
        tokens: TokenService,
        issuer: str,
        token_lifetime: int,
    ):
        self.clients = clients
        self.interactions = interactions
        self.tokens = tokens
        self.issuer = issuer
        self.token_lifetime = token_lifetime

    @property
    def grant_endpoint(self) -> str:
        return f"{self.issuer}/grant"

    def find_by_id(self, grant_id: str) -> GrantRequest | None:
        return (
            GrantRequest.objects.select_related("client").filter(pk=grant_id).first()
        )

    def lock(self, grant_id: str) -> GrantRequest:
        """
        Loads the grant for writing. Only call inside a transaction.
        """
        grant = GrantRequest.objects.select_for_update().filter(pk=grant_id).first()
        if grant is None:
            raise GrantNotFoundError(f"No grant {grant_id}")
        return grant

    @transaction.atomic
    def process_grant_request(
        self,
        request: GrantRequestSchema,
        signed_assertion: str | None = None,
    ) -> GrantResponseSchema:
        """
        Turns a client's initial request into a pending grant, with its
        resources and any interactions it asked for.
        """
        client = None
        if request.client is not None:
            if not self.clients.authenticate_client(request.client, signed_assertion):
                raise ClientAuthenticationError(
                    f"Client key id {request.client.key_id} failed authentication"
                )
            client = self.clients.register_client(request.client)
        redirect_uri = None
        if request.interact and request.interact.redirect:
            redirect_uri = request.interact.redirect.uri
        grant = GrantRequest.objects.create(
            client=client,
            redirect_uri=redirect_uri,
            client_state=request.state,
            expires=timezone.now() + timedelta(seconds=self.token_lifetime),
        )
        ResourceLedger.record(grant, request.access)
        interactions: list[Interaction] = []
        if request.interact and request.interact.modes():
            interactions = self.interactions.create_interactions(
                request.interact, grant
            )
        logger.info(
            "Created grant %s for client %s with %s resources",
            grant.id,
            client.id if client else None,
            len(request.access),
        )
        return self.build_response(grant, interactions)

    def process_continuation(
        self, grant_id: str, token: str | None
    ) -> GrantResponseSchema:
        """
        Answers a continuation poll with the grant's current state. A grant
        found to be past its expiry is marked expired before we refuse.
        Only approved grants carry access tokens; pending, denied and
        revoked ones get the continuation details alone.
        """
        if not self.tokens.validate_continuation_token(grant_id, token):
            raise InvalidContinuationError(f"Bad continuation token for {grant_id}")
        with transaction.atomic():
            grant = self.lock(grant_id)
            expired = grant.state == GrantStates.expired or grant.expired
            if expired:
                # Persist it now, as the error below must not roll it back.
                # Revoked grants stay revoked.
                if GrantStates.can_transition(grant.state, GrantStates.expired):
                    grant.transition_perform(GrantStates.expired)
            else:
                response = self.build_response(
                    grant, self.interactions.find_active_interactions(grant.id)
                )
        if expired:
            logger.info("Continuation of expired grant %s", grant_id)
            raise GrantExpiredError(f"Grant {grant_id} has expired")
        return response

    def build_response(
        self, grant: GrantRequest, interactions: list[Interaction]
    ) -> GrantResponseSchema:
        response = GrantResponseSchema(
            instance_id=grant.id,
            continue_=ContinueSchema(
                uri=f"/grant/{grant.id}",
                access_token=self.tokens.generate_continuation_token(grant),
                wait=self.continue_wait,
            ),
        )
        if interactions:
            response.interact = self.interactions.build_interact_response(
                interactions
            )
        if grant.state == GrantStates.approved:
            tokens = self.issue_tokens(grant)
            if tokens:
                response.access_token = [
                    AccessTokenSchema.from_access_token(token) for token in tokens
                ]
        return response

    def issue_tokens(self, grant: GrantRequest) -> list[AccessToken]:
        """
        Mints the grant's access tokens the first time it's asked, and hands
        back the still-live ones from then on. The tokens_issued marker is
        claimed with a versioned write, so racing polls can't both mint.
        """
        if grant.state != GrantStates.approved:
            raise InvalidRequestError(f"Grant {grant.id} is not approved")
        if grant.tokens_issued is None and grant.versioned_update(
            tokens_issued=timezone.now()
        ):
            return self.tokens.generate_access_tokens(grant)
        return self.tokens.find_active_tokens(grant)

    @transaction.atomic
    def update_grant_status(
        self, grant_id: str, new_status: State | str
    ) -> GrantRequest:
        """
        Moves the grant to the given status. Moves the state graph doesn't
        allow raise InvalidTransitionError; staying put is a no-op.
        """
        try:
            target = GrantStates.get(new_status)
        except (KeyError, AttributeError):
            raise InvalidRequestError(f"Unknown grant status {new_status!r}")
        grant = self.lock(grant_id)
        if grant.transition_perform(target):
            logger.info("Grant %s is now %s", grant_id, target)
        return grant

    def finish_interaction(
        self,
        grant_id: str,
        interaction_id: str,
        approved: bool,
        nonce: str | None = None,
        user_id: str | None = None,
    ) -> FinishOutcome:
        """
        Records the resource owner's decision from an interaction. Denial
        raises UserDeniedError once it is saved; approval returns where (if
        anywhere) to send the user, carrying the finish hash.
        """
        with transaction.atomic():
            grant = self.lock(grant_id)
            if not self.interactions.validate_interaction(
                grant_id, interaction_id, nonce
            ):
                raise InvalidInteractionError(
                    f"Interaction {interaction_id} is not valid for {grant_id}"
                )
            fields = {"user_id": user_id} if user_id else {}
            target = GrantStates.approved if approved else GrantStates.denied
            grant.transition_perform(target, **fields)
            interaction = self.interactions.find_by_id(interaction_id)
        logger.info("Grant %s was %s through interaction", grant_id, target)
        if not approved:
            raise UserDeniedError(f"Grant {grant_id} denied by the resource owner")
        if not grant.redirect_uri:
            return FinishOutcome(grant=grant, interact_ref=interaction.id)
        interaction_hash = compute_interaction_hash(interaction, self.grant_endpoint)
        return FinishOutcome(
            grant=grant,
            interact_ref=interaction.id,
            redirect_uri=with_query(
                grant.redirect_uri,
                hash=interaction_hash,
                interact_ref=interaction.id,
            ),
            hash=interaction_hash,
        )

    def revoke_grant(self, grant_id: str, token: str | None) -> GrantRequest:
        """
        Revokes the grant on behalf of its client, and deletes its tokens.
        """
        if not self.tokens.validate_continuation_token(grant_id, token):
            raise InvalidContinuationError(f"Bad continuation token for {grant_id}")
        with transaction.atomic():
            grant = self.lock(grant_id)
            grant.transition_perform(GrantStates.revoked)
            deleted = self.tokens.revoke_grant_tokens(grant)
        logger.info("Revoked grant %s and %s access tokens", grant_id, deleted)
        return grant

    @transaction.atomic
    def cleanup_expired_grants(self) -> int:
        """
        Marks every grant past its expiry as expired in one batch. Grants
        that are already expired or revoked are left alone.
        """
        return GrantRequest.transition_perform_queryset(
            GrantRequest.objects.filter(expires__lte=timezone.now()),
            GrantStates.expired,
        )
