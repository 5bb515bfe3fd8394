import base64
import logging
import random
from datetime import timedelta

from cryptography.hazmat.primitives import hashes
from django.db import transaction
from django.utils import timezone

from core.schemas import (
    FinishSchema,
    InteractRequestSchema,
    InteractResponseSchema,
    UserCodeSchema,
)
from interactions.models import Interaction
from interactions.modes import AppMode, RedirectMode, UserCodeMode, UserCodeUriMode

logger = logging.getLogger(__name__)

HASH_ALGORITHMS = {
    "sha-256": hashes.SHA256,
    "sha-512": hashes.SHA512,
    "sha3-256": hashes.SHA3_256,
    "sha3-512": hashes.SHA3_512,
}


def generate_user_code() -> str:
    """
    A six digit code for the user to type in. It is only a convenience;
    the nonce and expiry are what actually protect the interaction.
    """
    return f"{random.randint(0, 999999):06d}"


def compute_interaction_hash(interaction: Interaction, grant_endpoint: str) -> str:
    """
    The value the client checks on the finish redirect: a digest over the
    client's nonce, the interaction reference and the grant endpoint,
    newline-separated and base64url encoded without padding.
    """
    algorithm = HASH_ALGORITHMS[interaction.hash_method or "sha-256"]
    digest = hashes.Hash(algorithm())
    digest.update(
        "\n".join([interaction.nonce or "", interaction.id, grant_endpoint]).encode(
            "utf8"
        )
    )
    return base64.urlsafe_b64encode(digest.finalize()).decode("ascii").rstrip("=")


class InteractionService:
    """
    Creates the interactions a grant asked for and checks them when the
    resource owner comes back.
    """

    def __init__(self, issuer: str, interaction_timeout: int):
        self.issuer = issuer
        self.interaction_timeout = interaction_timeout

    def interaction_url(self, kind: str, grant_id: str) -> str:
        return f"{self.issuer}/interact/{kind}/{grant_id}"

    def finish_url(self, grant_id: str) -> str:
        return f"{self.issuer}/interact/finish/{grant_id}"

    @transaction.atomic
    def create_interactions(
        self, interact_request: InteractRequestSchema, grant
    ) -> list[Interaction]:
        """
        Creates one interaction per requested mode. They share one expiry
        and finish hash method, and the user code modes share one code.
        """
        expires = timezone.now() + timedelta(seconds=self.interaction_timeout)
        batch_user_code = generate_user_code()
        interactions = []
        for mode in interact_request.modes():
            nonce = None
            user_code = None
            match mode:
                case RedirectMode(nonce=nonce):
                    kind = Interaction.Types.redirect
                    url = self.interaction_url("redirect", grant.id)
                case AppMode(nonce=nonce):
                    kind = Interaction.Types.app
                    url = self.interaction_url("app", grant.id)
                case UserCodeMode():
                    kind = Interaction.Types.user_code
                    url = self.interaction_url("user-code", grant.id)
                    user_code = batch_user_code
                case UserCodeUriMode(uri=uri):
                    kind = Interaction.Types.user_code_uri
                    url = uri
                    user_code = batch_user_code
            interactions.append(
                Interaction.objects.create(
                    grant=grant,
                    type=kind,
                    url=url,
                    nonce=nonce,
                    hash_method=interact_request.finish,
                    user_code=user_code,
                    expires=expires,
                )
            )
        logger.debug(
            "Created %s interactions for grant %s", len(interactions), grant.id
        )
        return interactions

    def build_interact_response(
        self, interactions: list[Interaction]
    ) -> InteractResponseSchema:
        """
        Projects the interactions into the response's interact section,
        with at most one finish descriptor.
        """
        response = InteractResponseSchema()
        for interaction in interactions:
            match interaction.type:
                case Interaction.Types.redirect:
                    response.redirect = interaction.url
                case Interaction.Types.app:
                    response.app = interaction.url
                case Interaction.Types.user_code | Interaction.Types.user_code_uri:
                    response.user_code = UserCodeSchema(
                        code=interaction.user_code or generate_user_code(),
                        uri=interaction.url,
                    )
            if interaction.hash_method and response.finish is None:
                response.finish = FinishSchema(
                    uri=self.finish_url(interaction.grant_id),
                    method=interaction.hash_method,
                )
        return response

    def validate_interaction(
        self, grant_id: str, interaction_id: str, nonce: str | None = None
    ) -> bool:
        """
        Returns if the interaction exists, belongs to the grant, has not
        expired, and (when it has a stored nonce) the nonce matches.
        """
        interaction = Interaction.objects.filter(pk=interaction_id).first()
        if interaction is None:
            return False
        if interaction.grant_id != grant_id:
            return False
        if interaction.expired:
            return False
        if interaction.nonce and interaction.nonce != nonce:
            return False
        return True

    def find_by_id(self, interaction_id: str) -> Interaction | None:
        return Interaction.objects.filter(pk=interaction_id).first()

    def find_active_interactions(self, grant_id: str) -> list[Interaction]:
        return list(
            Interaction.objects.filter(grant_id=grant_id, expires__gt=timezone.now())
        )

    @transaction.atomic
    def cleanup_expired_interactions(self) -> int:
        """
        Deletes every expired interaction, whatever state its grant is in.
        """
        deleted, _ = Interaction.objects.filter(expires__lte=timezone.now()).delete()
        return deleted
