import json
import logging

from django.db import transaction

from clients.models import Client
from clients.verification import JwsVerifier, VerificationError
from core.exceptions import ClientAuthenticationError

logger = logging.getLogger(__name__)


class ClientRegistry:
    """
    High-level helper methods for finding, registering and authenticating
    client instances.
    """

    def find_by_id(self, client_id: str) -> Client | None:
        return Client.objects.filter(pk=client_id).first()

    def find_by_instance_id(self, instance_id: str) -> Client | None:
        if not instance_id:
            return None
        return Client.objects.filter(instance_id=instance_id).first()

    def find_by_key_id(self, key_id: str) -> Client | None:
        if not key_id:
            return None
        return Client.objects.filter(key_id=key_id).first()

    @transaction.atomic
    def register_client(self, candidate) -> Client:
        """
        Creates or updates the client described by the candidate (a
        ClientSchema). Matches on instance id first, then key id, since the
        same client re-sends its key material with every request. A
        candidate whose instance id and key id belong to two different
        clients is refused.
        """
        key_id = candidate.key_id
        client = None
        if candidate.instance_id:
            client = (
                Client.objects.select_for_update()
                .filter(instance_id=candidate.instance_id)
                .first()
            )
        if key_id:
            key_owner = Client.objects.select_for_update().filter(key_id=key_id).first()
            if client is None:
                client = key_owner
            elif key_owner is not None and key_owner.pk != client.pk:
                raise ClientAuthenticationError(
                    f"Key id {key_id} belongs to a different client instance"
                )
        if client is None:
            client = Client(instance_id=candidate.instance_id)
            logger.info("Registering new client with key id %s", key_id)
        client.key_id = key_id
        if candidate.key and candidate.key.jwk is not None:
            client.key_jwk = json.dumps(candidate.key.jwk)
        if candidate.display:
            client.display_name = candidate.display.name
            client.display_uri = candidate.display.uri
            client.logo_uri = candidate.display.logo_uri
        client.save()
        return client

    def authenticate_client(self, candidate, signed_assertion: str | None = None) -> bool:
        """
        Returns if the candidate client is who it says it is.

        With a signed assertion, it must be a JWS made by the stored key for
        the candidate's key id. Without one, all we can check is that a
        client with that key id exists at all; that is deliberately weaker.
        """
        key_id = candidate.key_id
        if not key_id:
            return False
        client = self.find_by_key_id(key_id)
        if signed_assertion is None:
            return client is not None
        if client is None or not client.key_jwk:
            logger.info("No stored key for client key id %s", key_id)
            return False
        try:
            JwsVerifier.verify(signed_assertion, client.key_jwk, key_id)
        except VerificationError as e:
            logger.info("Client %s failed verification: %s", client.id, e)
            return False
        return True
