import logging
from datetime import timedelta

from django.db import transaction
from django.utils import timezone
from jwt.exceptions import PyJWTError

from core.schemas import AccessSchema, IntrospectionSchema
from resources.services.ledger import ResourceLedger
from tokens.claims import (
    CONTINUATION,
    AccessClaim,
    AccessTokenClaims,
    ContinuationClaims,
)
from tokens.models import AccessToken
from tokens.signing import SigningKey

logger = logging.getLogger(__name__)


class TokenService:
    """
    Mints, checks and revokes continuation and access tokens.
    """

    def __init__(self, signing_key: SigningKey, issuer: str, token_lifetime: int):
        self.signing_key = signing_key
        self.issuer = issuer
        self.token_lifetime = token_lifetime

    def generate_continuation_token(self, grant) -> str:
        now = int(timezone.now().timestamp())
        claims = ContinuationClaims(
            sub=grant.id,
            iss=self.issuer,
            iat=now,
            exp=now + self.token_lifetime,
        )
        return self.signing_key.sign(claims.to_payload())

    def validate_continuation_token(self, grant_id: str, token: str | None) -> bool:
        """
        Returns if the token is a current continuation token we issued for
        this grant. Anything unparseable counts as invalid.
        """
        if not token:
            return False
        try:
            payload = self.signing_key.verify(
                token,
                issuer=self.issuer,
                options={"require": ["exp", "iat", "sub"]},
            )
            claims = ContinuationClaims.from_payload(payload)
        except (PyJWTError, KeyError, TypeError) as e:
            logger.debug("Rejected continuation token for grant %s: %s", grant_id, e)
            return False
        return claims.sub == grant_id and claims.token_type == CONTINUATION

    @transaction.atomic
    def generate_access_tokens(self, grant) -> list[AccessToken]:
        """
        Mints one access token per resource server the grant's resources
        are spread across. A grant with no resources gets no tokens.
        """
        now = timezone.now()
        issued_at = int(now.timestamp())
        tokens = []
        partitions = ResourceLedger.partition(ResourceLedger.for_grant(grant))
        for server_key, resources in partitions.items():
            claims = AccessTokenClaims(
                grant_id=grant.id,
                aud=server_key,
                iss=self.issuer,
                iat=issued_at,
                exp=issued_at + self.token_lifetime,
                access=[AccessClaim.from_resource(resource) for resource in resources],
                client_id=grant.client_id,
                sub=grant.user_id,
            )
            token = AccessToken.objects.create(
                grant=grant,
                value=self.signing_key.sign(claims.to_payload()),
                resource_server=server_key,
                expires=now + timedelta(seconds=self.token_lifetime),
            )
            token.covered_resources = resources
            tokens.append(token)
        logger.info("Issued %s access tokens for grant %s", len(tokens), grant.id)
        return tokens

    def find_active_tokens(self, grant) -> list[AccessToken]:
        """
        The grant's unexpired tokens, with their covered resources filled in.
        """
        tokens = list(
            AccessToken.objects.filter(grant=grant, expires__gt=timezone.now())
        )
        partitions = ResourceLedger.partition(ResourceLedger.for_grant(grant))
        for token in tokens:
            token.covered_resources = partitions.get(token.resource_server, [])
        return tokens

    def introspect_token(self, value: str) -> IntrospectionSchema:
        """
        Describes the token if it's live. Unknown and expired tokens just
        come back inactive, with nothing else said about them.
        """
        token = (
            AccessToken.objects.select_related("grant").filter(value=value).first()
        )
        if token is None or token.expired:
            return IntrospectionSchema(active=False)
        resources = ResourceLedger.covered_by(token.grant, token.resource_server)
        return IntrospectionSchema(
            active=True,
            grant_id=token.grant_id,
            client_id=token.grant.client_id,
            iat=int(token.created.timestamp()),
            expires_in=token.expires_in,
            access=[AccessSchema.from_resource(resource) for resource in resources],
        )

    @transaction.atomic
    def revoke_token(self, value: str) -> bool:
        deleted, _ = AccessToken.objects.filter(value=value).delete()
        if deleted:
            logger.info("Revoked an access token")
        return bool(deleted)

    @transaction.atomic
    def revoke_grant_tokens(self, grant) -> int:
        deleted, _ = AccessToken.objects.filter(grant=grant).delete()
        return deleted

    @transaction.atomic
    def cleanup_expired_tokens(self) -> int:
        deleted, _ = AccessToken.objects.filter(expires__lte=timezone.now()).delete()
        return deleted
