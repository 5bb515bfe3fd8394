import dataclasses

CONTINUATION = "continuation"


@dataclasses.dataclass(frozen=True)
class ContinuationClaims:
    sub: str
    iss: str
    iat: int
    exp: int
    token_type: str = CONTINUATION

    def to_payload(self) -> dict:
        return dataclasses.asdict(self)

    @classmethod
    def from_payload(cls, payload: dict) -> "ContinuationClaims":
        """
        Raises KeyError if a claim is missing.
        """
        return cls(
            sub=payload["sub"],
            iss=payload["iss"],
            iat=payload["iat"],
            exp=payload["exp"],
            token_type=payload["token_type"],
        )


@dataclasses.dataclass(frozen=True)
class AccessClaim:
    """
    One resource's entry in an access token's "access" claim.
    """

    type: str
    actions: list[str] | None = None
    locations: list[str] | None = None
    datatypes: list[str] | None = None

    @classmethod
    def from_resource(cls, resource) -> "AccessClaim":
        return cls(
            type=resource.type,
            actions=list(resource.actions) if resource.actions else None,
            locations=list(resource.locations) if resource.locations else None,
            datatypes=list(resource.datatypes) if resource.datatypes else None,
        )

    def to_payload(self) -> dict:
        return {
            key: value
            for key, value in dataclasses.asdict(self).items()
            if value is not None
        }


@dataclasses.dataclass(frozen=True)
class AccessTokenClaims:
    grant_id: str
    aud: str
    iss: str
    iat: int
    exp: int
    access: list[AccessClaim]
    client_id: str | None = None
    sub: str | None = None

    def to_payload(self) -> dict:
        payload = {
            "grant_id": self.grant_id,
            "access": [claim.to_payload() for claim in self.access],
            "aud": self.aud,
            "iss": self.iss,
            "iat": self.iat,
            "exp": self.exp,
        }
        # Only bound once the grant has a client / subject
        if self.client_id:
            payload["client_id"] = self.client_id
        if self.sub:
            payload["sub"] = self.sub
        return payload
