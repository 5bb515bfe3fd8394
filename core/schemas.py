from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from interactions.modes import (
    AppMode,
    InteractionMode,
    RedirectMode,
    UserCodeMode,
    UserCodeUriMode,
)

# Finish callback hash methods we know how to compute
HASH_METHODS = ("sha-256", "sha-512", "sha3-256", "sha3-512")


class Schema(BaseModel):
    model_config = ConfigDict(populate_by_name=True, from_attributes=True)

    def to_json(self) -> dict:
        """
        The wire form: aliased names, and empty fields left out.
        """
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# Request side


class KeySchema(Schema):
    proof: str | None = None
    jwk: dict[str, Any] | None = None
    kid: str | None = None


class DisplaySchema(Schema):
    name: str | None = None
    uri: str | None = None
    logo_uri: str | None = None


class ClientSchema(Schema):
    instance_id: str | None = None
    key: KeySchema | None = None
    display: DisplaySchema | None = None

    @property
    def key_id(self) -> str | None:
        return self.key.kid if self.key else None


class AccessSchema(Schema):
    type: str
    actions: list[str] | None = None
    locations: list[str] | None = None
    datatypes: list[str] | None = None
    resource_server: str | None = None

    @field_validator("type")
    @classmethod
    def type_present(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("type must not be empty")
        return value

    @field_validator("actions", "locations", "datatypes")
    @classmethod
    def no_delimiters(cls, value: list[str] | None) -> list[str] | None:
        # These are stored comma-joined
        for item in value or []:
            if "," in item:
                raise ValueError(f"{item!r} may not contain a comma")
        return value

    @classmethod
    def from_resource(cls, resource) -> "AccessSchema":
        return cls(
            type=resource.type,
            actions=resource.actions,
            locations=resource.locations,
            datatypes=resource.datatypes,
            resource_server=resource.resource_server,
        )


class RedirectSchema(Schema):
    uri: str
    nonce: str | None = None


class AppSchema(Schema):
    uri: str | None = None
    nonce: str | None = None


class InteractRequestSchema(Schema):
    redirect: RedirectSchema | None = None
    app: AppSchema | None = None
    user_code: bool = False
    user_code_uri: str | None = None
    finish: str | None = None

    @field_validator("finish")
    @classmethod
    def known_hash_method(cls, value: str | None) -> str | None:
        if value is not None and value not in HASH_METHODS:
            raise ValueError(f"Unknown finish hash method {value!r}")
        return value

    def modes(self) -> list[InteractionMode]:
        """
        The requested interaction modes, in a fixed order.
        """
        modes: list[InteractionMode] = []
        if self.redirect:
            modes.append(RedirectMode(uri=self.redirect.uri, nonce=self.redirect.nonce))
        if self.app:
            modes.append(AppMode(uri=self.app.uri, nonce=self.app.nonce))
        if self.user_code:
            modes.append(UserCodeMode())
        if self.user_code_uri:
            modes.append(UserCodeUriMode(uri=self.user_code_uri))
        return modes


class SubjectRequestSchema(Schema):
    formats: list[str] | None = None
    assertion_formats: list[str] | None = None


class GrantRequestSchema(Schema):
    client: ClientSchema | None = None
    access: list[AccessSchema] = Field(default_factory=list)
    interact: InteractRequestSchema | None = None
    subject: SubjectRequestSchema | None = None
    capabilities: list[str] | None = None
    state: Any = None


class InteractionFinishSchema(Schema):
    interaction_id: str
    approved: bool
    nonce: str | None = None


class TokenRequestSchema(Schema):
    token: str


# Response side


class ContinueSchema(Schema):
    uri: str
    access_token: str
    wait: int | None = None


class UserCodeSchema(Schema):
    code: str
    uri: str | None = None


class FinishSchema(Schema):
    uri: str
    method: str


class InteractResponseSchema(Schema):
    redirect: str | None = None
    app: str | None = None
    user_code: UserCodeSchema | None = None
    finish: FinishSchema | None = None


class AccessTokenSchema(Schema):
    value: str
    label: str | None = None
    access: list[AccessSchema] = Field(default_factory=list)
    expires_in: int | None = None

    @classmethod
    def from_access_token(cls, token) -> "AccessTokenSchema":
        return cls(
            value=token.value,
            label=token.label,
            access=[
                AccessSchema.from_resource(resource)
                for resource in token.covered_resources or []
            ],
            expires_in=token.expires_in,
        )


class GrantResponseSchema(Schema):
    instance_id: str
    continue_: ContinueSchema = Field(alias="continue")
    interact: InteractResponseSchema | None = None
    access_token: list[AccessTokenSchema] | None = None


class IntrospectionSchema(Schema):
    active: bool
    grant_id: str | None = None
    client_id: str | None = None
    iat: int | None = None
    expires_in: int | None = None
    access: list[AccessSchema] | None = None
