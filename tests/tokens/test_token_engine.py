from datetime import timedelta
from types import SimpleNamespace

import jwt
import pytest
from django.utils import timezone

from tokens.models import AccessToken
from tokens.services.engine import TokenService
from tokens.signing import SigningKey


def test_signing_key():
    key = SigningKey.generate()
    token = key.sign({"sub": "x"})
    assert key.verify(token) == {"sub": "x"}
    with pytest.raises(jwt.InvalidSignatureError):
        SigningKey.generate().verify(token)
    with pytest.raises(ValueError):
        SigningKey(b"short")
    assert "secret" not in repr(key)


@pytest.mark.django_db
def test_continuation_token(services, grant, grant_request):
    token = services.tokens.generate_continuation_token(grant)
    assert services.tokens.validate_continuation_token(grant.id, token)
    # Another grant's id
    other = services.grants.process_grant_request(grant_request)
    assert not services.tokens.validate_continuation_token(other.instance_id, token)
    # Garbage and nothing
    assert not services.tokens.validate_continuation_token(grant.id, "garbage")
    assert not services.tokens.validate_continuation_token(grant.id, None)


@pytest.mark.django_db
def test_continuation_token_claims(services, grant):
    token = services.tokens.generate_continuation_token(grant)
    claims = services.signing_key.verify(token)
    assert claims["sub"] == grant.id
    assert claims["iss"] == "https://auth.test"
    assert claims["token_type"] == "continuation"
    assert claims["exp"] - claims["iat"] == 3600


@pytest.mark.django_db
def test_continuation_token_rejections(services, grant):
    """
    Tokens from another key, another issuer, of another type, or expired
    are all invalid.
    """
    now = int(timezone.now().timestamp())
    good_claims = {
        "sub": grant.id,
        "iss": "https://auth.test",
        "iat": now,
        "exp": now + 60,
        "token_type": "continuation",
    }
    key = services.signing_key
    validate = services.tokens.validate_continuation_token
    assert validate(grant.id, key.sign(good_claims))
    assert not validate(grant.id, SigningKey.generate().sign(good_claims))
    assert not validate(grant.id, key.sign({**good_claims, "iss": "https://evil.test"}))
    assert not validate(grant.id, key.sign({**good_claims, "token_type": "access"}))
    assert not validate(grant.id, key.sign({**good_claims, "exp": now - 120}))
    without_type = dict(good_claims)
    del without_type["token_type"]
    assert not validate(grant.id, key.sign(without_type))


@pytest.mark.django_db
def test_access_tokens_per_server(services, approved_grant):
    """
    Two resource servers give two tokens, each covering its own resources.
    """
    tokens = services.tokens.generate_access_tokens(approved_grant)
    assert len(tokens) == 2
    by_label = {token.label: token for token in tokens}
    assert set(by_label) == {"https://photos.test", "default"}
    assert [r.type for r in by_label["https://photos.test"].covered_resources] == [
        "photo-api"
    ]
    assert [r.type for r in by_label["default"].covered_resources] == ["calendar"]
    claims = jwt.decode(
        by_label["https://photos.test"].value,
        options={"verify_signature": False},
    )
    assert claims["aud"] == "https://photos.test"
    assert claims["grant_id"] == approved_grant.id
    assert claims["access"] == [{"type": "photo-api", "actions": ["read", "write"]}]
    assert "client_id" not in claims
    assert "sub" not in claims
    assert AccessToken.objects.filter(grant=approved_grant).count() == 2
    assert {t.access_type for t in tokens} == {"bearer"}


@pytest.mark.django_db
def test_access_tokens_no_resources(services, grant):
    grant.resources.all().delete()
    assert services.tokens.generate_access_tokens(grant) == []


@pytest.mark.django_db
def test_introspection(services, approved_grant):
    tokens = services.tokens.generate_access_tokens(approved_grant)
    photos = next(t for t in tokens if t.label == "https://photos.test")
    result = services.tokens.introspect_token(photos.value).to_json()
    assert result["active"] is True
    assert result["grant_id"] == approved_grant.id
    assert "client_id" not in result
    assert result["iat"] == int(photos.created.timestamp())
    assert 0 < result["expires_in"] <= 3600
    assert result["access"] == [
        {
            "type": "photo-api",
            "actions": ["read", "write"],
            "resource_server": "https://photos.test",
        }
    ]


@pytest.mark.django_db
def test_introspection_inactive(services, approved_grant):
    """
    Unknown and expired tokens say nothing beyond being inactive.
    """
    assert services.tokens.introspect_token("unknown-value").to_json() == {
        "active": False
    }
    token = services.tokens.generate_access_tokens(approved_grant)[0]
    AccessToken.objects.filter(pk=token.pk).update(
        expires=timezone.now() - timedelta(seconds=1)
    )
    assert services.tokens.introspect_token(token.value).to_json() == {"active": False}


@pytest.mark.django_db
def test_introspection_unrestricted_token(services, approved_grant):
    """
    A token with no resource server covers everything on its grant.
    """
    token = AccessToken.objects.create(
        grant=approved_grant,
        value="unrestricted",
        expires=timezone.now() + timedelta(seconds=60),
    )
    result = services.tokens.introspect_token(token.value)
    assert len(result.access) == 2


@pytest.mark.django_db
def test_revoke(services, approved_grant):
    token = services.tokens.generate_access_tokens(approved_grant)[0]
    assert services.tokens.revoke_token(token.value) is True
    assert services.tokens.revoke_token(token.value) is False
    assert services.tokens.introspect_token(token.value).active is False


@pytest.mark.django_db
def test_cleanup_and_active(services, approved_grant):
    tokens = services.tokens.generate_access_tokens(approved_grant)
    AccessToken.objects.filter(pk=tokens[0].pk).update(
        expires=timezone.now() - timedelta(seconds=1)
    )
    active = services.tokens.find_active_tokens(approved_grant)
    assert [t.pk for t in active] == [tokens[1].pk]
    assert active[0].covered_resources
    assert services.tokens.cleanup_expired_tokens() == 1
    assert services.tokens.cleanup_expired_tokens() == 0


def test_services_share_key():
    """
    Tokens signed by one service instance verify with another that was
    given the same key, and not with one that wasn't.
    """
    key = SigningKey.generate()
    grant = SimpleNamespace(id="grant-1")
    token = TokenService(key, "https://auth.test", 60).generate_continuation_token(grant)
    same = TokenService(key, "https://auth.test", 60)
    other = TokenService(SigningKey.generate(), "https://auth.test", 60)
    assert same.validate_continuation_token("grant-1", token)
    assert not other.validate_continuation_token("grant-1", token)
