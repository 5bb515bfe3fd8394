import json

import pytest
from cryptography.hazmat.primitives.asymmetric import ec, ed25519, rsa
from jwt.algorithms import ECAlgorithm, OKPAlgorithm, RSAAlgorithm

from clients.models import Client
from core.schemas import ClientSchema, GrantRequestSchema
from gnapserver.container import ServiceContainer

ISSUER = "https://auth.test"


def public_jwk(private_key, kid: str) -> dict:
    """
    The public half of a cryptography private key, as a JWK dict.
    """
    algorithm = {
        rsa.RSAPrivateKey: RSAAlgorithm,
        ec.EllipticCurvePrivateKey: ECAlgorithm,
        ed25519.Ed25519PrivateKey: OKPAlgorithm,
    }
    for key_class, algorithm_class in algorithm.items():
        if isinstance(private_key, key_class):
            jwk = json.loads(algorithm_class.to_jwk(private_key.public_key()))
            break
    else:
        raise ValueError(f"Unknown key type {type(private_key)}")
    jwk["kid"] = kid
    return jwk


@pytest.fixture
def jwk_for():
    """
    Turns a private key into the public JWK a client would send
    """
    return public_jwk


@pytest.fixture(scope="session")
def rsa_key():
    """
    Testing-only RSA keypair
    """
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def ec_key():
    return ec.generate_private_key(ec.SECP256R1())


@pytest.fixture(scope="session")
def ed25519_key():
    return ed25519.Ed25519PrivateKey.generate()


@pytest.fixture
def services() -> ServiceContainer:
    """
    A fresh set of services, with a fresh signing key, on test settings.
    """
    return ServiceContainer(
        issuer=ISSUER,
        token_lifetime=3600,
        interaction_timeout=300,
    )


@pytest.fixture(autouse=True)
def _test_services(services, monkeypatch):
    # Views fetch services from the core app; point them at the test ones
    monkeypatch.setattr("api.views.grants.get_container", lambda: services)
    monkeypatch.setattr("api.views.interactions.get_container", lambda: services)
    monkeypatch.setattr("api.views.tokens.get_container", lambda: services)
    monkeypatch.setattr("api.views.clients.get_container", lambda: services)


@pytest.fixture
def client_candidate(rsa_key) -> ClientSchema:
    return ClientSchema.model_validate(
        {
            "instance_id": "test-instance",
            "key": {
                "proof": "jws",
                "kid": "test-key",
                "jwk": public_jwk(rsa_key, "test-key"),
            },
            "display": {"name": "Test Client", "uri": "https://client.test"},
        }
    )


@pytest.fixture
def registered_client(services, client_candidate) -> Client:
    return services.clients.register_client(client_candidate)


@pytest.fixture
def grant_request() -> GrantRequestSchema:
    """
    An anonymous request for two resources on two servers, via redirect.
    """
    return GrantRequestSchema.model_validate(
        {
            "access": [
                {
                    "type": "photo-api",
                    "actions": ["read", "write"],
                    "resource_server": "https://photos.test",
                },
                {
                    "type": "calendar",
                    "actions": ["read"],
                    "locations": ["https://calendar.test/me"],
                },
            ],
            "interact": {
                "redirect": {"uri": "https://client.test/return", "nonce": "abc123"},
                "finish": "sha-256",
            },
            "state": {"opaque": "value"},
        }
    )


@pytest.fixture
def grant(services, grant_request):
    """
    A freshly created, pending grant
    """
    response = services.grants.process_grant_request(grant_request)
    return services.grants.find_by_id(response.instance_id)


@pytest.fixture
def approved_grant(services, grant):
    services.grants.update_grant_status(grant.id, "approved")
    grant.refresh_from_db()
    return grant
