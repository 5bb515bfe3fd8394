from datetime import timedelta
from urllib.parse import parse_qs, urlparse

import jwt
import pytest
from django.utils import timezone

from grants.models import GrantRequest, GrantStates

GRANT_BODY = {
    "access": [
        {"type": "photo-api", "actions": ["read"], "resource_server": "https://photos.test"}
    ],
    "interact": {
        "redirect": {"uri": "https://client.test/return", "nonce": "abc123"},
        "finish": "sha-256",
    },
}


def start_grant(client, body=None) -> dict:
    response = client.post("/grant", body or GRANT_BODY, content_type="application/json")
    assert response.status_code == 201
    return response.json()


def auth(token: str) -> dict:
    return {"HTTP_AUTHORIZATION": f"GNAP {token}"}


@pytest.mark.django_db
def test_grant_request(client):
    response = client.post("/grant", GRANT_BODY, content_type="application/json")
    assert response.status_code == 201
    assert response.headers["Cache-Control"] == "no-store, max-age=0"
    data = response.json()
    assert data["continue"]["uri"] == f"/grant/{data['instance_id']}"
    assert data["interact"]["finish"]["method"] == "sha-256"
    assert "access_token" not in data


@pytest.mark.django_db
def test_grant_request_invalid(client):
    response = client.post(
        "/grant", {"access": [{"actions": ["read"]}]}, content_type="application/json"
    )
    assert response.status_code == 400
    assert response.json() == {"error": "invalid_request"}
    response = client.post("/grant", "{nope", content_type="application/json")
    assert response.status_code == 400
    response = client.post("/grant", "not.a.jws", content_type="application/jose")
    assert response.status_code == 400


@pytest.mark.django_db
def test_grant_request_unknown_client(client, client_candidate):
    response = client.post(
        "/grant",
        {**GRANT_BODY, "client": client_candidate.to_json()},
        content_type="application/json",
    )
    assert response.status_code == 401
    assert response.json() == {"error": "invalid_client"}


@pytest.mark.django_db
def test_grant_request_mixed_client_identity(client, jwk_for, rsa_key, ec_key):
    """
    Naming one client's instance id with another client's key id is
    refused as a client error.
    """
    for instance_id, kid, key in [
        ("inst-a", "kid-a", rsa_key),
        ("inst-b", "kid-b", ec_key),
    ]:
        response = client.post(
            "/clients",
            {"instance_id": instance_id, "key": {"kid": kid, "jwk": jwk_for(key, kid)}},
            content_type="application/json",
        )
        assert response.status_code == 201
    response = client.post(
        "/grant",
        {**GRANT_BODY, "client": {"instance_id": "inst-a", "key": {"kid": "kid-b"}}},
        content_type="application/json",
    )
    assert response.status_code == 401
    assert response.json() == {"error": "invalid_client"}
    assert GrantRequest.objects.count() == 0


@pytest.mark.django_db
def test_grant_request_signed(client, registered_client, client_candidate, rsa_key):
    """
    A signed request is verified against the stored client key.
    """
    payload = {**GRANT_BODY, "client": client_candidate.to_json()}
    assertion = jwt.encode(payload, rsa_key, algorithm="RS256", headers={"kid": "test-key"})
    response = client.post("/grant", assertion, content_type="application/jose")
    assert response.status_code == 201
    grant = GrantRequest.objects.get(pk=response.json()["instance_id"])
    assert grant.client == registered_client


@pytest.mark.django_db
def test_continuation(client):
    data = start_grant(client)
    url = data["continue"]["uri"]
    token = data["continue"]["access_token"]
    assert client.post(url).status_code == 401
    assert client.post(url, **auth("garbage")).json() == {
        "error": "invalid_continuation"
    }
    response = client.post(url, **auth(token))
    assert response.status_code == 200
    assert response.json()["instance_id"] == data["instance_id"]
    # Bearer works too, as does GET
    response = client.get(url, HTTP_AUTHORIZATION=f"Bearer {token}")
    assert response.status_code == 200


@pytest.mark.django_db
def test_continuation_expired(client):
    data = start_grant(client)
    GrantRequest.objects.filter(pk=data["instance_id"]).update(
        expires=timezone.now() - timedelta(seconds=1)
    )
    response = client.post(
        data["continue"]["uri"], **auth(data["continue"]["access_token"])
    )
    assert response.status_code == 400
    assert response.json() == {"error": "request_denied"}
    assert GrantRequest.objects.get(pk=data["instance_id"]).state == "expired"


@pytest.mark.django_db
def test_full_redirect_flow(client, services):
    """
    Request, approve through the consent page, come back with the hash, and
    pick up the access token.
    """
    data = start_grant(client)
    grant_id = data["instance_id"]
    page = client.get(f"/interact/redirect/{grant_id}")
    assert page.status_code == 200
    interaction = services.interactions.find_active_interactions(grant_id)[0]
    assert interaction.id in page.content.decode()

    response = client.post(
        f"/interact/finish/{grant_id}",
        {"interaction_id": interaction.id, "approved": "true", "nonce": "abc123"},
    )
    assert response.status_code == 302
    location = urlparse(response.url)
    assert location.netloc == "client.test"
    query = parse_qs(location.query)
    assert query["interact_ref"] == [interaction.id]
    assert query["hash"]

    response = client.post(
        data["continue"]["uri"], **auth(data["continue"]["access_token"])
    )
    tokens = response.json()["access_token"]
    assert len(tokens) == 1
    assert tokens[0]["label"] == "https://photos.test"
    assert tokens[0]["access"] == [
        {
            "type": "photo-api",
            "actions": ["read"],
            "resource_server": "https://photos.test",
        }
    ]

    # Introspect, then revoke it
    value = tokens[0]["value"]
    response = client.post("/token/introspect", {"token": value}, content_type="application/json")
    assert response.json()["active"] is True
    assert client.post("/token/revoke", {"token": value}).status_code == 200
    assert client.post("/token/revoke", {"token": value}).status_code == 404
    response = client.post("/token/introspect", {"token": value})
    assert response.json() == {"active": False}

    # Once approved, it can't be denied
    response = client.post(
        f"/interact/finish/{grant_id}",
        {"interaction_id": interaction.id, "approved": "false", "nonce": "abc123"},
    )
    assert response.status_code == 409


@pytest.mark.django_db
def test_finish_denied(client, services):
    data = start_grant(client)
    grant_id = data["instance_id"]
    interaction = services.interactions.find_active_interactions(grant_id)[0]
    response = client.post(
        f"/interact/finish/{grant_id}",
        {"interaction_id": interaction.id, "approved": "false", "nonce": "abc123"},
    )
    assert response.status_code == 403
    assert response.json() == {"error": "user_denied"}
    assert GrantRequest.objects.get(pk=grant_id).state == GrantStates.denied
    response = client.post(
        f"/interact/finish/{grant_id}",
        {"interaction_id": "nope", "approved": "true"},
    )
    assert response.status_code == 400
    assert response.json() == {"error": "invalid_interaction"}


@pytest.mark.django_db
def test_interaction_pages(client, services):
    data = start_grant(
        client,
        {
            "access": [{"type": "files"}],
            "interact": {"user_code": True, "app": {"uri": "app://x"}},
        },
    )
    grant_id = data["instance_id"]
    page = client.get(f"/interact/user-code/{grant_id}")
    assert page.status_code == 200
    assert data["interact"]["user_code"]["code"] in page.content.decode()
    response = client.get(f"/interact/app/{grant_id}")
    assert response.json() == {"grant_id": grant_id, "client_name": "Unknown Client"}
    assert client.get("/interact/redirect/no-such-grant").status_code == 404
    assert client.get("/interact/app/no-such-grant").status_code == 404


@pytest.mark.django_db
def test_revoke_grant(client):
    data = start_grant(client)
    url = data["continue"]["uri"]
    token = data["continue"]["access_token"]
    assert client.delete(url, **auth("garbage")).status_code == 401
    assert client.delete(url, **auth(token)).status_code == 204
    assert GrantRequest.objects.get(pk=data["instance_id"]).state == "revoked"
    # Polling still works, but there is nothing to hand out
    response = client.post(url, **auth(token))
    assert response.status_code == 200
    assert "access_token" not in response.json()


@pytest.mark.django_db
def test_clients(client, client_candidate):
    response = client.post(
        "/clients", client_candidate.to_json(), content_type="application/json"
    )
    assert response.status_code == 201
    created = response.json()
    assert created["kid"] == "test-key"
    assert created["display"] == {"name": "Test Client", "uri": "https://client.test"}
    # Existing clients can't be re-registered from outside
    response = client.post(
        "/clients", client_candidate.to_json(), content_type="application/json"
    )
    assert response.status_code == 409
    assert client.get(f"/clients/{created['id']}").json() == created
    assert client.get("/clients/nope").status_code == 404
