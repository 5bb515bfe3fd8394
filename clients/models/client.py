from django.db import models

from core.ids import generate_id


class Client(models.Model):
    """
    A client instance that requests grants on behalf of resource owners.

    Clients re-send their key material with every grant request, so this
    row is upserted (see ClientRegistry.register_client) rather than only
    ever created.
    """

    id = models.CharField(
        primary_key=True, max_length=36, default=generate_id, editable=False
    )

    # Correlates multiple requests from the same logical client
    instance_id = models.CharField(max_length=500, blank=True, null=True, db_index=True)

    display_name = models.CharField(max_length=500, blank=True, null=True)
    display_uri = models.TextField(blank=True, null=True)
    logo_uri = models.TextField(blank=True, null=True)

    # The authentication lookup key
    key_id = models.CharField(max_length=500, blank=True, null=True, unique=True)
    key_jwk = models.TextField(blank=True, null=True)

    created = models.DateTimeField(auto_now_add=True)
    updated = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.display_name or self.key_id or self.id

    def to_json(self) -> dict:
        value = {
            "id": self.id,
            "instance_id": self.instance_id,
            "kid": self.key_id,
            "display": {
                "name": self.display_name,
                "uri": self.display_uri,
                "logo_uri": self.logo_uri,
            },
        }
        value["display"] = {k: v for k, v in value["display"].items() if v}
        return {k: v for k, v in value.items() if v}
