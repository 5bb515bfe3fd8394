from django.db import models
from django.utils import timezone

from core.ids import generate_id


class AccessToken(models.Model):
    """
    A bearer token issued for one resource server's share of a grant.
    """

    id = models.CharField(
        primary_key=True, max_length=36, default=generate_id, editable=False
    )

    grant = models.ForeignKey(
        "grants.GrantRequest",
        on_delete=models.CASCADE,
        related_name="access_tokens",
    )

    # The signed JWT itself; this is what bearers present
    value = models.TextField(unique=True)

    access_type = models.CharField(max_length=20, default="bearer")

    # The resource server grouping key ("default" for unnamed servers)
    resource_server = models.CharField(max_length=500, blank=True, null=True)

    expires = models.DateTimeField(db_index=True)

    created = models.DateTimeField(auto_now_add=True)
    updated = models.DateTimeField(auto_now=True)

    # Not persisted; filled in by TokenService when handing tokens out
    covered_resources: list | None = None

    class Meta:
        ordering = ["created", "id"]

    def __str__(self):
        return f"{self.access_type} token {self.id}"

    @property
    def label(self) -> str | None:
        return self.resource_server

    @property
    def expired(self) -> bool:
        return self.expires <= timezone.now()

    @property
    def expires_in(self) -> int:
        return max(0, int((self.expires - timezone.now()).total_seconds()))
