from django.db import models

from core.fields import DelimitedListField
from core.ids import generate_id

# Bucket for resources that don't name a resource server
DEFAULT_SERVER = "default"


class Resource(models.Model):
    """
    One requested access right within a grant. Immutable once created.
    """

    id = models.CharField(
        primary_key=True, max_length=36, default=generate_id, editable=False
    )

    grant = models.ForeignKey(
        "grants.GrantRequest",
        on_delete=models.CASCADE,
        related_name="resources",
    )

    type = models.CharField(max_length=500)
    resource_server = models.CharField(max_length=500, blank=True, null=True)

    actions = DelimitedListField()
    locations = DelimitedListField()
    datatypes = DelimitedListField()

    created = models.DateTimeField(auto_now_add=True)
    updated = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["created", "id"]

    def __str__(self):
        return f"{self.type}@{self.server_key}"

    @property
    def server_key(self) -> str:
        """
        The resource server this is grouped under when tokens are issued
        """
        return self.resource_server or DEFAULT_SERVER
