from django.db import models
from django.utils import timezone

from core.ids import generate_id


class Interaction(models.Model):
    """
    One channel offered to the resource owner for approving a grant.
    """

    class Types(models.TextChoices):
        redirect = "redirect"
        app = "app"
        user_code = "user_code"
        user_code_uri = "user_code_uri"

    id = models.CharField(
        primary_key=True, max_length=36, default=generate_id, editable=False
    )

    grant = models.ForeignKey(
        "grants.GrantRequest",
        on_delete=models.CASCADE,
        related_name="interactions",
    )

    type = models.CharField(max_length=20, choices=Types.choices)
    url = models.TextField()

    # Client-supplied, echoed into the finish hash
    nonce = models.CharField(max_length=500, blank=True, null=True)

    # Shared by every interaction created for the same request
    hash_method = models.CharField(max_length=20, blank=True, null=True)

    # Only set for the user code types
    user_code = models.CharField(max_length=6, blank=True, null=True)

    expires = models.DateTimeField(db_index=True)
    created = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created", "id"]

    def __str__(self):
        return f"{self.type} interaction {self.id}"

    @property
    def expired(self) -> bool:
        return self.expires <= timezone.now()
