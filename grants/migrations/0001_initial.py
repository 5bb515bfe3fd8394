import django.db.models.deletion
from django.db import migrations, models

import core.ids
import grants.models.grant
import stator.models


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        ("clients", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="GrantRequest",
            fields=[
                ("state_changed", models.DateTimeField(auto_now_add=True)),
                ("state_version", models.PositiveIntegerField(default=0)),
                (
                    "id",
                    models.CharField(
                        default=core.ids.generate_id,
                        editable=False,
                        max_length=36,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                (
                    "state",
                    stator.models.StateField(
                        choices=[
                            ("pending", "pending"),
                            ("processing", "processing"),
                            ("approved", "approved"),
                            ("denied", "denied"),
                            ("revoked", "revoked"),
                            ("expired", "expired"),
                        ],
                        default="pending",
                        graph=grants.models.grant.GrantStates,
                        max_length=100,
                    ),
                ),
                ("redirect_uri", models.TextField(blank=True, null=True)),
                ("client_state", models.JSONField(blank=True, null=True)),
                ("user_id", models.CharField(blank=True, max_length=500, null=True)),
                ("expires", models.DateTimeField(db_index=True)),
                ("tokens_issued", models.DateTimeField(blank=True, null=True)),
                ("created", models.DateTimeField(auto_now_add=True)),
                ("updated", models.DateTimeField(auto_now=True)),
                (
                    "client",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="grants",
                        to="clients.client",
                    ),
                ),
            ],
            options={
                "abstract": False,
            },
        ),
    ]
