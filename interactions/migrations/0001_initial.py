import django.db.models.deletion
from django.db import migrations, models

import core.ids


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        ("grants", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Interaction",
            fields=[
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
                    "type",
                    models.CharField(
                        choices=[
                            ("redirect", "Redirect"),
                            ("app", "App"),
                            ("user_code", "User Code"),
                            ("user_code_uri", "User Code Uri"),
                        ],
                        max_length=20,
                    ),
                ),
                ("url", models.TextField()),
                ("nonce", models.CharField(blank=True, max_length=500, null=True)),
                (
                    "hash_method",
                    models.CharField(blank=True, max_length=20, null=True),
                ),
                ("user_code", models.CharField(blank=True, max_length=6, null=True)),
                ("expires", models.DateTimeField(db_index=True)),
                ("created", models.DateTimeField(auto_now_add=True)),
                (
                    "grant",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="interactions",
                        to="grants.grantrequest",
                    ),
                ),
            ],
            options={
                "ordering": ["created", "id"],
            },
        ),
    ]
