from django.db import migrations, models

import core.ids


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Client",
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
                    "instance_id",
                    models.CharField(
                        blank=True, db_index=True, max_length=500, null=True
                    ),
                ),
                (
                    "display_name",
                    models.CharField(blank=True, max_length=500, null=True),
                ),
                ("display_uri", models.TextField(blank=True, null=True)),
                ("logo_uri", models.TextField(blank=True, null=True)),
                (
                    "key_id",
                    models.CharField(
                        blank=True, max_length=500, null=True, unique=True
                    ),
                ),
                ("key_jwk", models.TextField(blank=True, null=True)),
                ("created", models.DateTimeField(auto_now_add=True)),
                ("updated", models.DateTimeField(auto_now=True)),
            ],
        ),
    ]
