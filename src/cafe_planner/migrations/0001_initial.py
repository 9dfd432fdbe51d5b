from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Cafe",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True, primary_key=True, serialize=False, verbose_name="ID"
                    ),
                ),
                ("cafe_id", models.CharField(max_length=100, unique=True)),
                ("name", models.CharField(max_length=255)),
                ("address", models.CharField(blank=True, default="", max_length=255)),
                ("rating", models.FloatField(blank=True, null=True)),
                ("price_range", models.CharField(blank=True, default="", max_length=8)),
                ("cuisine", models.CharField(blank=True, default="", max_length=100)),
                ("photos", models.JSONField(blank=True, default=list)),
                ("description", models.TextField(blank=True, default="")),
                ("latitude", models.FloatField(blank=True, null=True)),
                ("longitude", models.FloatField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ("name", "cafe_id"),
                "indexes": [
                    models.Index(fields=["cuisine"], name="cafe_cuisine_idx"),
                    models.Index(
                        fields=["latitude", "longitude"], name="cafe_lat_lng_idx"
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="StoredValue",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True, primary_key=True, serialize=False, verbose_name="ID"
                    ),
                ),
                ("key", models.CharField(max_length=200, unique=True)),
                ("value", models.JSONField(null=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
        ),
    ]
