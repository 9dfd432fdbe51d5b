from __future__ import annotations

from django.db import models


class Cafe(models.Model):
    objects = models.Manager["Cafe"]()

    # Catalog fields from CSV
    cafe_id = models.CharField(max_length=100, unique=True)
    name = models.CharField(max_length=255)
    address = models.CharField(max_length=255, blank=True, default="")
    rating = models.FloatField(null=True, blank=True)
    price_range = models.CharField(max_length=8, blank=True, default="")
    cuisine = models.CharField(max_length=100, blank=True, default="")
    photos = models.JSONField(default=list, blank=True)
    description = models.TextField(blank=True, default="")

    # Location
    latitude = models.FloatField(null=True, blank=True)
    longitude = models.FloatField(null=True, blank=True)

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ("name", "cafe_id")
        indexes = (
            models.Index(fields=["cuisine"], name="cafe_cuisine_idx"),
            models.Index(fields=["latitude", "longitude"], name="cafe_lat_lng_idx"),
        )

    def __str__(self) -> str:
        return f"{self.name} ({self.cafe_id})"


class StoredValue(models.Model):
    """A single JSON value under a well-known key, overwritten wholesale."""

    objects = models.Manager["StoredValue"]()

    key = models.CharField(max_length=200, unique=True)
    value = models.JSONField(null=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return self.key
