from __future__ import annotations

from pathlib import Path
from typing import Any

import polars as pl
from django.conf import settings
from django.core.management.base import BaseCommand, CommandError

from cafe_planner.models import Cafe

REQUIRED_COLUMNS = {"Cafe ID", "Name", "Address", "Latitude", "Longitude"}
OPTIONAL_COLUMNS = ("Rating", "Price Range", "Cuisine", "Photos", "Description")
UPDATE_FIELDS = [
    "name",
    "address",
    "rating",
    "price_range",
    "cuisine",
    "photos",
    "description",
    "latitude",
    "longitude",
]


class Command(BaseCommand):
    help = "Import and normalize the cafe catalog from a CSV using Polars."

    def add_arguments(self, parser: Any) -> None:
        parser.add_argument(
            "--csv-path",
            type=str,
            default=str(settings.PROJECT_ROOT / "cafes.csv"),
            help="Path to the source cafe catalog CSV",
        )
        parser.add_argument(
            "--replace",
            action="store_true",
            help="Delete existing cafes before importing",
        )

    def handle(self, *_: Any, **options: Any) -> None:
        csv_path = Path(options["csv_path"])
        if not csv_path.exists():
            raise CommandError(f"CSV file does not exist: {csv_path}")

        frame = self._load_and_transform(csv_path)
        records = frame.to_dicts()

        if options["replace"]:
            Cafe.objects.all().delete()

        existing = {
            cafe.cafe_id: cafe
            for cafe in Cafe.objects.filter(cafe_id__in=[row["cafe_id"] for row in records])
        }

        to_create: list[Cafe] = []
        to_update: list[Cafe] = []

        for row in records:
            values = {
                "name": row["name"],
                "address": row["address"],
                "rating": row["rating"],
                "price_range": row["price_range"],
                "cuisine": row["cuisine"],
                "photos": [photo.strip() for photo in row["photos"].split(";") if photo.strip()],
                "description": row["description"],
                "latitude": row["latitude"],
                "longitude": row["longitude"],
            }
            cafe = existing.get(row["cafe_id"])
            if cafe is None:
                to_create.append(Cafe(cafe_id=row["cafe_id"], **values))
                continue

            for field, value in values.items():
                setattr(cafe, field, value)
            to_update.append(cafe)

        if to_create:
            Cafe.objects.bulk_create(to_create, batch_size=1000)
        if to_update:
            Cafe.objects.bulk_update(to_update, UPDATE_FIELDS, batch_size=1000)

        self.stdout.write(
            self.style.SUCCESS(
                "Imported cafes: "
                + (
                    f"{len(records)} rows normalized, "
                    f"{len(to_create)} created, {len(to_update)} updated"
                )
            )
        )

    @staticmethod
    def _load_and_transform(csv_path: Path) -> pl.DataFrame:
        frame = pl.read_csv(csv_path, infer_schema_length=5000)
        missing_columns = REQUIRED_COLUMNS.difference(frame.columns)
        if missing_columns:
            raise CommandError(f"Missing expected columns: {sorted(missing_columns)}")

        frame = frame.with_columns(
            [
                pl.lit(None).alias(column)
                for column in OPTIONAL_COLUMNS
                if column not in frame.columns
            ]
        )

        latitude = pl.col("Latitude").cast(pl.Float64, strict=False)
        longitude = pl.col("Longitude").cast(pl.Float64, strict=False)
        has_valid_location = latitude.is_between(-90.0, 90.0) & longitude.is_between(
            -180.0, 180.0
        )

        def text(column: str) -> pl.Expr:
            return pl.col(column).cast(pl.Utf8, strict=False).str.strip_chars().fill_null("")

        rating = pl.col("Rating").cast(pl.Float64, strict=False)

        normalized = (
            frame.select(
                text("Cafe ID").alias("cafe_id"),
                text("Name").alias("name"),
                text("Address").alias("address"),
                pl.when(has_valid_location).then(latitude).otherwise(None).alias("latitude"),
                pl.when(has_valid_location).then(longitude).otherwise(None).alias("longitude"),
                pl.when(rating.is_between(0.0, 5.0)).then(rating).otherwise(None).alias("rating"),
                text("Price Range").str.slice(0, 8).alias("price_range"),
                text("Cuisine").alias("cuisine"),
                text("Photos").alias("photos"),
                text("Description").alias("description"),
            )
            .filter((pl.col("cafe_id").str.len_chars() > 0) & (pl.col("name").str.len_chars() > 0))
            .sort(["cafe_id", "rating"], descending=[False, True], nulls_last=True)
            .unique(subset=["cafe_id"], keep="first", maintain_order=True)
        )

        return normalized
