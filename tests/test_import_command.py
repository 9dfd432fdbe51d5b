from __future__ import annotations

from pathlib import Path

import pytest
from django.core.management import call_command
from django.core.management.base import CommandError

from cafe_planner.models import Cafe


@pytest.mark.django_db
def test_import_cafes_deduplicates_and_normalizes(tmp_path: Path) -> None:
    csv_path = tmp_path / "cafes.csv"
    csv_path.write_text(
        "\n".join(
            [
                "Cafe ID,Name,Address,Latitude,Longitude,Rating,Price Range,Cuisine,Photos",
                "c1, Kopi Corner ,1 Raffles Pl,1.2839,103.8608,4.1,$,Local,a.jpg;b.jpg",
                "c1,Kopi Corner Annex,2 Raffles Pl,1.2840,103.8609,4.6,$,Local,",
                "c2,Lost Beans,Somewhere,999,103.8,3.9,$$,Coffee,",
                ",No Id,3 Main St,1.3,103.8,4.0,$,Coffee,",
            ]
        ),
        encoding="utf-8",
    )

    call_command("import_cafes", csv_path=str(csv_path))

    assert Cafe.objects.count() == 2

    corner = Cafe.objects.get(cafe_id="c1")
    assert corner.name == "Kopi Corner Annex"
    assert corner.rating == pytest.approx(4.6)
    assert corner.photos == []

    lost = Cafe.objects.get(cafe_id="c2")
    assert lost.latitude is None
    assert lost.longitude is None
    assert lost.description == ""


@pytest.mark.django_db
def test_import_cafes_updates_existing_rows(tmp_path: Path) -> None:
    Cafe.objects.create(cafe_id="c1", name="Old Name")
    csv_path = tmp_path / "cafes.csv"
    csv_path.write_text(
        "Cafe ID,Name,Address,Latitude,Longitude,Photos\n"
        "c1,New Name,1 Raffles Pl,1.2839,103.8608,x.jpg; y.jpg\n",
        encoding="utf-8",
    )

    call_command("import_cafes", csv_path=str(csv_path))

    cafe = Cafe.objects.get(cafe_id="c1")
    assert cafe.name == "New Name"
    assert cafe.latitude == pytest.approx(1.2839)
    assert cafe.photos == ["x.jpg", "y.jpg"]
    assert cafe.rating is None


def test_import_cafes_requires_location_columns(tmp_path: Path) -> None:
    csv_path = tmp_path / "cafes.csv"
    csv_path.write_text("Cafe ID,Name\nc1,Only Name\n", encoding="utf-8")

    with pytest.raises(CommandError):
        call_command("import_cafes", csv_path=str(csv_path))
