from django.contrib import admin

from cafe_planner.models import Cafe, StoredValue


@admin.register(Cafe)
class CafeAdmin(admin.ModelAdmin):
    list_display = (
        "name",
        "cafe_id",
        "cuisine",
        "price_range",
        "rating",
        "latitude",
        "longitude",
    )
    list_filter = ("cuisine", "price_range")
    search_fields = ("name", "cafe_id", "address", "cuisine")
    ordering = ("name", "cafe_id")


@admin.register(StoredValue)
class StoredValueAdmin(admin.ModelAdmin):
    list_display = ("key", "updated_at")
    search_fields = ("key",)
