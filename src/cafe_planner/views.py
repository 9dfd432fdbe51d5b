from __future__ import annotations

import functools
import json
from collections.abc import Callable
from typing import Any

from django.conf import settings
from django.http import HttpRequest, HttpResponse, JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_http_methods, require_POST
from pydantic import BaseModel
from pydantic import ValidationError as PayloadValidationError

from cafe_planner.exceptions import (
    CafePlannerError,
    MissingLocationError,
    NotFoundError,
    ValidationError,
)
from cafe_planner.models import Cafe
from cafe_planner.schemas import (
    AddStopRequest,
    NearbyCafeResponse,
    NearbyRequest,
    NotesRequest,
    Plan,
    ReorderRequest,
    RouteSummaryResponse,
    StartTimeRequest,
    TransportModeRequest,
)
from cafe_planner.services.catalog import DatabaseCatalog
from cafe_planner.services.itinerary import ItineraryService
from cafe_planner.services.location import locate
from cafe_planner.services.plan_store import PlanStore
from cafe_planner.services.sharing import decode_plan, encode_plan, share_url
from cafe_planner.services.storage import DatabaseStorage
from cafe_planner.services.types import NearbyCafe

_itinerary_service: ItineraryService | None = None


def get_itinerary_service() -> ItineraryService:
    global _itinerary_service
    if _itinerary_service is None:
        store = PlanStore(DatabaseStorage(namespace=settings.PLAN_STORAGE_NAMESPACE))
        _itinerary_service = ItineraryService(store, catalog=DatabaseCatalog())
    return _itinerary_service


def _handles_planner_errors(view: Callable[..., HttpResponse]) -> Callable[..., HttpResponse]:
    @functools.wraps(view)
    def wrapper(request: HttpRequest, *args: Any, **kwargs: Any) -> HttpResponse:
        try:
            return view(request, *args, **kwargs)
        except PayloadValidationError as exc:
            return JsonResponse(
                {
                    "error": {
                        "code": "validation_error",
                        "message": "Invalid request payload",
                        "details": exc.errors(include_url=False, include_context=False),
                    }
                },
                status=400,
            )
        except ValidationError as exc:
            return _error_response("invalid_plan", str(exc), status=400)
        except NotFoundError as exc:
            return _error_response("not_found", str(exc), status=404)
        except MissingLocationError as exc:
            return _error_response("missing_location", str(exc), status=422)
        except CafePlannerError as exc:
            return _error_response("planner_error", str(exc), status=400)

    return wrapper


@require_GET
def health_view(_: HttpRequest) -> HttpResponse:
    total_cafes = Cafe.objects.count()
    located_cafes = (
        Cafe.objects.exclude(latitude__isnull=True).exclude(longitude__isnull=True).count()
    )
    return JsonResponse(
        {
            "status": "ok",
            "cafes": {
                "total": total_cafes,
                "located": located_cafes,
            },
        }
    )


@require_GET
def cafe_search_view(request: HttpRequest) -> HttpResponse:
    cafes = get_itinerary_service().catalog.search(
        request.GET.get("q", ""),
        cuisine=request.GET.get("cuisine", ""),
        price_range=request.GET.get("price_range", ""),
    )
    return JsonResponse({"cafes": [cafe.to_record() for cafe in cafes]})


@require_GET
@_handles_planner_errors
def nearby_cafes_view(request: HttpRequest) -> HttpResponse:
    query = NearbyRequest.model_validate(request.GET.dict())
    position = locate(query.lat, query.lng)
    nearby = get_itinerary_service().catalog.nearby(
        position.point,
        query.radius_km or settings.NEARBY_RADIUS_KM,
        query.limit or settings.NEARBY_LIMIT,
    )
    return JsonResponse(
        {
            "origin": position.point.to_record(),
            "isDefaultLocation": position.is_default,
            "cafes": _nearby_payload(nearby),
        }
    )


@require_GET
@_handles_planner_errors
def cafe_neighbours_view(request: HttpRequest, cafe_id: str) -> HttpResponse:
    try:
        radius_km = float(request.GET.get("radius_km") or settings.NEARBY_RADIUS_KM)
    except ValueError as exc:
        raise ValidationError("radius_km must be a number") from exc
    nearby = get_itinerary_service().catalog.near_cafe(cafe_id, radius_km, settings.NEARBY_LIMIT)
    return JsonResponse({"cafes": _nearby_payload(nearby)})


@csrf_exempt
@require_http_methods(["GET", "DELETE"])
@_handles_planner_errors
def plan_view(request: HttpRequest) -> HttpResponse:
    service = get_itinerary_service()
    if request.method == "DELETE":
        return _plan_response(service.clear())
    return _plan_response(service.current_plan())


@csrf_exempt
@require_POST
@_handles_planner_errors
def add_stop_view(request: HttpRequest) -> HttpResponse:
    payload = _parse_payload(request, AddStopRequest)
    return _plan_response(get_itinerary_service().add_cafe(payload.cafe_id), status=201)


@csrf_exempt
@require_http_methods(["DELETE"])
@_handles_planner_errors
def remove_stop_view(_: HttpRequest, stop_id: str) -> HttpResponse:
    return _plan_response(get_itinerary_service().remove_stop(stop_id))


@csrf_exempt
@require_POST
@_handles_planner_errors
def stop_notes_view(request: HttpRequest, stop_id: str) -> HttpResponse:
    payload = _parse_payload(request, NotesRequest)
    return _plan_response(get_itinerary_service().annotate(stop_id, payload.notes))


@csrf_exempt
@require_POST
@_handles_planner_errors
def reorder_view(request: HttpRequest) -> HttpResponse:
    payload = _parse_payload(request, ReorderRequest)
    return _plan_response(get_itinerary_service().reorder(payload.from_index, payload.to_index))


@csrf_exempt
@require_POST
@_handles_planner_errors
def optimize_view(_: HttpRequest) -> HttpResponse:
    return _plan_response(get_itinerary_service().optimize())


@csrf_exempt
@require_POST
@_handles_planner_errors
def start_time_view(request: HttpRequest) -> HttpResponse:
    payload = _parse_payload(request, StartTimeRequest)
    return _plan_response(get_itinerary_service().set_start_time(payload.start_time))


@csrf_exempt
@require_POST
@_handles_planner_errors
def transport_mode_view(request: HttpRequest) -> HttpResponse:
    payload = _parse_payload(request, TransportModeRequest)
    return _plan_response(get_itinerary_service().set_transport_mode(payload.transport_mode))


@require_GET
@_handles_planner_errors
def route_summary_view(_: HttpRequest) -> HttpResponse:
    summary = get_itinerary_service().route_summary()
    response = RouteSummaryResponse(
        stops=summary.stops,
        skipped_without_location=summary.skipped_without_location,
        total_distance_km=round(summary.total_distance_km, 2),
        total_travel_minutes=summary.total_travel_minutes,
        route_geojson={
            "type": "LineString",
            "coordinates": summary.coordinates,
        },
    )
    return JsonResponse(response.model_dump(mode="json"))


@csrf_exempt
@require_POST
@_handles_planner_errors
def surprise_view(_: HttpRequest) -> HttpResponse:
    return _plan_response(get_itinerary_service().surprise())


@csrf_exempt
@require_POST
@_handles_planner_errors
def accept_plan_view(request: HttpRequest) -> HttpResponse:
    plan = _parse_payload(request, Plan)
    return _plan_response(get_itinerary_service().accept_plan(plan))


@csrf_exempt
@require_POST
@_handles_planner_errors
def save_plan_view(_: HttpRequest) -> HttpResponse:
    archived = get_itinerary_service().save_plan()
    return JsonResponse(archived.to_record(), status=201)


@require_GET
@_handles_planner_errors
def share_plan_view(_: HttpRequest) -> HttpResponse:
    plan = get_itinerary_service().current_plan()
    if plan.is_empty:
        raise ValidationError("Your plan is empty, add some cafes first")
    return JsonResponse(
        {"token": encode_plan(plan), "url": share_url(plan, settings.SHARE_BASE_URL)}
    )


@require_GET
@_handles_planner_errors
def shared_plan_view(_: HttpRequest, token: str) -> HttpResponse:
    return _plan_response(decode_plan(token))


@require_GET
def archive_view(_: HttpRequest) -> HttpResponse:
    plans = get_itinerary_service().store.list_archive()
    return JsonResponse({"plans": [plan.to_record() for plan in plans]})


@csrf_exempt
@require_POST
@_handles_planner_errors
def reuse_archived_view(_: HttpRequest, plan_id: str) -> HttpResponse:
    return _plan_response(get_itinerary_service().reuse(plan_id))


@csrf_exempt
@require_POST
@_handles_planner_errors
def complete_archived_view(_: HttpRequest, plan_id: str) -> HttpResponse:
    archived = get_itinerary_service().mark_completed(plan_id)
    return JsonResponse(archived.to_record())


def _parse_payload(request: HttpRequest, model: type[BaseModel]) -> Any:
    if not request.body:
        return model.model_validate({})

    try:
        payload = json.loads(request.body)
    except json.JSONDecodeError as exc:
        raise ValidationError("Request body must be valid JSON") from exc

    if not isinstance(payload, dict):
        raise ValidationError("JSON body must be an object")

    return model.model_validate(payload)


def _plan_response(plan: Plan, status: int = 200) -> JsonResponse:
    return JsonResponse(plan.to_record(), status=status)


def _nearby_payload(nearby: list[NearbyCafe]) -> list[dict[str, Any]]:
    return [
        NearbyCafeResponse(
            cafe=item.cafe.to_record(), distance_km=round(item.distance_km, 3)
        ).model_dump(mode="json")
        for item in nearby
    ]


def _error_response(code: str, message: str, status: int) -> JsonResponse:
    return JsonResponse({"error": {"code": code, "message": message}}, status=status)
