from django.urls import path

from cafe_planner import views

urlpatterns = [
    path("api/v1/health", views.health_view, name="health"),
    path("api/v1/cafes", views.cafe_search_view, name="cafe-search"),
    path("api/v1/cafes/nearby", views.nearby_cafes_view, name="cafes-nearby"),
    path(
        "api/v1/cafes/<str:cafe_id>/nearby", views.cafe_neighbours_view, name="cafe-neighbours"
    ),
    path("api/v1/plan", views.plan_view, name="plan"),
    path("api/v1/plan/stops", views.add_stop_view, name="plan-add-stop"),
    path("api/v1/plan/stops/<str:stop_id>", views.remove_stop_view, name="plan-remove-stop"),
    path("api/v1/plan/stops/<str:stop_id>/notes", views.stop_notes_view, name="plan-stop-notes"),
    path("api/v1/plan/reorder", views.reorder_view, name="plan-reorder"),
    path("api/v1/plan/optimize", views.optimize_view, name="plan-optimize"),
    path("api/v1/plan/start-time", views.start_time_view, name="plan-start-time"),
    path("api/v1/plan/transport-mode", views.transport_mode_view, name="plan-transport-mode"),
    path("api/v1/plan/summary", views.route_summary_view, name="plan-summary"),
    path("api/v1/plan/surprise", views.surprise_view, name="plan-surprise"),
    path("api/v1/plan/accept", views.accept_plan_view, name="plan-accept"),
    path("api/v1/plan/save", views.save_plan_view, name="plan-save"),
    path("api/v1/plan/share", views.share_plan_view, name="plan-share"),
    path("api/v1/share/<str:token>", views.shared_plan_view, name="shared-plan"),
    path("api/v1/archive", views.archive_view, name="archive"),
    path("api/v1/archive/<str:plan_id>/reuse", views.reuse_archived_view, name="archive-reuse"),
    path(
        "api/v1/archive/<str:plan_id>/complete",
        views.complete_archived_view,
        name="archive-complete",
    ),
]
