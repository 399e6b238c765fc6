import json
import logging
from functools import wraps

from django.http import JsonResponse
from django.shortcuts import get_object_or_404
from django.utils.dateparse import parse_date
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_POST

from . import assignments, conflicts, facts, occupancy
from .exceptions import SchedulingError, status_for
from .forms import (CancelForm, FactForm, IntervalForm, MaintenanceForm,
                    ReservationForm, TeacherAssignmentForm)
from .models import Resource, SchoolClass
from .policy import eligible_resources, requires_booking, resolve_mode
from .scope import actor_from_request, scope_from_request

logger = logging.getLogger(__name__)


def commitment_to_dict(c):
    return {
        "id": c.pk,
        "resource_id": c.resource_id,
        "date": c.date.isoformat(),
        "start_time": c.start_time.strftime("%H:%M"),
        "end_time": c.end_time.strftime("%H:%M"),
        "status": c.status,
        "kind": c.kind,
        "purpose": c.purpose,
        "requester_id": c.requester_id,
        "consumer_id": c.consumer_id,
        "notes": c.notes,
    }


def fact_to_dict(f):
    return {
        "id": f.pk,
        "entity": f"{f.entity_type.app_label}.{f.entity_type.model}",
        "entity_id": f.entity_id,
        "date": f.date.isoformat(),
        "kind": f.kind,
        "status": f.status,
        "note": f.note,
        "recorded_by": f.recorded_by,
        "updated_by": f.updated_by,
        "created_at": f.created_at.isoformat(),
        "updated_at": f.updated_at.isoformat(),
    }


def resource_to_dict(r):
    return {
        "id": r.pk,
        "code": r.code,
        "name": r.name,
        "kind": r.kind,
        "capacity": r.capacity,
        "is_active": r.is_active,
        "is_shareable": r.is_shareable,
    }


def _payload(request):
    if request.content_type == "application/json":
        try:
            return json.loads(request.body or b"{}")
        except ValueError:
            return {}
    return request.POST


def _form_errors(form):
    return JsonResponse({"error": "invalid_request", "fields": form.errors.get_json_data()}, status=400)


def scheduling_errors(view):
    """Translate scheduling errors into JSON responses carrying their structured detail."""

    @wraps(view)
    def wrapper(request, *args, **kwargs):
        try:
            return view(request, *args, **kwargs)
        except SchedulingError as e:
            logger.info("Rejected %s %s: %s %s", request.method, request.path, e.code, e.detail)
            return JsonResponse(e.as_dict(), status=status_for(e))
        except Exception:
            logger.exception("Unexpected failure in %s %s", request.method, request.path)
            raise

    return wrapper


@csrf_exempt
@require_POST
@scheduling_errors
def reserve_resource(request, resource_id: int):
    scope = scope_from_request(request)
    actor_id = actor_from_request(request)
    form = ReservationForm(_payload(request))
    if not form.is_valid():
        return _form_errors(form)
    data = form.cleaned_data
    commitment = conflicts.reserve(
        scope,
        resource_id,
        form.interval(),
        requester_id=actor_id,
        consumer=data.get("consumer"),
        status=data.get("status") or None,
        kind=data.get("kind") or "CLASS",
        purpose=data.get("purpose", ""),
        notes=data.get("notes", ""),
    )
    return JsonResponse(commitment_to_dict(commitment), status=201)


@csrf_exempt
@require_POST
@scheduling_errors
def confirm_commitment(request, commitment_id: int):
    scope = scope_from_request(request)
    commitment = conflicts.confirm(scope, commitment_id, actor_from_request(request))
    return JsonResponse(commitment_to_dict(commitment))


@csrf_exempt
@require_POST
@scheduling_errors
def cancel_commitment(request, commitment_id: int):
    scope = scope_from_request(request)
    form = CancelForm(_payload(request))
    if not form.is_valid():
        return _form_errors(form)
    commitment = conflicts.cancel(
        scope, commitment_id, actor_from_request(request), reason=form.cleaned_data.get("reason", "")
    )
    return JsonResponse(commitment_to_dict(commitment))


@csrf_exempt
@require_POST
@scheduling_errors
def reschedule_commitment(request, commitment_id: int):
    scope = scope_from_request(request)
    form = IntervalForm(_payload(request))
    if not form.is_valid():
        return _form_errors(form)
    commitment = conflicts.reschedule(scope, commitment_id, form.interval(), actor_from_request(request))
    return JsonResponse(commitment_to_dict(commitment))


@csrf_exempt
@require_POST
@scheduling_errors
def resource_maintenance(request, resource_id: int):
    scope = scope_from_request(request)
    form = MaintenanceForm(_payload(request))
    if not form.is_valid():
        return _form_errors(form)
    cancelled = conflicts.set_maintenance(
        scope, resource_id, actor_from_request(request), reason=form.cleaned_data.get("reason", "")
    )
    return JsonResponse({"resource_id": resource_id, "cancelled_commitments": cancelled})


@require_GET
@scheduling_errors
def resource_occupation(request, resource_id: int):
    scope = scope_from_request(request)
    get_object_or_404(Resource, pk=resource_id, tenant_id=scope.tenant_id)
    start = parse_date(request.GET.get("start") or "")
    end = parse_date(request.GET.get("end") or "")
    rows = occupancy.resource_occupation(scope, resource_id, start=start, end=end)
    return JsonResponse({"resource_id": resource_id, "commitments": [commitment_to_dict(c) for c in rows]})


@require_GET
@scheduling_errors
def resource_week(request, resource_id: int):
    scope = scope_from_request(request)
    get_object_or_404(Resource, pk=resource_id, tenant_id=scope.tenant_id)
    week_start = parse_date(request.GET.get("week_start") or "")
    if week_start is None:
        return JsonResponse({"error": "invalid_request", "message": "week_start (YYYY-MM-DD) is required"}, status=400)
    rows = occupancy.weekly_schedule(scope, resource_id, week_start)
    return JsonResponse({"resource_id": resource_id, "commitments": [commitment_to_dict(c) for c in rows]})


@require_GET
@scheduling_errors
def statistics(request):
    scope = scope_from_request(request)
    stats = occupancy.room_statistics(
        scope,
        kind=request.GET.get("kind") or None,
        start=parse_date(request.GET.get("start") or ""),
        end=parse_date(request.GET.get("end") or ""),
    )
    return JsonResponse(stats)


@require_GET
@scheduling_errors
def class_eligible_resources(request, class_id: int):
    scope = scope_from_request(request)
    school_class = get_object_or_404(
        SchoolClass, pk=class_id, tenant_id=scope.tenant_id, academic_year_id=scope.academic_year_id
    )
    mode = resolve_mode(school_class.category)
    pool = Resource.objects.filter(tenant_id=scope.tenant_id)
    eligible = sorted(eligible_resources(school_class, mode, pool), key=lambda r: r.code)
    return JsonResponse({
        "class_id": school_class.pk,
        "mode": mode.value,
        "requires_booking": requires_booking(mode),
        "resources": [resource_to_dict(r) for r in eligible],
    })


@csrf_exempt
@require_POST
@scheduling_errors
def assign_class_teacher(request, class_id: int):
    scope = scope_from_request(request)
    school_class = get_object_or_404(
        SchoolClass, pk=class_id, tenant_id=scope.tenant_id, academic_year_id=scope.academic_year_id
    )
    form = TeacherAssignmentForm(_payload(request))
    if not form.is_valid():
        return _form_errors(form)
    row = assignments.assign_teacher(
        scope,
        school_class,
        form.cleaned_data["teacher_id"],
        subject_id=form.cleaned_data.get("subject_id") or None,
        actor_id=actor_from_request(request),
    )
    return JsonResponse({
        "class_id": school_class.pk,
        "teacher_id": row.teacher_id,
        "subject_id": row.subject_id or None,
        "mode": row.mode,
    })


@csrf_exempt
@require_POST
@scheduling_errors
def record_fact(request):
    scope = scope_from_request(request)
    actor_id = actor_from_request(request)
    form = FactForm(_payload(request))
    if not form.is_valid():
        return _form_errors(form)
    fact = facts.record(scope, form.natural_key(), form.payload(), actor_id)
    return JsonResponse(fact_to_dict(fact))


@require_GET
@scheduling_errors
def list_facts(request):
    scope = scope_from_request(request)
    day = parse_date(request.GET.get("date") or "")
    entity = request.GET.get("entity")
    entity_id = request.GET.get("entity_id")
    if day is None or not entity or not entity_id:
        return JsonResponse(
            {"error": "invalid_request", "message": "entity, entity_id and date are required"}, status=400
        )
    rows = facts.facts_for(scope, entity.lower(), entity_id, day)
    return JsonResponse({"facts": [fact_to_dict(f) for f in rows]})
