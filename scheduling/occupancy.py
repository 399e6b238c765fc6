import datetime as dt
from collections import Counter

from .models import Commitment, Resource
from .scope import Scope


def _live(scope: Scope):
    return Commitment.objects.filter(
        tenant_id=scope.tenant_id,
        academic_year_id=scope.academic_year_id,
    ).exclude(status=Commitment.CANCELLED)


def resource_occupation(scope: Scope, resource_id, start=None, end=None):
    qs = _live(scope).filter(resource_id=resource_id)
    if start is not None:
        qs = qs.filter(date__gte=start)
    if end is not None:
        qs = qs.filter(date__lte=end)
    return qs.order_by("date", "start_time")


def weekly_schedule(scope: Scope, resource_id, week_start: dt.date):
    week_end = week_start + dt.timedelta(days=7)
    return (
        _live(scope)
        .filter(resource_id=resource_id, date__gte=week_start, date__lt=week_end)
        .order_by("date", "start_time")
    )


def room_statistics(scope: Scope, kind=None, start=None, end=None) -> dict:
    resources = Resource.objects.filter(tenant_id=scope.tenant_id, is_active=True)
    commitments = _live(scope).select_related("resource")
    if kind:
        resources = resources.filter(kind=kind)
        commitments = commitments.filter(resource__kind=kind)
    if start is not None:
        commitments = commitments.filter(date__gte=start)
    if end is not None:
        commitments = commitments.filter(date__lte=end)

    by_kind = Counter()
    by_resource = Counter()
    booked_minutes = 0
    for c in commitments:
        by_kind[c.kind] += 1
        by_resource[c.resource.code] += 1
        booked_minutes += c.interval.duration_minutes

    total_resources = resources.count()
    occupied = len(set(resources.values_list("code", flat=True)) & set(by_resource))
    return {
        "total_resources": total_resources,
        "total_commitments": sum(by_kind.values()),
        "by_kind": dict(by_kind),
        "by_resource": dict(by_resource),
        "booked_minutes": booked_minutes,
        "occupancy_rate": (occupied / total_resources) * 100 if total_resources else 0,
    }
