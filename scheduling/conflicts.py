import logging
from typing import Iterable, Optional

from django.db import transaction
from django.db.models import Q
from django.utils import timezone

from .conf import get_setting
from .exceptions import (Conflict, InvalidStatus, InvalidTransition,
                         PolicyError, UnknownEntity)
from .intervals import Interval, overlaps, validate
from .models import Commitment, Resource, SchoolClass
from .policy import check_eligibility
from .scope import Scope

logger = logging.getLogger(__name__)


def check(resource_id, candidate: Interval, existing: Iterable[Commitment], exclude_id=None) -> None:
    """
    Reject ``candidate`` if it overlaps any live commitment of ``resource_id``.

    ``existing`` may hold commitments of other resources or cancelled ones; both
    are ignored. ``exclude_id`` skips the commitment being moved on reschedule.
    """
    for commitment in existing:
        if commitment.resource_id != resource_id or not commitment.is_live:
            continue
        if exclude_id is not None and commitment.pk == exclude_id:
            continue
        if overlaps(candidate, commitment.interval):
            raise Conflict(
                commitment.pk,
                f"Resource is already committed {commitment.interval} (commitment {commitment.pk})",
            )


def _lock_resource(scope: Scope, resource_id) -> Resource:
    try:
        return Resource.objects.select_for_update().get(pk=resource_id, tenant_id=scope.tenant_id)
    except Resource.DoesNotExist:
        raise UnknownEntity("resource", resource_id)


def _commitments_on(scope: Scope, resource_id, day):
    return Commitment.objects.filter(
        tenant_id=scope.tenant_id,
        academic_year_id=scope.academic_year_id,
        resource_id=resource_id,
        date=day,
    ).exclude(status=Commitment.CANCELLED)


def _get_commitment(scope: Scope, commitment_id, lock=False) -> Commitment:
    qs = Commitment.objects.filter(tenant_id=scope.tenant_id, academic_year_id=scope.academic_year_id)
    if lock:
        qs = qs.select_for_update()
    try:
        return qs.get(pk=commitment_id)
    except Commitment.DoesNotExist:
        raise UnknownEntity("commitment", commitment_id)


def _resolve_consumer(scope: Scope, consumer):
    if consumer is None or isinstance(consumer, SchoolClass):
        if consumer is not None and (consumer.tenant_id, consumer.academic_year_id) != scope:
            raise UnknownEntity("class", consumer.pk)
        return consumer
    try:
        return SchoolClass.objects.select_related("assigned_resource").get(
            pk=consumer, tenant_id=scope.tenant_id, academic_year_id=scope.academic_year_id
        )
    except SchoolClass.DoesNotExist:
        raise UnknownEntity("class", consumer)


def reserve(
    scope: Scope,
    resource_id,
    candidate: Interval,
    requester_id,
    consumer=None,
    status: Optional[str] = None,
    kind: str = "CLASS",
    purpose: str = "",
    notes: str = "",
) -> Commitment:
    validate(candidate)
    status = status or get_setting("DEFAULT_COMMITMENT_STATUS")
    if status not in (Commitment.PENDING, Commitment.CONFIRMED):
        raise InvalidStatus(status)
    consumer = _resolve_consumer(scope, consumer)

    # Lock the resource row so concurrent bookings of it run check-then-insert one at a time
    with transaction.atomic():
        resource = _lock_resource(scope, resource_id)
        if not resource.is_active:
            raise PolicyError(
                PolicyError.RESOURCE_INACTIVE,
                f"{resource.code} is inactive or under maintenance",
                resource_id=resource.pk,
            )
        if consumer is not None:
            pool = Resource.objects.filter(tenant_id=scope.tenant_id, is_active=True, is_shareable=True)
            check_eligibility(consumer, resource, list(pool))

        try:
            check(resource.pk, candidate, _commitments_on(scope, resource.pk, candidate.date))
        except Conflict as e:
            logger.warning(
                "Rejected booking of resource id=%s for %s: conflicts with commitment id=%s",
                resource.pk, candidate, e.commitment_id,
            )
            raise

        commitment = Commitment.objects.create(
            tenant_id=scope.tenant_id,
            academic_year_id=scope.academic_year_id,
            resource=resource,
            date=candidate.date,
            start_time=candidate.start,
            end_time=candidate.end,
            status=status,
            kind=kind,
            purpose=purpose,
            requester_id=requester_id,
            consumer=consumer,
            notes=notes,
            confirmed_at=timezone.now() if status == Commitment.CONFIRMED else None,
        )
    logger.info(
        "Reserved resource id=%s %s as commitment id=%s (%s) for requester=%s",
        resource.pk, candidate, commitment.pk, status, requester_id,
    )
    return commitment


def confirm(scope: Scope, commitment_id, actor_id) -> Commitment:
    with transaction.atomic():
        commitment = _get_commitment(scope, commitment_id, lock=True)
        if commitment.status == Commitment.CANCELLED:
            raise InvalidTransition(commitment.status, Commitment.CONFIRMED)
        if commitment.status == Commitment.CONFIRMED:
            return commitment
        commitment.status = Commitment.CONFIRMED
        commitment.confirmed_at = timezone.now()
        commitment.save(update_fields=["status", "confirmed_at", "updated_at"])
    logger.info("Commitment id=%s confirmed by %s", commitment.pk, actor_id)
    return commitment


def cancel(scope: Scope, commitment_id, actor_id, reason: str = "") -> Commitment:
    with transaction.atomic():
        commitment = _get_commitment(scope, commitment_id, lock=True)
        if commitment.status == Commitment.CANCELLED:
            return commitment
        commitment.status = Commitment.CANCELLED
        commitment.cancelled_at = timezone.now()
        if reason:
            commitment.notes = f"{commitment.notes}\n[Cancelled] {reason}".strip()
        commitment.save(update_fields=["status", "cancelled_at", "notes", "updated_at"])
    logger.info("Commitment id=%s cancelled by %s", commitment.pk, actor_id)
    return commitment


def reschedule(scope: Scope, commitment_id, candidate: Interval, actor_id) -> Commitment:
    validate(candidate)
    with transaction.atomic():
        commitment = _get_commitment(scope, commitment_id)
        if commitment.status == Commitment.CANCELLED:
            raise InvalidTransition(commitment.status, "rescheduled")
        resource = _lock_resource(scope, commitment.resource_id)
        if not resource.is_active:
            raise PolicyError(
                PolicyError.RESOURCE_INACTIVE,
                f"{resource.code} is inactive or under maintenance",
                resource_id=resource.pk,
            )
        commitment = _get_commitment(scope, commitment_id, lock=True)
        check(
            resource.pk,
            candidate,
            _commitments_on(scope, resource.pk, candidate.date),
            exclude_id=commitment.pk,
        )
        previous = commitment.interval
        commitment.date = candidate.date
        commitment.start_time = candidate.start
        commitment.end_time = candidate.end
        commitment.save(update_fields=["date", "start_time", "end_time", "updated_at"])
    logger.info("Commitment id=%s moved from %s to %s by %s", commitment.pk, previous, candidate, actor_id)
    return commitment


def set_maintenance(scope: Scope, resource_id, actor_id, reason: str = "") -> int:
    """Deactivate a resource and cancel its upcoming live commitments. Returns how many were cancelled."""
    now = timezone.localtime()
    note = f"Maintenance: {reason}" if reason else "Scheduled maintenance"
    with transaction.atomic():
        resource = _lock_resource(scope, resource_id)
        # Not limited to scope.academic_year_id: the resource leaves service for every year
        upcoming = (
            Commitment.objects.filter(tenant_id=scope.tenant_id, resource=resource)
            .exclude(status=Commitment.CANCELLED)
            .filter(Q(date__gt=now.date()) | Q(date=now.date(), start_time__gt=now.time()))
        )
        cancelled = upcoming.update(status=Commitment.CANCELLED, cancelled_at=timezone.now(), notes=note)
        resource.is_active = False
        if reason:
            resource.description = f"{resource.description}\n[Maintenance] {reason}".strip()
        resource.save(update_fields=["is_active", "description", "updated_at"])
    logger.info(
        "Resource id=%s put under maintenance by %s; cancelled %s upcoming commitment(s)",
        resource.pk, actor_id, cancelled,
    )
    return cancelled


def reactivate(scope: Scope, resource_id, actor_id) -> Resource:
    with transaction.atomic():
        resource = _lock_resource(scope, resource_id)
        resource.is_active = True
        resource.save(update_fields=["is_active", "updated_at"])
    logger.info("Resource id=%s reactivated by %s", resource.pk, actor_id)
    return resource
