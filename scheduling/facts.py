"""
Idempotent recording of per-day status facts (attendance, slot occupancy).

A fact is identified by its natural key: the subject record, the date and a
kind (meal type, trip direction, slot label). Reporting the same key again
updates the existing fact in place; the first recorder and creation time are
kept.
"""
import datetime as dt
import logging
from dataclasses import dataclass

from django.apps import apps
from django.contrib.contenttypes.models import ContentType
from django.db import IntegrityError, transaction

from .conf import get_setting
from .exceptions import InvalidStatus, UnknownEntity
from .models import Fact
from .scope import Scope

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NaturalKey:
    entity: str  # model label, e.g. "scheduling.mealenrollment"
    entity_id: int
    date: dt.date
    kind: str


@dataclass(frozen=True)
class FactPayload:
    status: str
    note: str = ""


def resolve_entity(scope: Scope, entity, entity_id):
    try:
        model = apps.get_model(entity)
    except (LookupError, ValueError):
        raise UnknownEntity(entity, entity_id)
    subjects = {label.lower() for label in get_setting("FACT_SUBJECTS")}
    if model._meta.label_lower not in subjects:
        logger.debug("Refused fact subject %s: not a configured subject model", model._meta.label_lower)
        raise UnknownEntity(entity, entity_id)
    try:
        instance = model._default_manager.filter(pk=entity_id).first()
    except (TypeError, ValueError):
        instance = None
    # A subject with no tenant belongs to nobody, so nobody may report against it
    if instance is None or getattr(instance, "tenant_id", None) != scope.tenant_id:
        raise UnknownEntity(entity, entity_id)
    return instance


def _existing_fact(lookup):
    return Fact.objects.select_for_update().filter(**lookup).first()


def _key_filter(entity_type, key: NaturalKey):
    return {
        "entity_type": entity_type,
        "entity_id": key.entity_id,
        "date": key.date,
        "kind": key.kind,
    }


def record(scope: Scope, key: NaturalKey, payload: FactPayload, actor_id) -> Fact:
    if payload.status not in get_setting("FACT_STATUSES"):
        raise InvalidStatus(payload.status)
    instance = resolve_entity(scope, key.entity, key.entity_id)
    entity_type = ContentType.objects.get_for_model(instance)
    lookup = _key_filter(entity_type, key)

    with transaction.atomic():
        fact = _existing_fact(lookup)
        if fact is None:
            try:
                # Savepoint: a concurrent insert of the same key trips the unique constraint
                with transaction.atomic():
                    fact = Fact.objects.create(
                        tenant_id=scope.tenant_id,
                        academic_year_id=scope.academic_year_id,
                        status=payload.status,
                        note=payload.note,
                        recorded_by=actor_id,
                        **lookup,
                    )
                logger.info("Recorded %s for %s#%s on %s [%s]", payload.status, key.entity, key.entity_id, key.date, key.kind)
                return fact
            except IntegrityError:
                logger.debug("Concurrent insert for %s; updating the winner instead", key)
                fact = Fact.objects.select_for_update().get(**lookup)

        if fact.status == payload.status and fact.note == payload.note:
            return fact
        fact.status = payload.status
        fact.note = payload.note
        fact.updated_by = actor_id
        fact.save(update_fields=["status", "note", "updated_by", "updated_at"])
    logger.info("Updated %s#%s on %s [%s] to %s", key.entity, key.entity_id, key.date, key.kind, payload.status)
    return fact


def facts_for(scope: Scope, entity, entity_id, day):
    instance = resolve_entity(scope, entity, entity_id)
    entity_type = ContentType.objects.get_for_model(instance)
    return Fact.objects.filter(
        tenant_id=scope.tenant_id,
        academic_year_id=scope.academic_year_id,
        entity_type=entity_type,
        entity_id=instance.pk,
        date=day,
    ).order_by("kind")
