"""
Resource acquisition policy keyed by a class's education level.

- FIXED: the class keeps one permanently assigned room and never books.
- FLEXIBLE: the class draws every booking from the shareable pool.
- MIXED: the class may use its own room or fall back to the shareable pool.

The category table in ``SCHEDULING["CATEGORY_MODES"]`` is also what decides
whether a class gets one teacher for all subjects or one teacher per subject.
"""
import enum
import logging

from django.core.exceptions import ImproperlyConfigured

from .conf import get_setting
from .exceptions import PolicyError
from .models import TeacherAssignment

logger = logging.getLogger(__name__)


class AcquisitionMode(enum.Enum):
    FIXED = "fixed"
    FLEXIBLE = "flexible"
    MIXED = "mixed"


def category_table():
    table = {}
    for category, raw in get_setting("CATEGORY_MODES").items():
        try:
            table[category] = AcquisitionMode(str(raw).lower())
        except ValueError:
            raise ImproperlyConfigured(
                f"SCHEDULING['CATEGORY_MODES'][{category!r}] must be one of "
                f"{', '.join(m.value for m in AcquisitionMode)}, got {raw!r}"
            )
    return table


def resolve_mode(category) -> AcquisitionMode:
    table = category_table()
    if category not in table:
        raise PolicyError(
            PolicyError.UNKNOWN_CATEGORY,
            f"No acquisition mode configured for category {category!r}",
            category=category,
        )
    return table[category]


def requires_booking(mode: AcquisitionMode) -> bool:
    return mode is not AcquisitionMode.FIXED


def shareable_pool(resources):
    return {r for r in resources if r.is_active and r.is_shareable}


def eligible_resources(consumer, mode: AcquisitionMode, resources) -> set:
    assigned = consumer.assigned_resource
    if mode is AcquisitionMode.FIXED:
        if assigned is None:
            raise PolicyError(
                PolicyError.UNASSIGNED_FIXED_RESOURCE,
                f"{consumer} uses a fixed room but none is assigned",
                consumer_id=consumer.pk,
            )
        return {assigned}
    pool = shareable_pool(resources)
    if mode is AcquisitionMode.MIXED and assigned is not None:
        pool.add(assigned)
    return pool


def check_eligibility(consumer, resource, resources=None) -> AcquisitionMode:
    """Raise PolicyError unless ``consumer`` may book ``resource``; return the consumer's mode."""
    mode = resolve_mode(consumer.category)
    if mode is AcquisitionMode.FIXED:
        # Only the assigned room matters; the pool is never consulted
        eligible = eligible_resources(consumer, mode, [])
    else:
        eligible = eligible_resources(consumer, mode, [resource] if resources is None else resources)
    if resource not in eligible:
        logger.debug("Resource id=%s not eligible for class id=%s in %s mode", resource.pk, consumer.pk, mode.value)
        raise PolicyError(
            PolicyError.RESOURCE_NOT_ELIGIBLE,
            f"{resource.code} is not available to {consumer} ({mode.value} mode)",
            resource_id=resource.pk,
            consumer_id=consumer.pk,
            mode=mode.value,
        )
    return mode


def assignment_mode(category) -> str:
    if resolve_mode(category) is AcquisitionMode.FIXED:
        return TeacherAssignment.ALL_SUBJECTS
    return TeacherAssignment.PER_SUBJECT
