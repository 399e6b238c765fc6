import logging
from dataclasses import dataclass
from typing import Optional, Union

from django.db import transaction

from .exceptions import PolicyError, UnknownEntity
from .models import TeacherAssignment
from .policy import assignment_mode
from .scope import Scope

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AllSubjects:
    class_id: int
    teacher_id: str


@dataclass(frozen=True)
class PerSubject:
    class_id: int
    subject_id: str
    teacher_id: str


Assignment = Union[AllSubjects, PerSubject]


def build_assignment(school_class, teacher_id, subject_id: Optional[str] = None) -> Assignment:
    mode = assignment_mode(school_class.category)
    if mode == TeacherAssignment.ALL_SUBJECTS:
        if subject_id:
            raise PolicyError(
                PolicyError.ASSIGNMENT_MODE_MISMATCH,
                f"{school_class} has one teacher for all subjects; no subject may be given",
                mode=mode,
            )
        return AllSubjects(school_class.pk, teacher_id)
    if not subject_id:
        raise PolicyError(
            PolicyError.ASSIGNMENT_MODE_MISMATCH,
            f"{school_class} needs a teacher per subject; a subject is required",
            mode=mode,
        )
    return PerSubject(school_class.pk, subject_id, teacher_id)


def assign_teacher(scope: Scope, school_class, teacher_id, subject_id=None, actor_id="system") -> TeacherAssignment:
    """Persist the class's teacher for one slot, replacing whoever held it."""
    if school_class.tenant_id != scope.tenant_id:
        raise UnknownEntity("class", school_class.pk)
    assignment = build_assignment(school_class, teacher_id, subject_id)
    if isinstance(assignment, AllSubjects):
        mode, subject_key = TeacherAssignment.ALL_SUBJECTS, ""
    else:
        mode, subject_key = TeacherAssignment.PER_SUBJECT, assignment.subject_id

    with transaction.atomic():
        row, created = TeacherAssignment.objects.update_or_create(
            school_class=school_class,
            subject_id=subject_key,
            defaults={
                "tenant_id": scope.tenant_id,
                "academic_year_id": scope.academic_year_id,
                "teacher_id": assignment.teacher_id,
                "mode": mode,
                "assigned_by": actor_id,
            },
        )
        # A class switching mode keeps no stale rows from the other mode
        TeacherAssignment.objects.filter(school_class=school_class).exclude(mode=mode).delete()
    logger.info(
        "%s teacher %s for class id=%s (%s)",
        "Assigned" if created else "Reassigned", assignment.teacher_id, school_class.pk, subject_key or "all subjects",
    )
    return row
