from django.contrib.contenttypes.fields import GenericForeignKey
from django.contrib.contenttypes.models import ContentType
from django.core.exceptions import ValidationError
from django.db import models

from .exceptions import InvalidInterval
from .intervals import Interval, validate


class Resource(models.Model):
    KIND_CHOICES = [
        ("CLASSROOM", "Classroom"),
        ("LAB", "Laboratory"),
        ("IT", "IT room"),
        ("EXAM", "Exam hall"),
        ("VEHICLE", "Vehicle"),
        ("OTHER", "Other"),
    ]

    tenant_id = models.CharField(max_length=64, db_index=True)
    code = models.CharField(max_length=32)
    name = models.CharField(max_length=120)
    kind = models.CharField(max_length=16, choices=KIND_CHOICES, default="CLASSROOM")
    capacity = models.PositiveIntegerField(default=0)
    is_active = models.BooleanField(default=True)
    # Member of the multi-purpose pool flexible/mixed classes draw from
    is_shareable = models.BooleanField(default=False)
    description = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["tenant_id", "code"], name="uniq_resource_code_per_tenant"),
        ]
        ordering = ["code", "name"]

    def __str__(self):
        return f"{self.code} - {self.name} (cap {self.capacity})"


class SchoolClass(models.Model):
    LEVEL_CHOICES = [
        ("early-years", "Early years"),
        ("primary", "Primary"),
        ("lower-secondary", "Lower secondary"),
        ("upper-secondary", "Upper secondary"),
    ]

    tenant_id = models.CharField(max_length=64, db_index=True)
    academic_year_id = models.CharField(max_length=64)
    name = models.CharField(max_length=64)
    education_level = models.CharField(max_length=32, choices=LEVEL_CHOICES)
    assigned_resource = models.ForeignKey(
        Resource, null=True, blank=True, on_delete=models.SET_NULL, related_name="assigned_classes"
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name_plural = "school classes"

    @property
    def category(self):
        return self.education_level

    def __str__(self):
        return f"{self.name} ({self.get_education_level_display()})"


class Commitment(models.Model):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    STATUS_CHOICES = [
        (PENDING, "Pending"),
        (CONFIRMED, "Confirmed"),
        (CANCELLED, "Cancelled"),
    ]
    KIND_CHOICES = [
        ("CLASS", "Class"),
        ("LAB", "Lab session"),
        ("EXAM", "Exam"),
        ("EVENT", "Event"),
        ("TRIP", "Trip"),
    ]

    tenant_id = models.CharField(max_length=64)
    academic_year_id = models.CharField(max_length=64)
    resource = models.ForeignKey(Resource, on_delete=models.PROTECT, related_name="commitments")
    date = models.DateField()
    start_time = models.TimeField()
    end_time = models.TimeField()
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=PENDING)
    kind = models.CharField(max_length=16, choices=KIND_CHOICES, default="CLASS")
    purpose = models.CharField(max_length=200, blank=True)
    requester_id = models.CharField(max_length=64)
    consumer = models.ForeignKey(
        SchoolClass, null=True, blank=True, on_delete=models.PROTECT, related_name="commitments"
    )
    notes = models.TextField(blank=True)
    confirmed_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [
            models.Index(fields=["tenant_id", "academic_year_id", "resource", "date"], name="commitment_resource_day"),
        ]
        ordering = ["date", "start_time"]

    @property
    def interval(self):
        return Interval(self.date, self.start_time, self.end_time)

    @property
    def is_live(self):
        return self.status != self.CANCELLED

    def clean(self):
        try:
            validate(self.interval)
        except InvalidInterval as e:
            raise ValidationError(e.message, code=e.code)

    def __str__(self):
        return f"{self.resource.code} {self.interval} [{self.status}]"


class TeacherAssignment(models.Model):
    ALL_SUBJECTS = "all_subjects"
    PER_SUBJECT = "per_subject"
    MODE_CHOICES = [
        (ALL_SUBJECTS, "One teacher for all subjects"),
        (PER_SUBJECT, "One teacher per subject"),
    ]

    tenant_id = models.CharField(max_length=64)
    academic_year_id = models.CharField(max_length=64)
    school_class = models.ForeignKey(SchoolClass, on_delete=models.CASCADE, related_name="teacher_assignments")
    teacher_id = models.CharField(max_length=64)
    # Empty for all-subjects assignments
    subject_id = models.CharField(max_length=64, blank=True, default="")
    mode = models.CharField(max_length=16, choices=MODE_CHOICES)
    assigned_by = models.CharField(max_length=64)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["school_class", "subject_id"], name="uniq_class_subject_teacher"),
        ]

    def __str__(self):
        subject = self.subject_id or "all subjects"
        return f"{self.school_class} / {subject} -> {self.teacher_id}"


class MealEnrollment(models.Model):
    tenant_id = models.CharField(max_length=64, db_index=True)
    academic_year_id = models.CharField(max_length=64)
    student_ref = models.CharField(max_length=64)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"Canteen enrollment {self.pk} ({self.student_ref})"


class TransportAssignment(models.Model):
    tenant_id = models.CharField(max_length=64, db_index=True)
    academic_year_id = models.CharField(max_length=64)
    student_ref = models.CharField(max_length=64)
    vehicle = models.ForeignKey(Resource, on_delete=models.PROTECT, related_name="transport_assignments")
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.student_ref} on {self.vehicle.code}"


class Fact(models.Model):
    tenant_id = models.CharField(max_length=64)
    academic_year_id = models.CharField(max_length=64)
    entity_type = models.ForeignKey(ContentType, on_delete=models.PROTECT)
    entity_id = models.PositiveBigIntegerField()
    entity = GenericForeignKey("entity_type", "entity_id")
    date = models.DateField()
    # Sub-dimension of the same subject on the same day (meal type, trip direction, slot)
    kind = models.CharField(max_length=32)
    status = models.CharField(max_length=16)
    note = models.TextField(blank=True)
    recorded_by = models.CharField(max_length=64)
    updated_by = models.CharField(max_length=64, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["entity_type", "entity_id", "date", "kind"],
                name="uniq_fact_natural_key",
            ),
        ]

    def __str__(self):
        return f"{self.entity_type.model}#{self.entity_id} {self.date} {self.kind}: {self.status}"
