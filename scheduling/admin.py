from django.contrib import admin, messages

from . import conflicts
from .models import (Commitment, Fact, MealEnrollment, Resource, SchoolClass,
                     TeacherAssignment, TransportAssignment)
from .scope import Scope


def _actor(request):
    return str(request.user.pk)


def cancel_commitments(modeladmin, request, queryset):
    count = 0
    for commitment in queryset.exclude(status=Commitment.CANCELLED):
        scope = Scope(commitment.tenant_id, commitment.academic_year_id)
        conflicts.cancel(scope, commitment.pk, _actor(request), reason="Cancelled from admin")
        count += 1
    messages.warning(request, f"Cancelled {count} commitment(s).")
cancel_commitments.short_description = "Cancel selected commitments"


def put_under_maintenance(modeladmin, request, queryset):
    total = 0
    for resource in queryset.filter(is_active=True):
        # Maintenance spans academic years, only the tenant matters
        scope = Scope(resource.tenant_id, "")
        total += conflicts.set_maintenance(scope, resource.pk, _actor(request), reason="Set from admin")
    messages.warning(request, f"Resources under maintenance; cancelled {total} upcoming commitment(s).")
put_under_maintenance.short_description = "Put selected resources under maintenance"


class ResourceAdmin(admin.ModelAdmin):
    list_display = ("code", "name", "kind", "capacity", "is_active", "is_shareable", "tenant_id")
    list_filter = ("tenant_id", "kind", "is_active", "is_shareable")
    search_fields = ("code", "name", "description")
    actions = [put_under_maintenance]


class SchoolClassAdmin(admin.ModelAdmin):
    list_display = ("name", "education_level", "assigned_resource", "tenant_id", "academic_year_id")
    list_filter = ("tenant_id", "academic_year_id", "education_level")


class CommitmentAdmin(admin.ModelAdmin):
    list_display = (
        "resource",
        "date",
        "start_time",
        "end_time",
        "status",
        "kind",
        "consumer",
        "requester_id",
    )
    list_filter = ("tenant_id", "academic_year_id", "status", "kind", "resource")
    date_hierarchy = "date"
    actions = [cancel_commitments]


class FactAdmin(admin.ModelAdmin):
    list_display = ("entity_type", "entity_id", "date", "kind", "status", "recorded_by", "updated_at")
    list_filter = ("tenant_id", "entity_type", "kind", "status")
    readonly_fields = ("recorded_by", "created_at", "updated_at")


class TeacherAssignmentAdmin(admin.ModelAdmin):
    list_display = ("school_class", "subject_id", "teacher_id", "mode")
    list_filter = ("tenant_id", "academic_year_id", "mode")


admin.site.register(Resource, ResourceAdmin)
admin.site.register(SchoolClass, SchoolClassAdmin)
admin.site.register(Commitment, CommitmentAdmin)
admin.site.register(Fact, FactAdmin)
admin.site.register(TeacherAssignment, TeacherAssignmentAdmin)
admin.site.register(MealEnrollment)
admin.site.register(TransportAssignment)
