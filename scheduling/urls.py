from django.urls import path

from . import views

urlpatterns = [
    path("resources/<int:resource_id>/commitments/", views.reserve_resource, name="reserve_resource"),
    path("resources/<int:resource_id>/occupation/", views.resource_occupation, name="resource_occupation"),
    path("resources/<int:resource_id>/week/", views.resource_week, name="resource_week"),
    path("resources/<int:resource_id>/maintenance/", views.resource_maintenance, name="resource_maintenance"),
    path("resources/statistics/", views.statistics, name="resource_statistics"),
    path("commitments/<int:commitment_id>/confirm/", views.confirm_commitment, name="confirm_commitment"),
    path("commitments/<int:commitment_id>/cancel/", views.cancel_commitment, name="cancel_commitment"),
    path("commitments/<int:commitment_id>/reschedule/", views.reschedule_commitment, name="reschedule_commitment"),
    path("classes/<int:class_id>/eligible-resources/", views.class_eligible_resources, name="class_eligible_resources"),
    path("classes/<int:class_id>/teachers/", views.assign_class_teacher, name="assign_class_teacher"),
    path("facts/", views.record_fact, name="record_fact"),
    path("facts/list/", views.list_facts, name="list_facts"),
]
