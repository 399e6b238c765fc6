import datetime as dt
from unittest import mock

from django.contrib.auth import get_user_model
from django.contrib.contenttypes.models import ContentType
from django.db import IntegrityError, transaction
from django.test import TestCase, override_settings

from scheduling import facts
from scheduling.exceptions import InvalidStatus, UnknownEntity
from scheduling.facts import FactPayload, NaturalKey
from scheduling.models import Fact, MealEnrollment, Resource, TransportAssignment
from scheduling.scope import Scope

DAY = dt.date(2024, 3, 4)
MEAL = "scheduling.mealenrollment"


class RecordTests(TestCase):
    def setUp(self):
        self.scope = Scope("tenant-a", "2023-2024")
        self.enrollment = MealEnrollment.objects.create(
            tenant_id="tenant-a", academic_year_id="2023-2024", student_ref="student-42"
        )

    def key(self, kind="LUNCH", day=DAY, entity_id=None):
        return NaturalKey(MEAL, entity_id or self.enrollment.pk, day, kind)

    def test_first_report_creates_fact(self):
        fact = facts.record(self.scope, self.key(), FactPayload("PRESENT"), "staff-1")
        self.assertEqual(fact.status, "PRESENT")
        self.assertEqual(fact.recorded_by, "staff-1")
        self.assertEqual(fact.updated_by, "")
        self.assertEqual(fact.entity, self.enrollment)

    def test_second_report_updates_in_place(self):
        first = facts.record(self.scope, self.key(), FactPayload("PRESENT"), "staff-1")
        second = facts.record(self.scope, self.key(), FactPayload("ABSENT", "Sick"), "staff-2")

        self.assertEqual(Fact.objects.count(), 1)
        self.assertEqual(second.pk, first.pk)
        fact = Fact.objects.get()
        self.assertEqual(fact.status, "ABSENT")
        self.assertEqual(fact.note, "Sick")
        self.assertEqual(fact.recorded_by, "staff-1")
        self.assertEqual(fact.updated_by, "staff-2")
        self.assertEqual(fact.created_at, first.created_at)

    def test_repeating_identical_report_is_a_no_op(self):
        first = facts.record(self.scope, self.key(), FactPayload("PRESENT"), "staff-1")
        again = facts.record(self.scope, self.key(), FactPayload("PRESENT"), "staff-2")
        self.assertEqual(Fact.objects.count(), 1)
        self.assertEqual(again.updated_at, first.updated_at)
        self.assertEqual(again.updated_by, "")

    def test_kinds_and_dates_are_separate_facts(self):
        facts.record(self.scope, self.key("LUNCH"), FactPayload("PRESENT"), "staff-1")
        facts.record(self.scope, self.key("BREAKFAST"), FactPayload("ABSENT"), "staff-1")
        facts.record(self.scope, self.key("LUNCH", day=DAY + dt.timedelta(days=1)), FactPayload("PRESENT"), "staff-1")
        self.assertEqual(Fact.objects.count(), 3)

    def test_same_id_on_another_entity_type_is_a_separate_fact(self):
        bus = Resource.objects.create(tenant_id="tenant-a", code="BUS1", name="Bus 1", kind="VEHICLE")
        ride = TransportAssignment.objects.create(
            tenant_id="tenant-a", academic_year_id="2023-2024", student_ref="student-42", vehicle=bus
        )
        facts.record(self.scope, self.key("MORNING"), FactPayload("PRESENT"), "driver-1")
        facts.record(
            self.scope,
            NaturalKey("scheduling.transportassignment", ride.pk, DAY, "MORNING"),
            FactPayload("ABSENT"),
            "driver-1",
        )
        self.assertEqual(Fact.objects.count(), 2)

    def test_unrecognised_status_is_rejected(self):
        with self.assertRaises(InvalidStatus):
            facts.record(self.scope, self.key(), FactPayload("MAYBE"), "staff-1")
        self.assertFalse(Fact.objects.exists())

    def test_unknown_model_label_is_rejected(self):
        with self.assertRaises(UnknownEntity):
            facts.record(self.scope, NaturalKey("scheduling.nothing", 1, DAY, "LUNCH"), FactPayload("PRESENT"), "x")
        with self.assertRaises(UnknownEntity):
            facts.record(self.scope, NaturalKey("not-a-label", 1, DAY, "LUNCH"), FactPayload("PRESENT"), "x")

    def test_missing_subject_is_rejected(self):
        with self.assertRaises(UnknownEntity):
            facts.record(self.scope, self.key(entity_id=self.enrollment.pk + 100), FactPayload("PRESENT"), "x")
        self.assertFalse(Fact.objects.exists())

    def test_subject_of_another_tenant_is_rejected(self):
        with self.assertRaises(UnknownEntity):
            facts.record(Scope("tenant-b", "2023-2024"), self.key(), FactPayload("PRESENT"), "x")

    def test_models_outside_the_subject_list_are_rejected(self):
        user = get_user_model().objects.create_user("clerk", password="password")
        content_type = ContentType.objects.get_for_model(MealEnrollment)
        for label, pk in [("auth.user", user.pk), ("contenttypes.contenttype", content_type.pk)]:
            with self.assertRaises(UnknownEntity):
                facts.record(self.scope, NaturalKey(label, pk, DAY, "LUNCH"), FactPayload("PRESENT"), "x")
        self.assertFalse(Fact.objects.exists())

    @override_settings(SCHEDULING={"FACT_SUBJECTS": ["auth.user", "scheduling.mealenrollment"]})
    def test_listed_subject_without_tenant_is_rejected(self):
        user = get_user_model().objects.create_user("clerk", password="password")
        with self.assertRaises(UnknownEntity):
            facts.record(self.scope, NaturalKey("auth.user", user.pk, DAY, "LUNCH"), FactPayload("PRESENT"), "x")
        facts.record(self.scope, self.key(), FactPayload("PRESENT"), "x")
        self.assertEqual(Fact.objects.count(), 1)

    @override_settings(SCHEDULING={"FACT_SUBJECTS": ["scheduling.mealenrollment"]})
    def test_subject_list_is_configurable(self):
        room = Resource.objects.create(tenant_id="tenant-a", code="R1", name="Room 1")
        with self.assertRaises(UnknownEntity):
            facts.record(self.scope, NaturalKey("scheduling.resource", room.pk, DAY, "P1"), FactPayload("OCCUPIED"), "x")

    def test_resource_slot_occupancy(self):
        room = Resource.objects.create(tenant_id="tenant-a", code="R1", name="Room 1")
        key = NaturalKey("scheduling.resource", room.pk, DAY, "P1")
        facts.record(self.scope, key, FactPayload("OCCUPIED"), "staff-1")
        fact = facts.record(self.scope, key, FactPayload("VACANT"), "staff-1")
        self.assertEqual(fact.status, "VACANT")
        self.assertEqual(Fact.objects.filter(entity_id=room.pk).count(), 1)

    def test_storage_rejects_duplicate_natural_key(self):
        facts.record(self.scope, self.key(), FactPayload("PRESENT"), "staff-1")
        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                Fact.objects.create(
                    tenant_id="tenant-a",
                    academic_year_id="2023-2024",
                    entity_type=ContentType.objects.get_for_model(MealEnrollment),
                    entity_id=self.enrollment.pk,
                    date=DAY,
                    kind="LUNCH",
                    status="ABSENT",
                    recorded_by="staff-2",
                )


class ConcurrentRecordTests(TestCase):
    """Another writer inserts the same key between our read and our insert."""

    def setUp(self):
        self.scope = Scope("tenant-a", "2023-2024")
        self.enrollment = MealEnrollment.objects.create(
            tenant_id="tenant-a", academic_year_id="2023-2024", student_ref="student-42"
        )
        self.key = NaturalKey(MEAL, self.enrollment.pk, DAY, "LUNCH")
        self.winner = facts.record(self.scope, self.key, FactPayload("PRESENT"), "staff-1")

    def test_losing_insert_updates_the_winning_row(self):
        # The first read misses the row the other writer committed
        with mock.patch("scheduling.facts._existing_fact", return_value=None):
            fact = facts.record(self.scope, self.key, FactPayload("ABSENT", "Left early"), "staff-2")

        self.assertEqual(fact.pk, self.winner.pk)
        self.assertEqual(Fact.objects.count(), 1)
        stored = Fact.objects.get()
        self.assertEqual(stored.status, "ABSENT")
        self.assertEqual(stored.note, "Left early")
        self.assertEqual(stored.recorded_by, "staff-1")
        self.assertEqual(stored.updated_by, "staff-2")
        self.assertEqual(stored.created_at, self.winner.created_at)

    def test_losing_insert_with_same_payload_leaves_row_alone(self):
        with mock.patch("scheduling.facts._existing_fact", return_value=None):
            fact = facts.record(self.scope, self.key, FactPayload("PRESENT"), "staff-2")
        self.assertEqual(fact.pk, self.winner.pk)
        self.assertEqual(Fact.objects.get().updated_by, "")


class FactsForTests(TestCase):
    def setUp(self):
        self.scope = Scope("tenant-a", "2023-2024")
        self.enrollment = MealEnrollment.objects.create(
            tenant_id="tenant-a", academic_year_id="2023-2024", student_ref="student-7"
        )
        for kind, status in [("LUNCH", "PRESENT"), ("BREAKFAST", "LATE")]:
            facts.record(
                self.scope, NaturalKey(MEAL, self.enrollment.pk, DAY, kind), FactPayload(status), "staff-1"
            )

    def test_lists_facts_of_the_day_by_kind(self):
        rows = list(facts.facts_for(self.scope, MEAL, self.enrollment.pk, DAY))
        self.assertEqual([f.kind for f in rows], ["BREAKFAST", "LUNCH"])

    def test_other_days_are_empty(self):
        self.assertFalse(facts.facts_for(self.scope, MEAL, self.enrollment.pk, DAY + dt.timedelta(days=1)).exists())

    def test_other_academic_year_sees_nothing(self):
        self.assertFalse(facts.facts_for(Scope("tenant-a", "2024-2025"), MEAL, self.enrollment.pk, DAY).exists())
