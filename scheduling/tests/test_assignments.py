from django.test import TestCase, override_settings

from scheduling import assignments
from scheduling.assignments import AllSubjects, PerSubject, build_assignment
from scheduling.exceptions import PolicyError, UnknownEntity
from scheduling.models import SchoolClass, TeacherAssignment
from scheduling.scope import Scope


class AssignTeacherTests(TestCase):
    def setUp(self):
        self.scope = Scope("t1", "y1")
        self.primary = SchoolClass.objects.create(
            tenant_id="t1", academic_year_id="y1", name="CM1 A", education_level="primary"
        )
        self.secondary = SchoolClass.objects.create(
            tenant_id="t1", academic_year_id="y1", name="Terminale S", education_level="upper-secondary"
        )

    def test_fixed_category_gets_one_teacher_for_all_subjects(self):
        self.assertEqual(build_assignment(self.primary, "teacher-1"), AllSubjects(self.primary.pk, "teacher-1"))

    def test_fixed_category_rejects_a_subject(self):
        with self.assertRaises(PolicyError) as ctx:
            build_assignment(self.primary, "teacher-1", "math")
        self.assertEqual(ctx.exception.rule, PolicyError.ASSIGNMENT_MODE_MISMATCH)

    def test_other_categories_need_a_subject(self):
        self.assertEqual(
            build_assignment(self.secondary, "teacher-2", "math"), PerSubject(self.secondary.pk, "math", "teacher-2")
        )
        with self.assertRaises(PolicyError):
            build_assignment(self.secondary, "teacher-2")

    def test_reassigning_replaces_the_teacher(self):
        assignments.assign_teacher(self.scope, self.secondary, "teacher-2", "math", actor_id="admin")
        row = assignments.assign_teacher(self.scope, self.secondary, "teacher-3", "math", actor_id="admin")
        self.assertEqual(row.teacher_id, "teacher-3")
        self.assertEqual(TeacherAssignment.objects.filter(school_class=self.secondary).count(), 1)

    def test_one_row_per_subject(self):
        assignments.assign_teacher(self.scope, self.secondary, "teacher-2", "math")
        assignments.assign_teacher(self.scope, self.secondary, "teacher-4", "physics")
        self.assertEqual(
            set(self.secondary.teacher_assignments.values_list("subject_id", "teacher_id")),
            {("math", "teacher-2"), ("physics", "teacher-4")},
        )

    def test_switching_mode_drops_rows_of_the_old_mode(self):
        assignments.assign_teacher(self.scope, self.secondary, "teacher-2", "math")
        with override_settings(SCHEDULING={"CATEGORY_MODES": {"upper-secondary": "fixed"}}):
            row = assignments.assign_teacher(self.scope, self.secondary, "teacher-5")
        self.assertEqual(row.mode, TeacherAssignment.ALL_SUBJECTS)
        self.assertEqual(list(self.secondary.teacher_assignments.values_list("subject_id", flat=True)), [""])

    def test_class_of_another_tenant_is_unknown(self):
        with self.assertRaises(UnknownEntity):
            assignments.assign_teacher(Scope("t2", "y1"), self.primary, "teacher-1")
