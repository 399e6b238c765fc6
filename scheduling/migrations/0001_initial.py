import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("contenttypes", "0002_remove_content_type_name"),
    ]

    operations = [
        migrations.CreateModel(
            name="Resource",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("tenant_id", models.CharField(db_index=True, max_length=64)),
                ("code", models.CharField(max_length=32)),
                ("name", models.CharField(max_length=120)),
                (
                    "kind",
                    models.CharField(
                        choices=[
                            ("CLASSROOM", "Classroom"),
                            ("LAB", "Laboratory"),
                            ("IT", "IT room"),
                            ("EXAM", "Exam hall"),
                            ("VEHICLE", "Vehicle"),
                            ("OTHER", "Other"),
                        ],
                        default="CLASSROOM",
                        max_length=16,
                    ),
                ),
                ("capacity", models.PositiveIntegerField(default=0)),
                ("is_active", models.BooleanField(default=True)),
                ("is_shareable", models.BooleanField(default=False)),
                ("description", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["code", "name"],
            },
        ),
        migrations.AddConstraint(
            model_name="resource",
            constraint=models.UniqueConstraint(fields=("tenant_id", "code"), name="uniq_resource_code_per_tenant"),
        ),
        migrations.CreateModel(
            name="SchoolClass",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("tenant_id", models.CharField(db_index=True, max_length=64)),
                ("academic_year_id", models.CharField(max_length=64)),
                ("name", models.CharField(max_length=64)),
                (
                    "education_level",
                    models.CharField(
                        choices=[
                            ("early-years", "Early years"),
                            ("primary", "Primary"),
                            ("lower-secondary", "Lower secondary"),
                            ("upper-secondary", "Upper secondary"),
                        ],
                        max_length=32,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "assigned_resource",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="assigned_classes",
                        to="scheduling.resource",
                    ),
                ),
            ],
            options={
                "verbose_name_plural": "school classes",
            },
        ),
        migrations.CreateModel(
            name="Commitment",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("tenant_id", models.CharField(max_length=64)),
                ("academic_year_id", models.CharField(max_length=64)),
                ("date", models.DateField()),
                ("start_time", models.TimeField()),
                ("end_time", models.TimeField()),
                (
                    "status",
                    models.CharField(
                        choices=[("pending", "Pending"), ("confirmed", "Confirmed"), ("cancelled", "Cancelled")],
                        default="pending",
                        max_length=16,
                    ),
                ),
                (
                    "kind",
                    models.CharField(
                        choices=[
                            ("CLASS", "Class"),
                            ("LAB", "Lab session"),
                            ("EXAM", "Exam"),
                            ("EVENT", "Event"),
                            ("TRIP", "Trip"),
                        ],
                        default="CLASS",
                        max_length=16,
                    ),
                ),
                ("purpose", models.CharField(blank=True, max_length=200)),
                ("requester_id", models.CharField(max_length=64)),
                ("notes", models.TextField(blank=True)),
                ("confirmed_at", models.DateTimeField(blank=True, null=True)),
                ("cancelled_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "resource",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="commitments",
                        to="scheduling.resource",
                    ),
                ),
                (
                    "consumer",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="commitments",
                        to="scheduling.schoolclass",
                    ),
                ),
            ],
            options={
                "ordering": ["date", "start_time"],
            },
        ),
        migrations.AddIndex(
            model_name="commitment",
            index=models.Index(
                fields=["tenant_id", "academic_year_id", "resource", "date"], name="commitment_resource_day"
            ),
        ),
        migrations.CreateModel(
            name="TeacherAssignment",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("tenant_id", models.CharField(max_length=64)),
                ("academic_year_id", models.CharField(max_length=64)),
                ("teacher_id", models.CharField(max_length=64)),
                ("subject_id", models.CharField(blank=True, default="", max_length=64)),
                (
                    "mode",
                    models.CharField(
                        choices=[
                            ("all_subjects", "One teacher for all subjects"),
                            ("per_subject", "One teacher per subject"),
                        ],
                        max_length=16,
                    ),
                ),
                ("assigned_by", models.CharField(max_length=64)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "school_class",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="teacher_assignments",
                        to="scheduling.schoolclass",
                    ),
                ),
            ],
        ),
        migrations.AddConstraint(
            model_name="teacherassignment",
            constraint=models.UniqueConstraint(fields=("school_class", "subject_id"), name="uniq_class_subject_teacher"),
        ),
        migrations.CreateModel(
            name="MealEnrollment",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("tenant_id", models.CharField(db_index=True, max_length=64)),
                ("academic_year_id", models.CharField(max_length=64)),
                ("student_ref", models.CharField(max_length=64)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
        ),
        migrations.CreateModel(
            name="TransportAssignment",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("tenant_id", models.CharField(db_index=True, max_length=64)),
                ("academic_year_id", models.CharField(max_length=64)),
                ("student_ref", models.CharField(max_length=64)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "vehicle",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="transport_assignments",
                        to="scheduling.resource",
                    ),
                ),
            ],
        ),
        migrations.CreateModel(
            name="Fact",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("tenant_id", models.CharField(max_length=64)),
                ("academic_year_id", models.CharField(max_length=64)),
                ("entity_id", models.PositiveBigIntegerField()),
                ("date", models.DateField()),
                ("kind", models.CharField(max_length=32)),
                ("status", models.CharField(max_length=16)),
                ("note", models.TextField(blank=True)),
                ("recorded_by", models.CharField(max_length=64)),
                ("updated_by", models.CharField(blank=True, max_length=64)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "entity_type",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        to="contenttypes.contenttype",
                    ),
                ),
            ],
        ),
        migrations.AddConstraint(
            model_name="fact",
            constraint=models.UniqueConstraint(
                fields=("entity_type", "entity_id", "date", "kind"), name="uniq_fact_natural_key"
            ),
        ),
    ]
