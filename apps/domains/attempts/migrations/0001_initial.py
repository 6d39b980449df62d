from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("exams", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Attempt",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("candidate_name", models.CharField(max_length=255)),
                ("candidate_email", models.EmailField(db_index=True, max_length=254)),
                ("candidate_external_id", models.CharField(blank=True, default="", max_length=128)),
                ("candidate_phone", models.CharField(blank=True, default="", max_length=32)),
                ("candidate_chat_id", models.BigIntegerField(blank=True, null=True)),
                ("access_token", models.CharField(editable=False, max_length=64, unique=True)),
                ("expires_at", models.DateTimeField(db_index=True)),
                ("is_presentation", models.BooleanField(default=False)),
                ("questions_snapshot", models.JSONField(blank=True, default=list, editable=False)),
                ("answers", models.JSONField(blank=True, default=list)),
                ("graded_answers", models.JSONField(blank=True, default=list)),
                ("score", models.DecimalField(blank=True, decimal_places=2, max_digits=7, null=True)),
                ("max_score", models.DecimalField(blank=True, decimal_places=2, max_digits=7, null=True)),
                ("percentage", models.DecimalField(blank=True, decimal_places=2, max_digits=5, null=True)),
                ("passed", models.BooleanField(blank=True, null=True)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("in_progress", "In progress"),
                            ("completed", "Completed"),
                            ("needs_review", "Needs review"),
                            ("timeout", "Timeout"),
                            ("escaped", "Escaped"),
                        ],
                        db_index=True,
                        default="pending",
                        max_length=20,
                    ),
                ),
                ("started_at", models.DateTimeField(blank=True, null=True)),
                ("completed_at", models.DateTimeField(blank=True, null=True)),
                ("last_heartbeat_at", models.DateTimeField(blank=True, null=True)),
                ("time_spent_seconds", models.PositiveIntegerField(blank=True, null=True)),
                ("violation_count", models.PositiveIntegerField(default=0)),
                ("suspicious_activity", models.JSONField(blank=True, default=list)),
                ("presentation_link", models.URLField(blank=True, default="", max_length=1000)),
                ("presentation_file", models.CharField(blank=True, default="", max_length=500)),
                ("presentation_grade", models.DecimalField(blank=True, decimal_places=2, max_digits=5, null=True)),
                ("presentation_comment", models.TextField(blank=True, default="")),
                ("graded_at", models.DateTimeField(blank=True, null=True)),
                ("metadata", models.JSONField(blank=True, default=dict)),
                ("deadline_notified", models.BooleanField(default=False)),
                (
                    "exam",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="attempts",
                        to="exams.exam",
                    ),
                ),
                (
                    "graded_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="graded_attempts",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "attempts_attempt",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["status", "expires_at"], name="attempt_status_expires_idx"),
                    models.Index(fields=["status", "created_at"], name="attempt_status_created_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        condition=models.Q(("status", "pending")),
                        fields=("candidate_email",),
                        name="uniq_pending_attempt_per_candidate",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="AnswerLog",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("question_id", models.IntegerField()),
                ("answer", models.JSONField(blank=True, null=True)),
                ("time_spent", models.PositiveIntegerField(blank=True, null=True)),
                ("marked_for_review", models.BooleanField(default=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "attempt",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="answer_logs",
                        to="attempts.attempt",
                    ),
                ),
            ],
            options={
                "db_table": "attempts_answer_log",
                "ordering": ["id"],
                "indexes": [models.Index(fields=["attempt", "question_id"], name="answer_log_attempt_q_idx")],
            },
        ),
    ]
