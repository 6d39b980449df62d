from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Exam",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("title", models.CharField(max_length=255)),
                ("description", models.TextField(blank=True)),
                ("instructions", models.TextField(blank=True)),
                (
                    "exam_type",
                    models.CharField(
                        choices=[("question_based", "Question based"), ("presentation", "Presentation")],
                        default="question_based",
                        max_length=30,
                    ),
                ),
                ("questions", models.JSONField(blank=True, default=list)),
                ("presentation_themes", models.JSONField(blank=True, default=list)),
                ("presentation_extra_info", models.TextField(blank=True)),
                ("duration_minutes", models.PositiveIntegerField(default=45)),
                ("passing_score", models.DecimalField(decimal_places=2, default=70, max_digits=5)),
                ("is_active", models.BooleanField(default=True)),
                ("ai_metadata", models.JSONField(blank=True, null=True)),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="created_exams",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "exams_exam",
                "ordering": ["-created_at"],
            },
        ),
    ]
