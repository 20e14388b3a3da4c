import uuid

import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("businesses", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Credential",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                (
                    "credential_type",
                    models.CharField(
                        choices=[
                            ("business_license", "Business license"),
                            ("professional_license", "Professional license"),
                            ("insurance", "Insurance"),
                            ("certification", "Certification"),
                            ("other", "Other"),
                        ],
                        max_length=32,
                    ),
                ),
                ("credential_number", models.CharField(blank=True, max_length=100, null=True)),
                ("issuing_authority", models.CharField(blank=True, max_length=255, null=True)),
                ("issue_date", models.DateField(blank=True, null=True)),
                ("expiry_date", models.DateField(blank=True, null=True)),
                ("document_url", models.URLField(blank=True, max_length=500, null=True)),
                (
                    "verification_status",
                    models.CharField(
                        choices=[("pending", "Pending"), ("verified", "Verified"), ("rejected", "Rejected")],
                        db_index=True,
                        default="pending",
                        max_length=16,
                    ),
                ),
                ("verified_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now, editable=False)),
                (
                    "business",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="credentials",
                        to="businesses.business",
                    ),
                ),
                (
                    "verified_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="credentials_reviewed",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "business_credentials",
                "ordering": ["-created_at", "-id"],
                "indexes": [
                    models.Index(fields=["verification_status", "created_at"], name="credential_status_created_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(
                            models.Q(verification_status="pending", verified_at__isnull=True, verified_by__isnull=True),
                            models.Q(
                                ("verification_status__in", ["verified", "rejected"]),
                                ("verified_at__isnull", False),
                                ("verified_by__isnull", False),
                                ("verified_at__gte", models.F("created_at")),
                            ),
                            _connector="OR",
                        ),
                        name="credential_review_stamps_match_status",
                    ),
                ],
            },
        ),
    ]
