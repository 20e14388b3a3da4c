import uuid

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import F, Q
from django.utils import timezone


class Credential(models.Model):
    """
    A document submitted by a business owner to back a qualification claim.

    Only the verification engine changes ``verification_status``,
    ``verified_at`` and ``verified_by``. A pending credential carries no
    reviewer stamps; a decided one carries both.
    """

    class Status(models.TextChoices):
        PENDING = 'pending', 'Pending'
        VERIFIED = 'verified', 'Verified'
        REJECTED = 'rejected', 'Rejected'

    class Type(models.TextChoices):
        BUSINESS_LICENSE = 'business_license', 'Business license'
        PROFESSIONAL_LICENSE = 'professional_license', 'Professional license'
        INSURANCE = 'insurance', 'Insurance'
        CERTIFICATION = 'certification', 'Certification'
        OTHER = 'other', 'Other'

    DECIDED = (Status.VERIFIED, Status.REJECTED)

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    business = models.ForeignKey('businesses.Business', related_name='credentials', on_delete=models.CASCADE)
    credential_type = models.CharField(max_length=32, choices=Type.choices)
    credential_number = models.CharField(max_length=100, blank=True, null=True)
    issuing_authority = models.CharField(max_length=255, blank=True, null=True)
    issue_date = models.DateField(null=True, blank=True)
    # Advisory only; an expired document keeps whatever status it was given.
    expiry_date = models.DateField(null=True, blank=True)
    document_url = models.URLField(max_length=500, blank=True, null=True)
    verification_status = models.CharField(
        max_length=16,
        choices=Status.choices,
        default=Status.PENDING,
        db_index=True,
    )
    verified_at = models.DateTimeField(null=True, blank=True)
    verified_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='credentials_reviewed',
    )
    created_at = models.DateTimeField(default=timezone.now, editable=False)

    class Meta:
        db_table = 'business_credentials'
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['verification_status', 'created_at'], name='credential_status_created_idx'),
        ]
        constraints = [
            models.CheckConstraint(
                condition=(
                    Q(verification_status='pending', verified_at__isnull=True, verified_by__isnull=True)
                    | Q(
                        verification_status__in=['verified', 'rejected'],
                        verified_at__isnull=False,
                        verified_by__isnull=False,
                        verified_at__gte=F('created_at'),
                    )
                ),
                name='credential_review_stamps_match_status',
            ),
        ]

    def __str__(self):
        number = self.credential_number or 'no number'
        return f"{self.get_credential_type_display()} {number} ({self.verification_status})"

    @property
    def is_pending(self):
        return self.verification_status == self.Status.PENDING

    def clean(self):
        super().clean()
        stamped = (self.verified_at is not None, self.verified_by_id is not None)
        if self.verification_status == self.Status.PENDING:
            if any(stamped):
                raise ValidationError('A pending credential cannot carry a review date or reviewer.')
        elif self.verification_status in self.DECIDED:
            if not all(stamped):
                raise ValidationError('A decided credential must record when and by whom it was reviewed.')
            if self.created_at and self.verified_at < self.created_at:
                raise ValidationError({'verified_at': 'Review date cannot precede submission.'})
        if self.issue_date and self.expiry_date and self.expiry_date < self.issue_date:
            raise ValidationError({'expiry_date': 'Expiry date cannot precede the issue date.'})
