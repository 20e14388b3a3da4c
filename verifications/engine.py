"""
Verification engine: the credential review queue and the decision workflow.

A decision is recorded in two legs, always in this order:

1. the credential gets its status, review time and reviewer, written with a
   compare-and-swap on the status it had when it was read;
2. on approval only, the owning business gets ``is_verified = True``.

The legs are separate writes against separate records, each in its own
atomic block. If the second leg fails the credential stays decided and
``BusinessSyncFailed`` is raised; re-running the second leg (either by
``retry_business_sync`` or by re-issuing the same decision) is a no-op once
the flag is set. Rejection never touches the business.

Views must go through ``list_credentials``, ``decide`` and
``retry_business_sync``; nothing else in the project writes these fields.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, time

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import DatabaseError, transaction
from django.db.models import Count
from django.utils import timezone

from businesses.models import Business
from core.listing import DEFAULT_PAGE_SIZE, Filter, InvalidFilter, ListingQuery, Page, paginate
from core.models import AuditLog
from core.roles import is_reviewer

from .exceptions import (
    AlreadyDecided,
    BusinessNotFound,
    BusinessSyncFailed,
    Conflict,
    CredentialNotFound,
    CredentialNotVerified,
    CredentialWriteFailed,
    InvalidOutcome,
    ReviewerRequired,
    StorageFailure,
)
from .models import Credential

logger = logging.getLogger(__name__)

STATUS_ALL = 'all'
SEARCH_FIELDS = ('credential_number', 'issuing_authority', 'business__name', 'business__email')
FILTER_FIELDS = ('verification_status',) + SEARCH_FIELDS


@dataclass(frozen=True)
class Decision:
    credential: Credential
    outcome: str
    business_synced: bool
    replayed: bool = False


def _page_size():
    return getattr(settings, 'VERIFICATION_PAGE_SIZE', DEFAULT_PAGE_SIZE)


def _allow_redecide():
    return getattr(settings, 'VERIFICATION_ALLOW_REDECIDE', False)


# -------------------------
# Queries
# -------------------------
def list_credentials(status=Credential.Status.PENDING, search='', page=1, page_size=None) -> Page:
    """
    One page of the review queue, newest submissions first.

    ``status`` is a verification status or ``"all"``. ``search`` matches the
    credential number, issuing authority, business name or business email.
    Each credential comes with its business preloaded for display.
    """
    filters = []
    if status and status != STATUS_ALL:
        if status not in Credential.Status.values:
            raise InvalidFilter(f"Unknown verification status {status!r}")
        filters.append(Filter('verification_status', status))

    query = ListingQuery(
        filters=tuple(filters),
        search=search or '',
        search_fields=SEARCH_FIELDS,
        page=page,
        page_size=page_size or _page_size(),
    )
    try:
        return paginate(Credential.objects.select_related('business'), query, FILTER_FIELDS)
    except DatabaseError as exc:
        logger.exception("Failed to list credentials (status=%s, page=%s)", status, page)
        raise StorageFailure() from exc


def status_counts():
    counts = {value: 0 for value in Credential.Status.values}
    rows = Credential.objects.order_by().values('verification_status').annotate(total=Count('pk'))
    for row in rows:
        counts[row['verification_status']] = row['total']
    counts[STATUS_ALL] = sum(counts.values())
    return counts


def is_expired(credential, now=None):
    """True when the expiry date has started before ``now``. Informational only."""
    if credential.expiry_date is None:
        return False
    now = now or timezone.now()
    expires_at = timezone.make_aware(datetime.combine(credential.expiry_date, time.min))
    return expires_at < now


# -------------------------
# Identity
# -------------------------
def resolve_reviewer(request):
    user = getattr(request, 'user', None)
    if not is_reviewer(user):
        raise ReviewerRequired()
    return user


def _require_reviewer(reviewer):
    if not is_reviewer(reviewer):
        raise ReviewerRequired()


def get_credential(credential_id):
    try:
        return Credential.objects.select_related('business').get(pk=credential_id)
    except (Credential.DoesNotExist, ValidationError, ValueError):
        raise CredentialNotFound()
    except DatabaseError as exc:
        logger.exception("Failed to read credential %s", credential_id)
        raise StorageFailure() from exc


# -------------------------
# Decision
# -------------------------
def decide(credential_id, outcome, reviewer) -> Decision:
    """
    Record ``outcome`` for a credential on behalf of ``reviewer``.

    Repeating a decision already recorded with the same outcome by the same
    reviewer changes nothing on the credential and re-runs the business leg,
    which is how a caller recovers from ``BusinessSyncFailed``.
    """
    if outcome not in Credential.DECIDED:
        raise InvalidOutcome()
    _require_reviewer(reviewer)

    credential = get_credential(credential_id)
    try:
        business_exists = Business.objects.filter(pk=credential.business_id).exists()
    except DatabaseError as exc:
        logger.exception("Failed to read business %s", credential.business_id)
        raise StorageFailure(credential=credential) from exc
    if not business_exists:
        raise BusinessNotFound(credential=credential)

    prior = credential.verification_status
    if prior != Credential.Status.PENDING:
        if prior == outcome and credential.verified_by_id == reviewer.pk:
            logger.debug("Replaying %s decision on credential %s", outcome, credential.pk)
            synced = False
            if outcome == Credential.Status.VERIFIED:
                sync_business(credential, reviewer)
                synced = True
            return Decision(credential=credential, outcome=outcome, business_synced=synced, replayed=True)
        if not _allow_redecide():
            raise AlreadyDecided(credential=credential)
        logger.info("Re-reviewing credential %s (%s -> %s)", credential.pk, prior, outcome)

    _write_decision(credential, prior, outcome, reviewer)
    logger.info("Credential %s %s by %s", credential.pk, outcome, reviewer)

    if outcome != Credential.Status.VERIFIED:
        return Decision(credential=credential, outcome=outcome, business_synced=False)

    sync_business(credential, reviewer)
    return Decision(credential=credential, outcome=outcome, business_synced=True)


def _write_decision(credential, prior, outcome, reviewer):
    now = timezone.now()
    try:
        with transaction.atomic():
            updated = Credential.objects.filter(
                pk=credential.pk, verification_status=prior,
            ).update(verification_status=outcome, verified_at=now, verified_by=reviewer)
            if updated:
                AuditLog.objects.create(
                    user=reviewer,
                    action=f'credential_{outcome}',
                    details=f'Credential {credential.pk} of business {credential.business_id} {outcome} (was {prior})',
                )
    except DatabaseError as exc:
        logger.exception("Failed to record %s decision on credential %s", outcome, credential.pk)
        raise CredentialWriteFailed(credential=credential) from exc

    if not updated:
        logger.warning("Credential %s left %s before the decision landed", credential.pk, prior)
        raise Conflict(credential=credential)

    credential.verification_status = outcome
    credential.verified_at = now
    credential.verified_by = reviewer
    return credential


def sync_business(credential, reviewer=None):
    """
    Mark the credential's business verified. Idempotent.

    Returns True when the flag actually flipped, False when it was already set.
    """
    if credential.verification_status != Credential.Status.VERIFIED:
        raise CredentialNotVerified(credential=credential)

    try:
        with transaction.atomic():
            flipped = Business.objects.filter(
                pk=credential.business_id, is_verified=False,
            ).update(is_verified=True)
            if flipped:
                AuditLog.objects.create(
                    user=reviewer,
                    action='business_verified',
                    details=f'Business {credential.business_id} verified via credential {credential.pk}',
                )
            exists = flipped or Business.objects.filter(pk=credential.business_id).exists()
    except DatabaseError as exc:
        logger.exception("Business %s not marked verified after credential %s", credential.business_id, credential.pk)
        raise BusinessSyncFailed(credential=credential) from exc

    if not exists:
        logger.error("Business %s vanished after credential %s was verified", credential.business_id, credential.pk)
        raise BusinessSyncFailed(BusinessNotFound.message, credential=credential)

    if Credential.business.is_cached(credential):
        credential.business.is_verified = True
    return bool(flipped)


def retry_business_sync(credential_id, reviewer):
    _require_reviewer(reviewer)
    credential = get_credential(credential_id)
    flipped = sync_business(credential, reviewer)
    logger.info("Business sync retried for credential %s (flipped=%s)", credential.pk, flipped)
    return credential
