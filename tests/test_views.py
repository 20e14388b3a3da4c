from datetime import date

import pytest
from django.contrib.messages import get_messages
from django.urls import reverse

from businesses.models import Business
from core.models import AuditLog
from verifications.models import Credential

pytestmark = pytest.mark.django_db


def _messages(response):
    return [(m.level_tag, str(m)) for m in get_messages(response.wsgi_request)]


@pytest.fixture
def reviewer_client(client, reviewer):
    client.force_login(reviewer)
    return client


def test_queue_requires_login(client):
    response = client.get(reverse("verifications:queue"))
    assert response.status_code == 302
    assert reverse("login") in response["Location"]


def test_non_reviewers_are_sent_to_access_denied(client, outsider):
    client.force_login(outsider)
    response = client.get(reverse("verifications:queue"))
    assert response.status_code == 302
    assert response["Location"] == reverse("core:access_denied")

    denied = client.get(reverse("core:access_denied"))
    assert denied.status_code == 403


def test_group_members_can_review(client, second_reviewer):
    client.force_login(second_reviewer)
    assert client.get(reverse("verifications:queue")).status_code == 200


def test_queue_lists_pending_credentials(reviewer_client, make_credential, reviewer):
    pending = make_credential(credential_number="LIC-PENDING", expiry_date=date(2020, 1, 1))
    make_credential(credential_number="LIC-DONE", status=Credential.Status.VERIFIED, reviewer=reviewer)

    response = reviewer_client.get(reverse("verifications:queue"))

    assert response.status_code == 200
    assert [c.pk for c, _ in response.context["rows"]] == [pending.pk]
    assert response.context["rows"][0][1] is True
    assert response.context["counts"]["pending"] == 1
    assert b"LIC-PENDING" in response.content
    assert b"LIC-DONE" not in response.content


def test_queue_all_statuses_and_search(reviewer_client, make_credential, reviewer):
    make_credential(credential_number="INS-1")
    make_credential(credential_number="LIC-2", status=Credential.Status.REJECTED, reviewer=reviewer)

    response = reviewer_client.get(reverse("verifications:queue"), {"status": "all", "q": "lic"})

    assert [c.credential_number for c, _ in response.context["rows"]] == ["LIC-2"]


def test_queue_falls_back_on_bad_input(reviewer_client, make_credential):
    make_credential()
    response = reviewer_client.get(reverse("verifications:queue"), {"status": "bogus", "page": "-3"})
    assert response.status_code == 200
    assert response.context["status"] == "pending"
    assert response.context["page"].number == 1


def test_queue_page_past_the_end(reviewer_client, make_credential):
    make_credential()
    response = reviewer_client.get(reverse("verifications:queue"), {"page": 5})
    assert response.status_code == 200
    assert response.context["rows"] == []
    assert response.context["page"].total == 1


def test_approve_from_the_queue(reviewer_client, make_credential, business, reviewer):
    cred = make_credential()

    response = reviewer_client.post(reverse("verifications:decide", args=[cred.pk]), {"outcome": "verified"})

    assert response.status_code == 302
    assert response["Location"] == reverse("verifications:queue")
    cred.refresh_from_db()
    business.refresh_from_db()
    assert cred.verification_status == Credential.Status.VERIFIED
    assert cred.verified_by == reviewer
    assert business.is_verified
    assert ("success", "Credential approved and business marked verified.") in _messages(response)


def test_decide_returns_to_the_filtered_queue(reviewer_client, make_credential):
    cred = make_credential()
    back = reverse("verifications:queue") + "?status=pending&page=2"

    response = reviewer_client.post(
        reverse("verifications:decide", args=[cred.pk]), {"outcome": "rejected", "next": back},
    )

    assert response["Location"] == back


def test_decide_ignores_offsite_next(reviewer_client, make_credential):
    cred = make_credential()
    response = reviewer_client.post(
        reverse("verifications:decide", args=[cred.pk]), {"outcome": "rejected", "next": "https://evil.example/"},
    )
    assert response["Location"] == reverse("verifications:queue")


def test_decide_rejects_get(reviewer_client, make_credential):
    cred = make_credential()
    response = reviewer_client.get(reverse("verifications:decide", args=[cred.pk]))
    assert response.status_code == 405


def test_invalid_outcome_leaves_the_credential_pending(reviewer_client, make_credential):
    cred = make_credential()
    response = reviewer_client.post(reverse("verifications:decide", args=[cred.pk]), {"outcome": "pending"})
    assert response["Location"] == reverse("verifications:detail", args=[cred.pk])
    cred.refresh_from_db()
    assert cred.is_pending


def test_partial_failure_is_shown_as_retryable(reviewer_client, make_credential, business, business_writes_fail):
    cred = make_credential()

    response = reviewer_client.post(reverse("verifications:decide", args=[cred.pk]), {"outcome": "verified"})

    assert response["Location"] == reverse("verifications:detail", args=[cred.pk])
    levels = [level for level, _ in _messages(response)]
    assert levels == ["warning"]
    cred.refresh_from_db()
    assert cred.verification_status == Credential.Status.VERIFIED


def test_detail_offers_retry_sync_and_sync_view_fixes_it(reviewer_client, make_credential, business, reviewer):
    cred = make_credential(status=Credential.Status.VERIFIED, reviewer=reviewer)

    detail = reviewer_client.get(reverse("verifications:detail", args=[cred.pk]))
    assert detail.context["needs_sync"] is True
    assert b"Retry sync" in detail.content

    response = reviewer_client.post(reverse("verifications:sync", args=[cred.pk]))

    assert response["Location"] == reverse("verifications:detail", args=[cred.pk])
    business.refresh_from_db()
    assert business.is_verified
    assert reviewer_client.get(reverse("verifications:detail", args=[cred.pk])).context["needs_sync"] is False


def test_sync_of_pending_credential_is_refused(reviewer_client, make_credential, business):
    cred = make_credential()
    response = reviewer_client.post(reverse("verifications:sync", args=[cred.pk]))
    assert [level for level, _ in _messages(response)] == ["error"]
    business.refresh_from_db()
    assert not business.is_verified


def test_already_decided_is_reported(reviewer_client, client, make_credential, second_reviewer):
    cred = make_credential()
    reviewer_client.post(reverse("verifications:decide", args=[cred.pk]), {"outcome": "rejected"})

    client.force_login(second_reviewer)
    response = client.post(reverse("verifications:decide", args=[cred.pk]), {"outcome": "verified"})

    assert ("error", "This credential has already been decided.") in _messages(response)


def test_unknown_credential_detail_is_404(reviewer_client):
    response = reviewer_client.get(reverse("verifications:detail", args=["00000000-0000-0000-0000-000000000000"]))
    assert response.status_code == 404


def test_dashboard_counts(reviewer_client, make_business, make_credential, reviewer):
    make_credential()
    make_credential(status=Credential.Status.REJECTED, reviewer=reviewer)
    make_business(is_verified=True)

    response = reviewer_client.get(reverse("core:home"))

    assert response.status_code == 200
    assert response.context["pending_verifications"] == 1
    assert response.context["total_credentials"] == 2
    assert response.context["total_businesses"] == Business.objects.count()
    assert response.context["new_businesses_today"] == Business.objects.count()
    assert response.context["verified_businesses"] == 1


def test_manual_verify_needs_a_verified_credential(reviewer_client, business):
    response = reviewer_client.post(reverse("businesses:verify", args=[business.pk]), {"action": "verify"})

    assert response["Location"] == reverse("businesses:verify", args=[business.pk])
    business.refresh_from_db()
    assert not business.is_verified


def test_manual_verify_and_unverify(reviewer_client, business, make_credential, reviewer):
    make_credential(status=Credential.Status.VERIFIED, reviewer=reviewer)

    reviewer_client.post(reverse("businesses:verify", args=[business.pk]), {"action": "verify"})
    business.refresh_from_db()
    assert business.is_verified

    reviewer_client.post(reverse("businesses:verify", args=[business.pk]), {"action": "unverify"})
    business.refresh_from_db()
    assert not business.is_verified
    assert list(AuditLog.objects.order_by("pk").values_list("action", flat=True)) == [
        "business_verified",
        "business_unverified",
    ]


def test_business_page_lists_credentials(reviewer_client, business, make_credential):
    make_credential(credential_number="LIC-77")
    response = reviewer_client.get(reverse("businesses:verify", args=[business.pk]))
    assert response.status_code == 200
    assert b"LIC-77" in response.content
