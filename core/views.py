"""
Staff dashboard and the access-denied landing page.

The dashboard gathers headline counts for the console: users, businesses
(and how many were added today), and the size of the verification queue.
"""
from datetime import datetime, time

from django.contrib.auth import get_user_model
from django.contrib.auth.decorators import login_required
from django.shortcuts import render
from django.utils import timezone

from businesses.models import Business
from verifications.engine import STATUS_ALL, status_counts
from verifications.models import Credential

from .roles import reviewer_required

RECENT_LIMIT = 5


def _start_of_today():
    return timezone.make_aware(datetime.combine(timezone.localdate(), time.min))


@login_required
@reviewer_required
def home(request):
    today = _start_of_today()
    counts = status_counts()
    context = {
        "total_users": get_user_model().objects.count(),
        "total_businesses": Business.objects.count(),
        "new_businesses_today": Business.objects.filter(created_at__gte=today).count(),
        "verified_businesses": Business.objects.filter(is_verified=True).count(),
        "pending_verifications": counts[Credential.Status.PENDING],
        "total_credentials": counts[STATUS_ALL],
        "recent_businesses": Business.objects.order_by("-created_at", "-id")[:RECENT_LIMIT],
    }
    return render(request, "core/dashboard.html", context)


@login_required
def access_denied(request):
    return render(request, "core/access_denied.html", status=403)
