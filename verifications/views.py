"""
Review queue views. Every read and write goes through ``verifications.engine``.
"""
from django.contrib import messages
from django.contrib.auth.decorators import login_required
from django.http import Http404
from django.shortcuts import redirect, render
from django.utils.http import url_has_allowed_host_and_scheme
from django.views.decorators.http import require_POST

from core.roles import reviewer_required

from . import engine
from .exceptions import (
    BusinessSyncFailed,
    CredentialNotFound,
    CredentialWriteFailed,
    StorageFailure,
    VerificationError,
)
from .forms import DecisionForm, QueueFilterForm
from .models import Credential


def _next_url(request, default):
    target = request.POST.get('next') or request.GET.get('next')
    if target and url_has_allowed_host_and_scheme(target, allowed_hosts={request.get_host()}, require_https=request.is_secure()):
        return target
    return default


def _report_failure(request, error):
    """
    Map an engine error to a message. BusinessSyncFailed gets its own level:
    the decision is saved and only the business flag needs a retry.
    """
    if isinstance(error, BusinessSyncFailed):
        messages.warning(request, f"{error} Use 'Retry sync' on the credential page.")
    elif isinstance(error, CredentialWriteFailed):
        messages.error(request, f"{error} Please try again.")
    else:
        messages.error(request, str(error))


@login_required
@reviewer_required
def queue(request):
    form = QueueFilterForm(request.GET or None)
    status, search, page_number = form.cleaned_or_defaults()
    try:
        page = engine.list_credentials(status=status, search=search, page=page_number)
    except StorageFailure as error:
        _report_failure(request, error)
        page = None

    rows = [(credential, engine.is_expired(credential)) for credential in page] if page else []
    return render(request, 'verifications/queue.html', {
        'form': form,
        'page': page,
        'rows': rows,
        'status': status,
        'search': search,
        'counts': engine.status_counts(),
        'decision_form': DecisionForm(),
    })


@login_required
@reviewer_required
def credential_detail(request, pk):
    try:
        credential = engine.get_credential(pk)
    except CredentialNotFound:
        raise Http404('Credential not found')

    needs_sync = (
        credential.verification_status == Credential.Status.VERIFIED
        and not credential.business.is_verified
    )
    return render(request, 'verifications/credential_detail.html', {
        'credential': credential,
        'expired': engine.is_expired(credential),
        'needs_sync': needs_sync,
        'decision_form': DecisionForm(),
    })


@login_required
@reviewer_required
@require_POST
def credential_decide(request, pk):
    form = DecisionForm(request.POST)
    if not form.is_valid():
        messages.error(request, 'Choose approve or reject.')
        return redirect('verifications:detail', pk=pk)

    outcome = form.cleaned_data['outcome']
    try:
        reviewer = engine.resolve_reviewer(request)
        decision = engine.decide(pk, outcome, reviewer)
    except BusinessSyncFailed as error:
        _report_failure(request, error)
        return redirect('verifications:detail', pk=pk)
    except VerificationError as error:
        _report_failure(request, error)
        return redirect(_next_url(request, 'verifications:queue'))

    if decision.replayed:
        messages.info(request, 'This decision was already recorded.')
    elif outcome == Credential.Status.VERIFIED:
        messages.success(request, 'Credential approved and business marked verified.')
    else:
        messages.success(request, 'Credential rejected.')
    return redirect(_next_url(request, 'verifications:queue'))


@login_required
@reviewer_required
@require_POST
def credential_sync(request, pk):
    try:
        reviewer = engine.resolve_reviewer(request)
        engine.retry_business_sync(pk, reviewer)
    except VerificationError as error:
        _report_failure(request, error)
    else:
        messages.success(request, 'Business marked verified.')
    return redirect('verifications:detail', pk=pk)
