import logging

from django.contrib import messages
from django.contrib.auth.decorators import login_required
from django.shortcuts import get_object_or_404, redirect, render

from core.models import AuditLog
from core.roles import reviewer_required
from .models import Business

logger = logging.getLogger(__name__)


@login_required
@reviewer_required
def business_verify(request, pk):
    """
    Administrative toggle for a business's verified badge.

    Unverifying is always allowed. Verifying by hand is only allowed once the
    business has at least one verified credential; otherwise the badge has to
    come from approving a credential in the verification queue.
    """
    b = get_object_or_404(Business, pk=pk)
    if request.method == 'POST':
        action = request.POST.get('action')
        if action == 'verify':
            if not b.has_verified_credential():
                messages.error(request, 'Approve one of this business\'s credentials before marking it verified.')
                return redirect('businesses:verify', pk=b.pk)
            Business.objects.filter(pk=b.pk).update(is_verified=True)
            AuditLog.objects.create(user=request.user, action='business_verified', details=f'Verified business {b.pk} by hand')
            logger.info("Business %s verified by hand by %s", b.pk, request.user)
            messages.success(request, 'Business verified.')
        elif action == 'unverify':
            Business.objects.filter(pk=b.pk).update(is_verified=False)
            AuditLog.objects.create(user=request.user, action='business_unverified', details=f'Unverified business {b.pk}')
            logger.info("Business %s unverified by %s", b.pk, request.user)
            messages.success(request, 'Business unverified.')
        else:
            messages.error(request, 'Unknown action.')
            return redirect('businesses:verify', pk=b.pk)
        return redirect('core:home')
    credentials = b.credentials.order_by('-created_at', '-id')
    return render(request, 'businesses/business_verify.html', {'business': b, 'credentials': credentials})
