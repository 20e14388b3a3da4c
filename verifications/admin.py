from django.contrib import admin
from .models import Credential


@admin.register(Credential)
class CredentialAdmin(admin.ModelAdmin):
    """
    Review fields are read-only here; decisions are recorded from the
    verification queue so the business flag stays in step.
    """
    list_display = ('credential_type', 'credential_number', 'business', 'verification_status', 'expiry_date', 'created_at')
    list_filter = ('verification_status', 'credential_type')
    search_fields = ('credential_number', 'issuing_authority', 'business__name', 'business__email')
    list_select_related = ('business',)
    readonly_fields = ('verification_status', 'verified_at', 'verified_by', 'created_at')
