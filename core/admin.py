from django.contrib import admin
from .models import AuditLog


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    """
    Read-only view of the audit trail. Entries are written by the
    verification engine and the business toggle, never by hand.
    """
    list_display = ('created_at', 'action', 'user', 'details')
    list_filter = ('action',)
    search_fields = ('action', 'details', 'user__username')
    readonly_fields = ('action', 'user', 'details', 'created_at')

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False
