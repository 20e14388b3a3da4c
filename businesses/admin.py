from django.contrib import admin
from .models import Business


@admin.register(Business)
class BusinessAdmin(admin.ModelAdmin):
    list_display = ('name', 'email', 'city', 'is_verified', 'rating', 'review_count', 'created_at')
    search_fields = ('name', 'email', 'city')
    list_filter = ('is_verified',)
    # Changed through the verification queue or the verified toggle only.
    readonly_fields = ('is_verified', 'created_at')
