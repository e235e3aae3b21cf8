from django.contrib import admin

from .models import NotificationLog, NotificationSettings


@admin.register(NotificationSettings)
class NotificationSettingsAdmin(admin.ModelAdmin):
    list_display = ['clinic', 'default_locale', 'reply_to_email', 'updated_at']
    readonly_fields = ['id', 'created_at', 'updated_at']
    fieldsets = (
        ('Clinic', {
            'fields': ('id', 'clinic', 'default_locale', 'reply_to_email')
        }),
        ('Events', {
            'fields': ('events',),
            'description': 'Per-event config: enabled, template_id_by_locale, recipient_policy.'
        }),
        ('Audit', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )


@admin.register(NotificationLog)
class NotificationLogAdmin(admin.ModelAdmin):
    list_display = ['created_at', 'clinic', 'event_id', 'recipient', 'status']
    list_filter = ['event_id', 'status', 'provider']
    readonly_fields = [
        'id', 'clinic', 'event_id', 'appointment', 'recipient', 'provider',
        'message_id', 'status', 'error_message', 'created_at',
    ]

    def has_add_permission(self, request):
        return False
