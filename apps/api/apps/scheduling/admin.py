from django.contrib import admin

from .models import BusyBlock, Closure, PublicBookingSettings


@admin.register(PublicBookingSettings)
class PublicBookingSettingsAdmin(admin.ModelAdmin):
    list_display = ['clinic', 'timezone', 'slot_step_minutes', 'min_notice_minutes', 'max_advance_days', 'updated_at']
    search_fields = ['clinic__name', 'clinic__slug']
    readonly_fields = ['id', 'created_at', 'updated_at']

    fieldsets = (
        ('Clinic', {
            'fields': ('id', 'clinic', 'timezone')
        }),
        ('Slots', {
            'fields': ('slot_step_minutes', 'min_notice_minutes', 'max_advance_days')
        }),
        ('Hours', {
            'fields': ('weekly_hours', 'opening_hours')
        }),
        ('Public booking', {
            'fields': ('practitioners', 'corporate_programs', 'public_base_url')
        }),
        ('Branding', {
            'fields': ('clinic_display_name', 'logo_url', 'contact_url')
        }),
        ('Audit', {
            'fields': ('created_at', 'updated_at')
        }),
    )


@admin.register(Closure)
class ClosureAdmin(admin.ModelAdmin):
    list_display = ['clinic', 'from_at', 'to_at', 'reason', 'is_active']
    list_filter = ['is_active']
    search_fields = ['reason']
    readonly_fields = ['id', 'created_at', 'updated_at']


@admin.register(BusyBlock)
class BusyBlockAdmin(admin.ModelAdmin):
    list_display = ['clinic', 'start_at', 'end_at', 'scope', 'kind', 'practitioner', 'status', 'source']
    list_filter = ['status', 'scope', 'source']
    readonly_fields = ['id', 'created_at', 'updated_at']
    raw_id_fields = ['appointment', 'booking_request']
