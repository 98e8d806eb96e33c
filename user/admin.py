from django.contrib import admin, messages
from django.contrib.auth.admin import UserAdmin
from django.utils.html import format_html
from rest_framework.exceptions import APIException

from . import services
from .models import ApprovalStatus, CustomUser, Driver, HeroApplication


@admin.register(CustomUser)
class CustomUserAdmin(UserAdmin):
    list_display = ['username', 'email', 'user_type', 'gender', 'is_staff']
    list_filter = UserAdmin.list_filter + ('user_type', 'gender')
    fieldsets = UserAdmin.fieldsets + (
        ('Campus profile', {
            'fields': ('phone', 'user_type', 'gender')
        }),
    )


@admin.register(HeroApplication)
class HeroApplicationAdmin(admin.ModelAdmin):
    list_display = ['name', 'phone', 'gender', 'vehicle_number', 'status', 'submitted_at']
    list_filter = ['status', 'gender']
    search_fields = ['name', 'phone', 'vehicle_number']
    readonly_fields = ['license_link', 'status', 'submitted_at', 'reviewed_at']
    actions = ['approve_applications', 'reject_applications']

    fieldsets = (
        ('Applicant', {
            'fields': ('user', 'name', 'phone', 'gender')
        }),
        ('Vehicle', {
            'fields': ('vehicle_type', 'vehicle_number', 'license_url', 'license_link', 'agreed')
        }),
        ('Review', {
            'fields': ('status', 'submitted_at', 'reviewed_at')
        }),
    )

    def license_link(self, obj):
        if obj.license_url:
            return format_html('<a href="{}" target="_blank">View License</a>', obj.license_url)
        return "No license uploaded"
    license_link.short_description = 'License Preview'

    def _review(self, request, queryset, decision):
        reviewed = 0
        for application in queryset:
            try:
                services.review_application(application.id, decision)
                reviewed += 1
            except APIException as exc:
                self.message_user(request, f"{application.name}: {exc.detail}", messages.WARNING)
        if reviewed:
            self.message_user(request, f"{reviewed} application(s) {decision}.", messages.SUCCESS)

    @admin.action(description='Approve selected applications')
    def approve_applications(self, request, queryset):
        self._review(request, queryset, ApprovalStatus.APPROVED)

    @admin.action(description='Reject selected applications')
    def reject_applications(self, request, queryset):
        self._review(request, queryset, ApprovalStatus.REJECTED)


@admin.register(Driver)
class DriverAdmin(admin.ModelAdmin):
    list_display = ['name', 'phone', 'gender', 'approval_status', 'is_online', 'total_rides', 'total_earnings']
    list_filter = ['approval_status', 'is_online', 'gender']
    search_fields = ['name', 'phone', 'vehicle_number', 'user__username']
    # Approval goes through the application review actions only.
    readonly_fields = ['approval_status', 'total_rides', 'total_earnings', 'last_ride_at', 'active_ride', 'created_at']

    fieldsets = (
        ('Hero', {
            'fields': ('user', 'application', 'name', 'phone', 'gender')
        }),
        ('Vehicle', {
            'fields': ('vehicle_type', 'vehicle_number')
        }),
        ('Status', {
            'fields': ('approval_status', 'is_online', 'active_ride')
        }),
        ('Earnings', {
            'fields': ('total_rides', 'total_earnings', 'last_ride_at', 'created_at'),
            'classes': ('collapse',)
        }),
    )
