from django.contrib import admin

from .models import PreBooking, Ride, RideFeedback


@admin.register(Ride)
class RideAdmin(admin.ModelAdmin):
    list_display = ['id', 'rider', 'driver', 'pickup_location', 'drop_location', 'fare', 'status', 'created_at']
    list_filter = ['status', 'payment_status', 'is_pre_booking', 'driver_preference']
    search_fields = ['rider__username', 'driver__name', 'pickup_location', 'drop_location']
    # Assignment, route and state are owned by the lifecycle engine; the console only reads them.
    readonly_fields = [
        'driver', 'fare', 'pickup_location', 'drop_location',
        'status', 'otp', 'payment_status', 'cancellation_reason', 'created_at', 'updated_at',
        'accepted_at', 'otp_verified_at', 'actual_pickup_time', 'actual_drop_time',
    ]

    fieldsets = (
        ('Trip', {
            'fields': ('rider', 'driver', 'pickup_location', 'drop_location', 'fare')
        }),
        ('Booking', {
            'fields': ('driver_preference', 'rider_gender', 'is_pre_booking', 'scheduled_time')
        }),
        ('State', {
            'fields': ('status', 'otp', 'payment_status', 'cancellation_reason')
        }),
        ('Timestamps', {
            'fields': ('created_at', 'updated_at', 'accepted_at', 'otp_verified_at',
                       'actual_pickup_time', 'actual_drop_time'),
            'classes': ('collapse',)
        }),
    )


@admin.register(PreBooking)
class PreBookingAdmin(admin.ModelAdmin):
    list_display = ['username', 'pickup', 'drop_location', 'scheduled_datetime', 'status']
    list_filter = ['status', 'scheduled_date']
    search_fields = ['username', 'pickup', 'drop_location']


@admin.register(RideFeedback)
class RideFeedbackAdmin(admin.ModelAdmin):
    list_display = ['ride', 'rider', 'rating', 'created_at']
    list_filter = ['rating']
    readonly_fields = ['created_at']
