from django.urls import path
from . import api_views

app_name = 'booking'
urlpatterns = [
    # Rider
    path('rides/', api_views.create_ride, name='create_ride'),
    path('rides/config/', api_views.booking_config, name='booking_config'),
    path('rides/drivers/available/', api_views.available_drivers, name='available_drivers'),
    path('rides/rider/current/', api_views.rider_current_ride, name='rider_current_ride'),
    path('rides/<int:ride_id>/', api_views.ride_detail, name='ride_detail'),
    path('rides/<int:ride_id>/feedback/', api_views.ride_feedback, name='ride_feedback'),

    # Hero
    path('rides/requests/', api_views.open_requests, name='open_requests'),
    path('rides/accept/', api_views.accept_ride, name='accept_ride'),
    path('rides/decline/', api_views.decline_ride, name='decline_ride'),
    path('rides/<int:ride_id>/status/', api_views.update_ride_status, name='update_ride_status'),
    path('rides/driver/<int:driver_id>/current/', api_views.driver_current_ride, name='driver_current_ride'),
    path('rides/driver/<int:driver_id>/stats/', api_views.driver_stats, name='driver_stats'),
    path('rides/driver/<int:driver_id>/status/', api_views.driver_status, name='driver_status'),

    # Admin console
    path('rides/drivers/', api_views.driver_list, name='driver_list'),
    path('rides/history/', api_views.ride_history, name='ride_history'),

    # Pre-bookings
    path('prebook/', api_views.prebookings, name='prebookings'),
    path('prebook/<int:prebooking_id>/', api_views.prebooking_delete, name='prebooking_delete'),
    path('prebook/<int:prebooking_id>/status/', api_views.prebooking_status, name='prebooking_status'),
]
