"""
URL configuration for campusHero project.

Every JSON endpoint lives under /api/. The Django admin doubles as the
back-office console for staff.
"""

from django.contrib import admin
from django.urls import path, include

urlpatterns = [
    path('admin/', admin.site.urls),

    path('api/', include('booking.urls')),
    path('api/', include('user.urls')),
]
