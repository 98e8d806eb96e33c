from django.urls import path
from . import api_views

app_name = 'user'
urlpatterns = [
    path('auth/login/', api_views.login, name='login'),
    path('hero-applications/', api_views.hero_applications, name='hero_applications'),
    path('hero-applications/<int:application_id>/status/', api_views.review_application, name='review_application'),
]
