"""
ASGI config for campusHero project.

It exposes the ASGI callable as a module-level variable named ``application``.
Clients poll for ride updates, so there is no websocket routing here.
"""

import os

from django.core.asgi import get_asgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'campusHero.settings')

application = get_asgi_application()
