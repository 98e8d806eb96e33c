"""
WSGI config for campusHero project.
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'campusHero.settings')

application = get_wsgi_application()
