"""
WSGI config for djolof_farm project.

It exposes the WSGI callable as a module-level variable named ``application``.
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'djolof_farm.settings')

application = get_wsgi_application()

from djolof_farm.startup import check_database  # noqa: E402

check_database()
