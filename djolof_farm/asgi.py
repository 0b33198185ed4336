"""
ASGI config for djolof_farm project.

It exposes the ASGI callable as a module-level variable named ``application``.

For more information on this file, see
https://docs.djangoproject.com/en/5.2/howto/deployment/asgi/
"""

import os

from django.core.asgi import get_asgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'djolof_farm.settings')

application = get_asgi_application()

from djolof_farm.startup import check_database  # noqa: E402

check_database()
