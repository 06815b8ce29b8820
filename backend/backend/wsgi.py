"""
WSGI config for the AgriVision carbon credits backend.

It exposes the WSGI callable as a module-level variable named ``application``.
"""

import logging
import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'backend.settings')

logger = logging.getLogger(__name__)

application = get_wsgi_application()

# Create a verifier superuser if environment variables are set
if all(k in os.environ for k in ('DJANGO_SUPERUSER_USERNAME', 'DJANGO_SUPERUSER_EMAIL', 'DJANGO_SUPERUSER_PASSWORD')):
    from django.contrib.auth import get_user_model
    from django.db import DatabaseError

    User = get_user_model()

    username = os.environ['DJANGO_SUPERUSER_USERNAME']
    try:
        if not User.objects.filter(username=username).exists():
            User.objects.create_superuser(
                username,
                os.environ['DJANGO_SUPERUSER_EMAIL'],
                os.environ['DJANGO_SUPERUSER_PASSWORD'],
                role='ADMIN',
            )
            logger.info(f"Superuser {username} created successfully")
        else:
            logger.info(f"Superuser {username} already exists")
    except DatabaseError as e:
        logger.error(f"Error creating superuser: {e}")
