import os
import sys

import django
import pytest

# Add the project directory to the sys.path
project_path = os.path.dirname(os.path.abspath(__file__))
sys.path.insert(0, project_path)

# Setup Django settings
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'backend.settings')
os.environ['DJANGO_TESTING'] = 'True'
# Tests never reach a real AI gateway
os.environ['AI_GATEWAY_URL'] = ''
django.setup()


@pytest.fixture
def api_client():
    from rest_framework.test import APIClient
    return APIClient()


@pytest.fixture
def farmer_user(db):
    from authentication.models import User
    return User.objects.create_user(username='farmer1', password='test123!@#', role='FARMER')


@pytest.fixture
def admin_user(db):
    from authentication.models import User
    return User.objects.create_user(username='verifier', password='test123!@#', role='ADMIN')


@pytest.fixture
def auth_client(api_client, farmer_user):
    api_client.force_authenticate(user=farmer_user)
    return api_client
