"""
Pytest configuration for Django tests.
"""
import os

import pytest

# Set the Django settings module
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'djolof_farm.settings')


@pytest.fixture(autouse=True)
def _payments_offline(settings):
    """Tests never talk to real payment gateways."""
    settings.PAYMENTS = {
        **settings.PAYMENTS,
        "WAVE": {"API_KEY": "test-wave-key", "BASE_URL": "https://wave.test/v1"},
        "ORANGE_MONEY": {"MERCHANT_KEY": "test-om-key", "BASE_URL": "https://om.test/v1"},
        "FRONTEND_URL": "http://front.test",
        "APP_URL": "http://api.test",
    }
