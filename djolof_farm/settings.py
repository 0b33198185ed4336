"""
Django settings for djolof_farm project.

Every deploy-specific value comes from the environment.
"""
import os
from decimal import Decimal
from pathlib import Path

from django.core.exceptions import ImproperlyConfigured

BASE_DIR = Path(__file__).resolve().parent.parent

APP_ENV = os.environ.get("APP_ENV", "development")
IS_PRODUCTION = APP_ENV == "production"

SECRET_KEY = os.environ.get("DJANGO_SECRET_KEY", "")
if not SECRET_KEY:
    if IS_PRODUCTION:
        raise ImproperlyConfigured("DJANGO_SECRET_KEY must be set in production")
    SECRET_KEY = "django-insecure-djolof-farm-development-key"

DEBUG = os.environ.get("DJANGO_DEBUG", "false" if IS_PRODUCTION else "true").lower() == "true"

ALLOWED_HOSTS = [h.strip() for h in os.environ.get("DJANGO_ALLOWED_HOSTS", "localhost,127.0.0.1").split(",") if h.strip()]


INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    "orders",
]

MIDDLEWARE = [
    "orders.api.middleware.RequestLoggingMiddleware",
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

ROOT_URLCONF = "djolof_farm.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
            ],
        },
    },
]

WSGI_APPLICATION = "djolof_farm.wsgi.application"
ASGI_APPLICATION = "djolof_farm.asgi.application"


# Database: PostgreSQL when DB_NAME is configured, SQLite for local runs.
if os.environ.get("DB_NAME"):
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.postgresql",
            "NAME": os.environ["DB_NAME"],
            "USER": os.environ.get("DB_USER", "postgres"),
            "PASSWORD": os.environ.get("DB_PASSWORD", ""),
            "HOST": os.environ.get("DB_HOST", "localhost"),
            "PORT": os.environ.get("DB_PORT", "5432"),
            "CONN_MAX_AGE": int(os.environ.get("DB_CONN_MAX_AGE", "60")),
            "CONN_HEALTH_CHECKS": True,
            "OPTIONS": {
                "connect_timeout": int(os.environ.get("DB_CONNECT_TIMEOUT", "2")),
            },
        }
    }
else:
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.sqlite3",
            "NAME": BASE_DIR / "db.sqlite3",
        }
    }

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"


LANGUAGE_CODE = "fr"
TIME_ZONE = "Africa/Dakar"
USE_I18N = True
USE_TZ = True

STATIC_URL = "static/"


# Orders
ORDERS = {
    "DELIVERY_FEE": Decimal(os.environ.get("DELIVERY_FEE", "1000.00")),
}


# Payments
PAYMENTS = {
    "SIMULATION_ENABLED": os.environ.get(
        "PAYMENT_SIMULATION", "false" if IS_PRODUCTION else "true"
    ).lower() == "true",
    "REFERENCE_NAMESPACE": os.environ.get("PAYMENT_REFERENCE_NAMESPACE", "DJOLOF"),
    "CURRENCY": "XOF",
    "FRONTEND_URL": os.environ.get("FRONTEND_URL", "http://localhost:5173"),
    "APP_URL": os.environ.get("APP_URL", "http://localhost:8000"),
    "TIMEOUT": float(os.environ.get("PAYMENT_TIMEOUT", "10")),
    "MAX_RETRIES": int(os.environ.get("PAYMENT_MAX_RETRIES", "2")),
    "WAVE": {
        "API_KEY": os.environ.get("WAVE_API_KEY", ""),
        "BASE_URL": os.environ.get("WAVE_API_URL", "https://api.wave.com/v1"),
    },
    "ORANGE_MONEY": {
        "MERCHANT_KEY": os.environ.get("ORANGE_MONEY_MERCHANT_KEY", ""),
        "BASE_URL": os.environ.get("ORANGE_MONEY_API_URL", "https://api.orange.com/orange-money-webpay/dev/v1"),
    },
}


# Logging
LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "json": {
            "()": "orders.utils.logging.JsonFormatter",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "json",
        },
    },
    "root": {
        "handlers": ["console"],
        "level": os.environ.get("LOG_LEVEL", "INFO"),
    },
    "loggers": {
        "django.db.backends": {
            "level": "WARNING",
        },
    },
}
