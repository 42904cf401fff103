"""
Django settings for the POS core project.

Values come from the environment; a local .env file is loaded first.
"""

import json
import os
from pathlib import Path

from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent.parent

load_dotenv(BASE_DIR / ".env")


def env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


SECRET_KEY = os.getenv("SECRET_KEY", "django-insecure-change-me")

DEBUG = env_bool("DEBUG", False)

ALLOWED_HOSTS = [h.strip() for h in os.getenv("ALLOWED_HOSTS", "localhost,127.0.0.1").split(",") if h.strip()]


INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    "rest_framework",
    "drf_spectacular",
    "apps.currency",
    "apps.pricing",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

ROOT_URLCONF = "core.urls"

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

WSGI_APPLICATION = "core.wsgi.application"

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": os.getenv("DB_PATH", str(BASE_DIR / "db.sqlite3")),
    }
}

LANGUAGE_CODE = "en-us"
TIME_ZONE = os.getenv("TIME_ZONE", "UTC")
USE_I18N = True
USE_TZ = True

STATIC_URL = "static/"

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"


# Django REST framework

REST_FRAMEWORK = {
    "DEFAULT_SCHEMA_CLASS": "drf_spectacular.openapi.AutoSchema",
    "COERCE_DECIMAL_TO_STRING": True,
}

SPECTACULAR_SETTINGS = {
    "TITLE": "POS Core API",
    "DESCRIPTION": "Currencies, exchange rates and cart pricing",
    "VERSION": "1.0.0",
    "SERVE_INCLUDE_SCHEMA": False,
}


# Exchange rates

EXCHANGE_RATE_PROVIDER = os.getenv("EXCHANGE_RATE_PROVIDER", "exchange_rate")
EXCHANGE_RATE_API_KEY = os.getenv("EXCHANGE_RATE_API_KEY", "")
EXCHANGERATE_URL = os.getenv("EXCHANGERATE_URL", "https://api.exchangerate-api.com/v4/latest")
FIXER_URL = os.getenv("FIXER_URL", "https://api.fixer.io/latest")
CURRENCY_LAYER_URL = os.getenv("CURRENCY_LAYER_URL", "https://api.currencylayer.com/live")
EXCHANGE_RATE_HTTP_TIMEOUT = int(os.getenv("EXCHANGE_RATE_HTTP_TIMEOUT", "10"))

# Minutes between scheduled refreshes
EXCHANGE_RATE_UPDATE_INTERVAL = int(os.getenv("EXCHANGE_RATE_UPDATE_INTERVAL", "60"))
# Seconds a looked-up rate stays in the process cache
EXCHANGE_RATE_CACHE_TTL = int(os.getenv("EXCHANGE_RATE_CACHE_TTL", "300"))

# Applied when the provider returns nothing. Quoted against EXCHANGE_RATE_FALLBACK_BASE.
EXCHANGE_RATE_FALLBACK_BASE = os.getenv("EXCHANGE_RATE_FALLBACK_BASE", "USD")
EXCHANGE_RATE_FALLBACK_RATES = json.loads(os.getenv("EXCHANGE_RATE_FALLBACK_RATES", "null")) or {
    "EUR": "0.85",
    "GBP": "0.73",
    "CAD": "1.35",
    "LKR": "325",
    "JPY": "110",
    "AUD": "1.45",
    "CHF": "0.92",
    "CNY": "7.20",
    "INR": "83",
}


# Pricing

POS_TAX_RATE = os.getenv("POS_TAX_RATE", "0")
POS_MONEY_DECIMAL_PLACES = int(os.getenv("POS_MONEY_DECIMAL_PLACES", "2"))


# Celery

CELERY_BROKER_URL = os.getenv("CELERY_BROKER_URL", "redis://localhost:6379/0")
CELERY_RESULT_BACKEND = os.getenv("CELERY_RESULT_BACKEND", "redis://localhost:6379/0")
CELERY_TASK_SERIALIZER = "json"
CELERY_RESULT_SERIALIZER = "json"
CELERY_ACCEPT_CONTENT = ["json"]
CELERY_TIMEZONE = TIME_ZONE
CELERY_TASK_ALWAYS_EAGER = env_bool("CELERY_TASK_ALWAYS_EAGER", False)

CELERY_BEAT_SCHEDULE = {
    "refresh-exchange-rates": {
        "task": "refresh_exchange_rates",
        "schedule": EXCHANGE_RATE_UPDATE_INTERVAL * 60,
    },
}


# Logging

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "verbose": {
            "format": "%(asctime)s %(levelname)s %(name)s: %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "verbose",
        },
    },
    "root": {
        "handlers": ["console"],
        "level": "WARNING",
    },
    "loggers": {
        "apps": {
            "level": LOG_LEVEL,
        },
        "django": {
            "handlers": ["console"],
            "level": os.getenv("DJANGO_LOG_LEVEL", "WARNING").upper(),
            "propagate": False,
        },
    },
}
