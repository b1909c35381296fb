from pathlib import Path
import os

from dotenv import load_dotenv

# Base Directory
BASE_DIR = Path(__file__).resolve().parent.parent

load_dotenv(BASE_DIR / ".env")


def _csv_env(name: str) -> list[str]:
    raw = os.getenv(name, "")
    return [item.strip() for item in raw.split(",") if item.strip()]


# Security Settings
SECRET_KEY = os.getenv("SECRET_KEY", "django-insecure-key")
DEBUG = os.getenv("DJANGO_DEBUG", "1") == "1"

ALLOWED_HOSTS = ["*"] if DEBUG else _csv_env("ALLOWED_HOSTS")

CSRF_TRUSTED_ORIGINS = _csv_env("CSRF_TRUSTED_ORIGINS")

X_FRAME_OPTIONS = 'SAMEORIGIN'

INSTALLED_APPS = [
    'django.contrib.messages',
    'django.contrib.staticfiles',

    'dashboard',
]


# Middleware
MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    "whitenoise.middleware.WhiteNoiseMiddleware",
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
]

# URL Configuration
ROOT_URLCONF = 'campus_admin.urls'

# Template Settings
TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [BASE_DIR / "templates"],
        'APP_DIRS': True,
        'OPTIONS': {
            'context_processors': [
                'django.template.context_processors.debug',
                'django.template.context_processors.request',
                'django.contrib.messages.context_processors.messages',
                'dashboard.context_processors.navigation',
            ],
        },
    },
]

# WSGI Application
WSGI_APPLICATION = 'campus_admin.wsgi.application'

# Entity data lives in Supabase; Django itself keeps no tables.
DATABASES = {}

# Internationalization
LANGUAGE_CODE = 'en-us'
TIME_ZONE = os.getenv("TIME_ZONE", "Europe/Berlin")
USE_I18N = True
USE_TZ = True

STATIC_URL = '/static/'
STATIC_ROOT = os.path.join(BASE_DIR, "staticfiles")

STORAGES = {
    "staticfiles": {
        "BACKEND": "whitenoise.storage.CompressedStaticFilesStorage",
    },
}

# Session Settings
SESSION_ENGINE = "django.contrib.sessions.backends.cache"
SESSION_CACHE_ALIAS = "default"
MESSAGE_STORAGE = "django.contrib.messages.storage.session.SessionStorage"

LOGIN_URL = '/login/'

# Enforce HTTPS outside of development
SECURE_SSL_REDIRECT = False
SECURE_PROXY_SSL_HEADER = ("HTTP_X_FORWARDED_PROTO", "https")
SESSION_COOKIE_SECURE = not DEBUG
CSRF_COOKIE_SECURE = not DEBUG

# Supabase
SUPABASE_URL = os.getenv("SUPABASE_URL", "")
SUPABASE_KEY = os.getenv("SUPABASE_KEY", "")

# Scholarship link relay (e.g. an n8n webhook)
SCHOLARSHIP_WEBHOOK_URL = os.getenv("SCHOLARSHIP_WEBHOOK_URL", "")
SCHOLARSHIP_WEBHOOK_TIMEOUT = float(os.getenv("SCHOLARSHIP_WEBHOOK_TIMEOUT", "10"))

# Dashboard behaviour
DASHBOARD_ADMIN_EMAILS = [email.lower() for email in _csv_env("DASHBOARD_ADMIN_EMAILS")]
DASHBOARD_SUCCESS_CLEAR_MS = 1000
DASHBOARD_RELAY_SUCCESS_CLEAR_MS = 3000
DASHBOARD_CALENDAR_ITEMS_PER_DAY = 2
DASHBOARD_UPCOMING_LIMIT = 10

DASHBOARD_UNIVERSITY_OPTIONS = [
    "TUM",
    "LMU",
    "HM",
    "THI",
    "FAU",
    "Uni Augsburg",
    "Uni Bayreuth",
    "Uni Regensburg",
    "Uni Würzburg",
    "Uni Passau",
]

DASHBOARD_TOPIC_OPTIONS = [
    "AI",
    "Business",
    "Robotics",
    "Software",
    "Legal",
    "Data Science",
    "Product",
    "Design",
    "Cybersecurity",
    "Finance",
    "Blockchain",
]

# Logging
LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "simple": {"format": "%(asctime)s %(levelname)s %(name)s: %(message)s"},
    },
    "handlers": {
        "console": {"class": "logging.StreamHandler", "formatter": "simple"},
    },
    "loggers": {
        "dashboard": {
            "handlers": ["console"],
            "level": os.getenv("DASHBOARD_LOG_LEVEL", "INFO"),
        },
    },
}
