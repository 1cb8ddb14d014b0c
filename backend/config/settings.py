"""
Django settings for the asset lifecycle automation backend.
"""
from pathlib import Path
from datetime import timedelta
from decouple import config, Csv
from celery.schedules import crontab

BASE_DIR = Path(__file__).resolve().parent.parent

SECRET_KEY = config('DJANGO_SECRET_KEY', default='django-insecure-change-me-in-production')

DEBUG = config('DEBUG', default=True, cast=bool)

ALLOWED_HOSTS = config('ALLOWED_HOSTS', default='*', cast=Csv())

INSTALLED_APPS = [
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',
    # Third party
    'rest_framework',
    'rest_framework_simplejwt',
    'corsheaders',
    'django_filters',
    'django_celery_beat',
    # Project apps
    'apps.accounts',
    'apps.assets',
    'apps.lifecycle',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'corsheaders.middleware.CorsMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
]

ROOT_URLCONF = 'config.urls'

TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [BASE_DIR / 'templates'],
        'APP_DIRS': True,
        'OPTIONS': {
            'context_processors': [
                'django.template.context_processors.debug',
                'django.template.context_processors.request',
                'django.contrib.auth.context_processors.auth',
                'django.contrib.messages.context_processors.messages',
            ],
        },
    },
]

WSGI_APPLICATION = 'config.wsgi.application'

# PostgreSQL database
DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.postgresql',
        'NAME': config('POSTGRES_DB', default='asset_lifecycle'),
        'USER': config('POSTGRES_USER', default='postgres'),
        'PASSWORD': config('POSTGRES_PASSWORD', default='postgres'),
        'HOST': config('POSTGRES_HOST', default='localhost'),
        'PORT': config('POSTGRES_PORT', default='5432'),
    }
}

AUTH_USER_MODEL = 'accounts.User'

AUTH_PASSWORD_VALIDATORS = [
    {'NAME': 'django.contrib.auth.password_validation.UserAttributeSimilarityValidator'},
    {'NAME': 'django.contrib.auth.password_validation.MinimumLengthValidator'},
    {'NAME': 'django.contrib.auth.password_validation.CommonPasswordValidator'},
    {'NAME': 'django.contrib.auth.password_validation.NumericPasswordValidator'},
]

LANGUAGE_CODE = 'en-us'
TIME_ZONE = config('AUTOMATION_TIMEZONE', default='Asia/Kolkata')
USE_I18N = True
USE_TZ = True

STATIC_URL = 'static/'
STATIC_ROOT = BASE_DIR / 'staticfiles'

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

# CORS
CORS_ALLOWED_ORIGINS = config(
    'CORS_ORIGINS',
    default='http://localhost:5173,http://127.0.0.1:5173',
    cast=Csv(),
)

# Django REST Framework
REST_FRAMEWORK = {
    'DEFAULT_AUTHENTICATION_CLASSES': (
        'rest_framework_simplejwt.authentication.JWTAuthentication',
        'rest_framework.authentication.SessionAuthentication',
    ),
    'DEFAULT_PERMISSION_CLASSES': (
        'rest_framework.permissions.IsAuthenticated',
    ),
    'DEFAULT_FILTER_BACKENDS': (
        'django_filters.rest_framework.DjangoFilterBackend',
        'rest_framework.filters.SearchFilter',
        'rest_framework.filters.OrderingFilter',
    ),
    'DEFAULT_PAGINATION_CLASS': 'config.pagination.StandardPagination',
    'PAGE_SIZE': 25,
    'DATE_FORMAT': 'iso-8601',
}

# JWT
SIMPLE_JWT = {
    'ACCESS_TOKEN_LIFETIME': timedelta(hours=8),
    'REFRESH_TOKEN_LIFETIME': timedelta(days=7),
    'ROTATE_REFRESH_TOKENS': True,
}

# Logging
LOG_LEVEL = config('LOG_LEVEL', default='INFO')

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'verbose': {
            'format': '%(asctime)s %(levelname)s [%(name)s] %(message)s',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'verbose',
        },
    },
    'root': {
        'handlers': ['console'],
        'level': 'WARNING',
    },
    'loggers': {
        'apps': {
            'handlers': ['console'],
            'level': LOG_LEVEL,
            'propagate': False,
        },
        'celery': {
            'handlers': ['console'],
            'level': LOG_LEVEL,
            'propagate': False,
        },
    },
}

# Celery
CELERY_BROKER_URL = config('CELERY_BROKER_URL', default='redis://localhost:6379/0')
CELERY_RESULT_BACKEND = config('CELERY_RESULT_BACKEND', default='redis://localhost:6379/0')
CELERY_ACCEPT_CONTENT = ['json']
CELERY_TASK_SERIALIZER = 'json'
CELERY_RESULT_SERIALIZER = 'json'
CELERY_TIMEZONE = TIME_ZONE
CELERY_BROKER_CONNECTION_RETRY_ON_STARTUP = True

# Heavy scans run at different hours so they never overlap.
CELERY_BEAT_SCHEDULE = {
    'lifecycle-automation-daily': {
        'task': 'apps.lifecycle.tasks.run_lifecycle_automation',
        'schedule': crontab(hour=1, minute=0),
    },
    'disposal-automation-daily': {
        'task': 'apps.lifecycle.tasks.run_disposal_automation',
        'schedule': crontab(hour=2, minute=0),
    },
    'automation-stats-weekly': {
        'task': 'apps.lifecycle.tasks.snapshot_automation_stats',
        'schedule': crontab(hour=3, minute=0, day_of_week=1),
    },
}

# Asset automation defaults. Runtime overrides are stored in
# lifecycle.AutomationSettings and merged over these values.
ASSET_AUTOMATION = {
    'disposal_marking': {
        'max_age_years': config('DISPOSAL_MAX_AGE_YEARS', default=7, cast=int),
        'max_depreciation_percent': 90,
        'min_days_since_last_use': 365,
        'auto_mark_conditions': ['beyond_repair', 'obsolete'],
        'min_purchase_cost_for_check': 1000,
        'depreciation_rate_per_year': 10,
        'auto_approve': False,
        'notify_roles': ['admin', 'inventory_manager', 'it_manager'],
    },
    'dead_stock': {
        'max_age_years': config('DEAD_STOCK_MAX_AGE_YEARS', default=5, cast=int),
        'poor_condition_age_years': 2,
        'no_maintenance_months': 24,
        'damage_conditions': ['poor', 'damaged'],
        'stale_maintenance_conditions': ['poor', 'fair'],
        'notify_roles': ['admin', 'inventory_manager'],
    },
    'disposal': {
        'days_in_dead_stock': config('DAYS_IN_DEAD_STOCK', default=90, cast=int),
        'depreciation_rate_per_year': 15,
        'auto_approve': config('DISPOSAL_AUTO_APPROVE', default=False, cast=bool),
        'notify_roles': ['admin', 'inventory_manager'],
    },
}

# Seconds after which a 'running' automation run is considered abandoned.
AUTOMATION_RUN_LOCK_TIMEOUT = config('AUTOMATION_RUN_LOCK_TIMEOUT', default=6 * 60 * 60, cast=int)
