"""
Django settings for the schoolbook project.

Scope:
- key-value storage of every school collection (one JSON document per key)
- rosters, attendance, exam results, fees and expenses
- dashboard and report aggregates
- backup export/restore, CSV import, grade promotion
"""
import os
from pathlib import Path


BASE_DIR = Path(__file__).resolve().parent.parent


DEBUG = os.getenv('DJANGO_DEBUG', 'False').lower() in {'1', 'true', 'yes'}
SECRET_KEY = os.getenv(
    'DJANGO_SECRET_KEY',
    'change-this-secret-key-in-production-5c1d2f7e8a9b4c3d8e6f0a1b2c3d4e5f',
)
ALLOWED_HOSTS = [
    host.strip()
    for host in os.getenv('DJANGO_ALLOWED_HOSTS', 'localhost,127.0.0.1').split(',')
    if host.strip()
]


INSTALLED_APPS = [
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',
    'apps.core.records.apps.RecordsConfig',
    'apps.core.storage.apps.StorageConfig',
    'apps.core.students.apps.StudentsConfig',
    'apps.core.attendance.apps.AttendanceConfig',
    'apps.core.exams.apps.ExamsConfig',
    'apps.core.fees.apps.FeesConfig',
    'apps.core.backups.apps.BackupsConfig',
    'apps.core.reports.apps.ReportsConfig',
]


MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
]


ROOT_URLCONF = 'schoolbook.urls'

TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [],
        'APP_DIRS': True,
        'OPTIONS': {
            'context_processors': [
                'django.template.context_processors.request',
                'django.contrib.auth.context_processors.auth',
                'django.contrib.messages.context_processors.messages',
            ],
        },
    },
]

WSGI_APPLICATION = 'schoolbook.wsgi.application'


DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': os.getenv('SCHOOLBOOK_DB_PATH', str(BASE_DIR / 'db.sqlite3')),
    }
}

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'


LANGUAGE_CODE = 'en-us'
TIME_ZONE = os.getenv('SCHOOLBOOK_TIME_ZONE', 'UTC')
USE_I18N = True
USE_TZ = True


STATIC_URL = 'static/'

TEST_RUNNER = 'apps.core.test_runner.InstalledAppsOnlyDiscoverRunner'


LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'simple': {
            'format': '{levelname} {name}: {message}',
            'style': '{',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'simple',
        },
    },
    'loggers': {
        'apps': {
            'handlers': ['console'],
            'level': os.getenv('SCHOOLBOOK_LOG_LEVEL', 'INFO'),
            'propagate': False,
        },
    },
}


SCHOOLBOOK_STORAGE_PREFIX = os.getenv('SCHOOLBOOK_STORAGE_PREFIX', 'cim_')
SCHOOLBOOK_ACTIVITY_LOG_LIMIT = int(os.getenv('SCHOOLBOOK_ACTIVITY_LOG_LIMIT', '50'))
SCHOOLBOOK_BACKUP_APP_VERSION = os.getenv('SCHOOLBOOK_BACKUP_APP_VERSION', '1.4')
SCHOOLBOOK_LOW_ATTENDANCE_THRESHOLD = int(os.getenv('SCHOOLBOOK_LOW_ATTENDANCE_THRESHOLD', '75'))
SCHOOLBOOK_TOP_STUDENTS_LIMIT = int(os.getenv('SCHOOLBOOK_TOP_STUDENTS_LIMIT', '3'))
SCHOOLBOOK_INCOME_TREND_BUCKETS = int(os.getenv('SCHOOLBOOK_INCOME_TREND_BUCKETS', '7'))
