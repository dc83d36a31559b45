"""Django settings for opresult project."""
import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
BASE_DIR = Path(__file__).resolve().parent.parent
PROJECT_ROOT = BASE_DIR.parent
load_dotenv(PROJECT_ROOT / '.env')

SECRET_KEY = os.getenv('DJANGO_SECRET_KEY', 'dev-insecure-key-change-in-production')

DEBUG = os.getenv('DJANGO_DEBUG', '').lower() in ('1', 'true', 'yes')

ALLOWED_HOSTS = [h.strip() for h in os.getenv('DJANGO_ALLOWED_HOSTS', '*').split(',') if h.strip()]

INSTALLED_APPS = [
    'corsheaders',
    'api',
]

MIDDLEWARE = [
    'corsheaders.middleware.CorsMiddleware',
    'django.middleware.common.CommonMiddleware',
    # No CsrfViewMiddleware: API-only backend, no HTML forms
]

CORS_ALLOW_ALL_ORIGINS = True

ROOT_URLCONF = 'opresult.urls'

# No templates needed (API-only)
TEMPLATES = []

# No database: envelopes are built and written within a single request
DATABASES = {}

# Optional dotted path to the JSON encoder for OperationResult envelopes.
# Unset means api.response.DEFAULT_ENCODER.
if os.getenv('OPERATION_RESULT_JSON_ENCODER'):
    OPERATION_RESULT_JSON_ENCODER = os.getenv('OPERATION_RESULT_JSON_ENCODER')

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'simple': {'format': '%(asctime)s %(levelname)s %(name)s: %(message)s'},
    },
    'handlers': {
        'console': {'class': 'logging.StreamHandler', 'formatter': 'simple'},
    },
    'root': {
        'handlers': ['console'],
        'level': os.getenv('LOG_LEVEL', 'INFO').upper(),
    },
}
