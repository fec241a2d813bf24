"""
Base settings for the ledger project.

Values are read from the environment (or a ``.env`` file) through
python-decouple.
"""

from pathlib import Path

from decouple import Csv, config

BASE_DIR = Path(__file__).resolve().parent.parent.parent

# =============================================================================
# SECURITY
# =============================================================================
SECRET_KEY = config('SECRET_KEY', default='ledger-insecure-development-key')

DEBUG = config('DEBUG', default=False, cast=bool)

ALLOWED_HOSTS = config('ALLOWED_HOSTS', default='localhost,127.0.0.1', cast=Csv())

# =============================================================================
# APPLICATIONS
# =============================================================================
INSTALLED_APPS = [
    'django.contrib.contenttypes',
    'infrastructure.persistence.apps.PersistenceConfig',
]

MIDDLEWARE = []

# =============================================================================
# DATABASE
# =============================================================================
LEDGER_DB_PATH = config('LEDGER_DB_PATH', default=str(BASE_DIR / 'ledger.sqlite3'))

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': LEDGER_DB_PATH,
    }
}

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

# =============================================================================
# INTERNATIONALIZATION
# =============================================================================
LANGUAGE_CODE = 'en-us'
TIME_ZONE = config('TIME_ZONE', default='UTC')
USE_I18N = True
USE_TZ = True

# =============================================================================
# LEDGER
# =============================================================================
LEDGER_STRICT_COST_RESOLUTION = config('LEDGER_STRICT_COST_RESOLUTION', default=False, cast=bool)
LEDGER_SEED_DEMO_DATA = config('LEDGER_SEED_DEMO_DATA', default=True, cast=bool)
LEDGER_DEFAULT_COUNTRY = config('LEDGER_DEFAULT_COUNTRY', default='Brasil')

# =============================================================================
# LOGGING
# =============================================================================
LEDGER_LOG_FILE = config('LEDGER_LOG_FILE', default=str(BASE_DIR / 'logs' / 'ledger.log'))
LEDGER_LOG_LEVEL = config('LEDGER_LOG_LEVEL', default='INFO')

Path(LEDGER_LOG_FILE).parent.mkdir(parents=True, exist_ok=True)

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'verbose': {
            'format': '{levelname} {asctime} {name} {message}',
            'style': '{',
        },
        'simple': {
            'format': '{levelname} {message}',
            'style': '{',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'simple',
        },
        'file': {
            'class': 'logging.handlers.RotatingFileHandler',
            'filename': LEDGER_LOG_FILE,
            'maxBytes': 5 * 1024 * 1024,
            'backupCount': 5,
            'formatter': 'verbose',
        },
    },
    'root': {
        'handlers': ['console'],
        'level': 'WARNING',
    },
    'loggers': {
        'django': {
            'handlers': ['console'],
            'level': 'INFO',
            'propagate': False,
        },
        'ledger': {
            'handlers': ['console', 'file'],
            'level': LEDGER_LOG_LEVEL,
            'propagate': False,
        },
        'domain': {
            'handlers': ['console', 'file'],
            'level': LEDGER_LOG_LEVEL,
            'propagate': False,
        },
        'application': {
            'handlers': ['console', 'file'],
            'level': LEDGER_LOG_LEVEL,
            'propagate': False,
        },
        'infrastructure': {
            'handlers': ['console', 'file'],
            'level': LEDGER_LOG_LEVEL,
            'propagate': False,
        },
    },
}

LEDGER_LOGGERS = ('ledger', 'domain', 'application', 'infrastructure')
