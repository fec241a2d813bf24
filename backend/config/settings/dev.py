"""
Development settings for the ledger project.
"""

from .base import *

# =============================================================================
# DEBUG
# =============================================================================
DEBUG = True

ALLOWED_HOSTS = ['*']

# =============================================================================
# LOGGING - Development
# =============================================================================
LOGGING['root']['level'] = 'DEBUG'
for _name in LEDGER_LOGGERS:
    LOGGING['loggers'][_name]['level'] = 'DEBUG'
