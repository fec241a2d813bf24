"""
Production settings for the ledger project.
"""

from .base import *

# =============================================================================
# SECURITY
# =============================================================================
DEBUG = False

ALLOWED_HOSTS = config('ALLOWED_HOSTS', cast=Csv())

# =============================================================================
# LOGGING - Production
# =============================================================================
for _name in LEDGER_LOGGERS:
    LOGGING['loggers'][_name]['level'] = 'INFO'
