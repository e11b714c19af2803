"""
Flask Extensions
================
All Flask extensions are initialized here to avoid circular imports
and make them easily accessible throughout the application.
"""

from flask_babel import Babel
from flask_caching import Cache
from flask_wtf.csrf import CSRFProtect

babel = Babel()
csrf = CSRFProtect()
# Backend query cache; configured from Config.CACHE_TYPE / CACHE_DEFAULT_TIMEOUT
cache = Cache()
