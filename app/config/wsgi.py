"""
WSGI config for the billing service.

While this project primarily uses ASGI, WSGI is provided as a fallback for
traditional deployment options. Async views still work under WSGI; Django
runs them in a per-request event loop.

For more information on this file, see:
https://docs.djangoproject.com/en/5.2/howto/deployment/wsgi/
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

application = get_wsgi_application()
