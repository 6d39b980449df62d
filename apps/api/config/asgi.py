# PATH: apps/api/config/asgi.py
"""
ASGI entrypoint (API 서버 전용)

워커 / sweeper 는 manage.py 커맨드로 띄우고 여기로 들어오지 않는다.
"""
import os

from django.core.asgi import get_asgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "apps.api.config.settings.prod")

application = get_asgi_application()
