#!/usr/bin/env python
"""
Assessment backend 관리 커맨드

  python manage.py runserver
  python manage.py run_outbox_worker [--once]
  python manage.py run_ai_worker [--once]
  python manage.py run_deadline_sweeper [--once] [--interval N]
"""
import os
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent


def main():
    # apps / libs 는 repo 루트 기준 패키지로만 import
    if str(ROOT) not in sys.path:
        sys.path.insert(0, str(ROOT))

    os.environ.setdefault("DJANGO_SETTINGS_MODULE", "apps.api.config.settings.dev")

    from django.core.management import execute_from_command_line

    execute_from_command_line(sys.argv)


if __name__ == "__main__":
    main()
