# apps/api/config/settings/worker.py

from .base import *
import os

# 워커(run_outbox_worker / run_ai_worker / run_deadline_sweeper)는 URLConf 불필요
ROOT_URLCONF = None

DEBUG = False

# ==================================================
# Worker 필수 env
# ==================================================
# 워커는 DB 가 유일한 조정 지점이다 (broker 없음)

DATABASES["default"]["NAME"] = os.environ["DB_NAME"]
DATABASES["default"]["CONN_MAX_AGE"] = int(os.environ.get("DB_CONN_MAX_AGE", "60"))
