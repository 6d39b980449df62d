# PATH: apps/domains/ai/management/commands/run_ai_worker.py
"""
AI Job worker (DB queue polling)

  python manage.py run_ai_worker
  python manage.py run_ai_worker --once     # 큐가 빌 때까지만
"""
from django.core.management.base import BaseCommand

from apps.domains.ai.config import load_config
from apps.domains.ai.services.runner import AIJobRunner
from apps.shared.queue.loop import run_polling_loop
from libs.observability.shutdown import setup_graceful_shutdown


class Command(BaseCommand):
    help = "Claim pending AI generation jobs and run the generation pipeline"

    def add_arguments(self, parser):
        parser.add_argument(
            "--once",
            action="store_true",
            help="Process until the queue is empty, then exit",
        )

    def handle(self, *args, **options):
        cfg = load_config()
        runner = AIJobRunner(cfg=cfg)

        if not options.get("once"):
            setup_graceful_shutdown()

        processed = run_polling_loop(
            name=f"AIWorker[{cfg.WORKER_ID}]",
            run_once=runner.run_once,
            idle_sleep=cfg.POLL_INTERVAL_SECONDS,
            error_sleep=cfg.ERROR_SLEEP_SECONDS,
            stop_when_idle=bool(options.get("once")),
        )
        self.stdout.write(self.style.SUCCESS(f"Done: processed={processed}"))
