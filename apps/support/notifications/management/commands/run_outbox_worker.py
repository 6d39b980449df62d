# PATH: apps/support/notifications/management/commands/run_outbox_worker.py
"""
Notification Outbox delivery worker.

Long-running:
  python manage.py run_outbox_worker

Drain once (cron):
  python manage.py run_outbox_worker --once
"""
from django.core.management.base import BaseCommand

from apps.shared.queue.loop import run_polling_loop
from apps.support.notifications.config import load_config
from apps.support.notifications.services.outbox import OutboxDelivery
from libs.observability.shutdown import setup_graceful_shutdown


class Command(BaseCommand):
    help = "Deliver pending outbox events to the configured webhook (signed POST, retry with backoff)"

    def add_arguments(self, parser):
        parser.add_argument(
            "--once",
            action="store_true",
            help="Deliver until the queue is empty, then exit",
        )

    def handle(self, *args, **options):
        cfg = load_config()
        delivery = OutboxDelivery(cfg=cfg)

        if not options.get("once"):
            setup_graceful_shutdown()

        processed = run_polling_loop(
            name=f"OutboxWorker[{cfg.WORKER_ID}]",
            run_once=delivery.run_once,
            idle_sleep=cfg.POLL_INTERVAL_SECONDS,
            error_sleep=cfg.ERROR_SLEEP_SECONDS,
            stop_when_idle=bool(options.get("once")),
        )
        self.stdout.write(self.style.SUCCESS(f"Done: processed={processed}"))
