# PATH: apps/domains/attempts/management/commands/run_deadline_sweeper.py
"""
Deadline Sweeper: 만료 attempt → timeout, idle attempt → escaped, 발표 마감 경고.

Long-running (interval loop):
  python manage.py run_deadline_sweeper

Run via cron (e.g. every minute):
  python manage.py run_deadline_sweeper --once
"""
from django.conf import settings
from django.core.management.base import BaseCommand

from apps.domains.attempts.services.deadline_sweeper import sweep_deadlines
from apps.shared.queue.loop import run_polling_loop
from libs.observability.shutdown import setup_graceful_shutdown


class Command(BaseCommand):
    help = "Time out expired attempts, escape idle ones, and enqueue presentation deadline warnings"

    def add_arguments(self, parser):
        parser.add_argument(
            "--once",
            action="store_true",
            help="Run a single sweep and exit",
        )
        parser.add_argument(
            "--interval",
            type=float,
            default=None,
            help="Seconds between sweeps (default: DEADLINE_SWEEP_INTERVAL_SECONDS)",
        )

    def handle(self, *args, **options):
        once = bool(options.get("once"))
        interval = options.get("interval") or float(getattr(settings, "DEADLINE_SWEEP_INTERVAL_SECONDS", 60))

        if once:
            report = sweep_deadlines()
            self.stdout.write(
                self.style.SUCCESS(
                    f"Done: timed_out={report.timed_out} escaped={report.escaped} warned={report.warned}"
                )
            )
            return

        setup_graceful_shutdown()

        def _sweep() -> bool:
            sweep_deadlines()
            return False  # 매 회 interval 만큼 쉰다

        run_polling_loop(
            name="DeadlineSweeper",
            run_once=_sweep,
            idle_sleep=float(interval),
            error_sleep=float(interval),
        )
