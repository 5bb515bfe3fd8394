from django.conf import settings
from django.core.management.base import BaseCommand

from gnapserver.container import get_container
from stator.runner import SweepRunner


class Command(BaseCommand):
    help = "Runs the expiry sweeps for grants, tokens and interactions"

    def add_arguments(self, parser):
        parser.add_argument(
            "--interval",
            "-i",
            type=int,
            default=None,
            help="Seconds between sweeps (defaults to GNAP_CLEANUP_INTERVAL)",
        )
        parser.add_argument(
            "--liveness-file",
            type=str,
            default=None,
            help="A file to touch every sweep to say the runner is alive",
        )
        parser.add_argument(
            "--run-for",
            "-r",
            type=int,
            default=0,
            help="How long to run for before exiting (defaults to infinite)",
        )
        parser.add_argument(
            "--once",
            action="store_true",
            help="Run every sweep once and exit",
        )

    def handle(
        self,
        interval: int | None,
        liveness_file: str | None,
        run_for: int,
        once: bool,
        *args,
        **options
    ):
        runner = SweepRunner(
            get_container().sweeps(),
            interval=interval or settings.GNAP_CLEANUP_INTERVAL,
            liveness_file=liveness_file,
            run_for=run_for,
            watchdog=not once,
        )
        if once:
            for name, affected in runner.run_single_cycle().items():
                self.stdout.write(f"{name}: {affected}")
            return
        try:
            runner.run()
        except KeyboardInterrupt:
            self.stdout.write("Ctrl-C received")
