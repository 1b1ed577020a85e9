from django.core.management.base import BaseCommand

from htmlcache.conf import load_config
from htmlcache.invalidator import Invalidator


class Command(BaseCommand):
    help = "Remove expired HTML page cache entries and orphaned bodies"

    def add_arguments(self, parser):
        parser.add_argument(
            "--duration",
            type=int,
            help="Cache duration in seconds (defaults to the configured duration)",
        )

    def handle(self, *args, **options):
        duration = options.get("duration")
        if duration is None:
            duration = load_config().cache_duration
        if duration <= 0:
            self.stdout.write(self.style.ERROR(f"Duration must be positive, got {duration}"))
            return

        removed = Invalidator.from_settings().purge_expired(duration)
        self.stdout.write(
            self.style.SUCCESS(f"Removed {removed} expired cache entr{'y' if removed == 1 else 'ies'}")
        )
