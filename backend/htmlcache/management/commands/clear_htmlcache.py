from django.core.management.base import BaseCommand

from htmlcache.invalidator import Invalidator


class Command(BaseCommand):
    help = "Clear the HTML page cache (all pages, or the pages depending on given content units)"

    def add_arguments(self, parser):
        parser.add_argument(
            "--content-unit",
            action="append",
            dest="content_units",
            default=[],
            help="Content unit identifier (e.g. 'articles.article:42'); may be repeated",
        )

    def handle(self, *args, **options):
        content_units = options.get("content_units") or []
        invalidator = Invalidator.from_settings()

        if content_units:
            # Targeted invalidation
            total = 0
            for content_unit in content_units:
                try:
                    removed = invalidator.on_content_unit_changed(content_unit)
                except Exception as e:
                    self.stdout.write(
                        self.style.ERROR(f"Error invalidating content unit {content_unit}: {e}")
                    )
                    continue
                total += removed
                self.stdout.write(f"Invalidated {content_unit}: {removed} cached page(s) removed")

            self.stdout.write(
                self.style.SUCCESS(f"\nRemoved {total} cached page(s) for {len(content_units)} content unit(s)")
            )
        else:
            invalidator.clear_all()
            self.stdout.write(self.style.SUCCESS("HTML page cache has been cleared!"))
