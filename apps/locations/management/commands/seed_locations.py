from django.core.management.base import BaseCommand

from apps.locations.catalog import seed_locations


class Command(BaseCommand):
    help = "Load the default catalog of Botswana towns into the location table."

    def handle(self, *args, **options):
        created, updated = seed_locations()
        self.stdout.write(self.style.SUCCESS(f"Locations seeded: {created} created, {updated} updated"))
