"""Named location catalog and the towns it ships with."""
import logging

from django.db import transaction

from core.exceptions import NotFound
from .models import Location

logger = logging.getLogger(__name__)

# name, [lng, lat]
BOTSWANA_TOWNS = [
    ('Gaborone', [25.9231, -24.6282]),
    ('Francistown', [27.5079, -21.1702]),
    ('Molepolole', [25.5126, -24.4067]),
    ('Maun', [23.4300, -19.9833]),
    ('Serowe', [26.7107, -22.3873]),
    ('Kanye', [25.3519, -24.9667]),
    ('Mochudi', [26.1500, -24.4000]),
    ('Palapye', [27.1200, -22.5500]),
    ('Lobatse', [25.6800, -25.2200]),
    ('Ramotswa', [25.8699, -24.8716]),
    ('Selibe Phikwe', [27.8333, -21.9833]),
    ('Ghanzi', [21.6937, -21.5667]),
    ('Kasane', [25.1561, -17.7983]),
    ('Letlhakane', [25.5833, -21.4167]),
    ('Moshupa', [25.4197, -24.7716]),
    ('Shakawe', [21.8500, -18.3667]),
    ('Tonota', [27.4600, -21.4400]),
    ('Bobonong', [28.0500, -22.2000]),
    ('Tlokweng', [25.9667, -24.6500]),
    ('Jwaneng', [24.6028, -24.6017]),
]


def get_location(location_id):
    try:
        return Location.objects.get(pk=location_id)
    except (Location.DoesNotExist, ValueError, TypeError):
        raise NotFound("Location not found")


def seed_locations(towns=BOTSWANA_TOWNS):
    """
    Insert or refresh the given towns by name.

    Returns ``(created, updated)`` counts. Locations not in ``towns`` are left alone.
    """
    created = updated = 0
    with transaction.atomic():
        for name, (lng, lat) in towns:
            _, was_created = Location.objects.update_or_create(
                name=name, defaults={'latitude': lat, 'longitude': lng}
            )
            if was_created:
                created += 1
            else:
                updated += 1
    logger.info(f"Seeded locations: {created} created, {updated} updated")
    return created, updated
