from rest_framework import permissions


class IsAdmin(permissions.BasePermission):
    def has_permission(self, request, view):
        if not request.user.is_authenticated:
            return False
        return request.user.is_superuser or request.user.is_staff


def parse_point(value):
    """
    Read a geographic point from request data.

    Accepts ``{"lat": .., "lng": ..}``, a GeoJSON point
    ``{"type": "Point", "coordinates": [lng, lat]}`` or a bare ``[lng, lat]`` pair.
    Returns ``(lat, lng)`` as floats or raises ``ValueError``.
    """
    if isinstance(value, dict):
        if 'coordinates' in value:
            return parse_point(value['coordinates'])
        if 'lat' in value and 'lng' in value:
            lat, lng = float(value['lat']), float(value['lng'])
        else:
            raise ValueError("Location must have 'lat' and 'lng' or 'coordinates'")
    elif isinstance(value, (list, tuple)) and len(value) == 2:
        lng, lat = float(value[0]), float(value[1])
    else:
        raise ValueError("Unrecognised location format")

    if not -90 <= lat <= 90 or not -180 <= lng <= 180:
        raise ValueError("Location is out of range")
    return lat, lng


def point_as_geojson(lat, lng):
    if lat is None or lng is None:
        return None
    return {'type': 'Point', 'coordinates': [lng, lat]}
