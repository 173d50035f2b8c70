from django.db import models
from core.utils import point_as_geojson


class Location(models.Model):
    """A named place users can pick instead of dropping a pin."""
    name = models.CharField(max_length=100, unique=True)
    latitude = models.FloatField()
    longitude = models.FloatField()
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['name']

    def __str__(self):
        return self.name

    @property
    def point(self):
        return self.latitude, self.longitude

    def as_geojson(self):
        return point_as_geojson(self.latitude, self.longitude)
