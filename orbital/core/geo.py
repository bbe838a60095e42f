"""Ground-track regions - Pure data structures.

Maps a satellite sub-point to a human-readable region name.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class Region:
    """Named latitude/longitude rectangle, edges inclusive."""
    name: str
    south: float
    north: float
    west: float
    east: float

    def contains(self, latitude: float, longitude: float) -> bool:
        return self.south <= latitude <= self.north and self.west <= longitude <= self.east


# Checked in order; the first match wins
SATELLITE_REGIONS: tuple[Region, ...] = (
    Region("Over Japan/Taiwan", 20, 50, 120, 150),
    Region("Over the United States", 30, 50, -130, -60),
    Region("Over Europe", 35, 70, -10, 40),
    Region("Over Australia", -35, 0, 110, 155),
    Region("Over Asia", 0, 55, 60, 140),
    Region("Over South America", -60, 15, -80, -35),
    Region("Over Africa", -35, 35, -20, 50),
)

POLAR_LATITUDE = 60


def describe_location(latitude: float, longitude: float) -> str:
    """Describe the region a ground-track point is over.

    Pure function. Points outside every named region are reported as
    polar above POLAR_LATITUDE and as ocean otherwise.
    """
    for region in SATELLITE_REGIONS:
        if region.contains(latitude, longitude):
            return region.name
    if abs(latitude) > POLAR_LATITUDE:
        return "Over the polar region"
    return "Over the ocean"
