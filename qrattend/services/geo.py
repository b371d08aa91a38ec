from haversine import Unit, haversine

from qrattend.config import GEOFENCE_RADIUS_METERS


def distance_meters(origin, point):
    """Great-circle distance between two (lat, lon) pairs in decimal degrees.

    The haversine library uses the mean Earth radius (6371.0088 km).
    """
    return haversine(origin, point, unit=Unit.METERS)


def is_too_far(distance, radius_meters=GEOFENCE_RADIUS_METERS):
    # exactly on the radius still counts as inside
    return distance > radius_meters
