"""Builders shared by the test modules."""
import math
from datetime import timedelta
from loggedin.models import Event
from loggedin.services.geofence_service import GeofenceService
from loggedin.utils.helpers import utcnow

CENTER = (14.5995, 120.9842)
STUDENT_EMAIL = 'a@sti.edu.ph'

def north_of(latitude: float, longitude: float, meters: float):
    """Point ``meters`` due north; along a meridian haversine distance is exact."""
    degrees = math.degrees(meters / GeofenceService.EARTH_RADIUS_METERS)
    return latitude + degrees, longitude

def make_event(title='Programming Workshop', secret='S1', radius=100, geo_fence='circle',
               starts_in=timedelta(hours=-1), ends_in=timedelta(hours=2)):
    now = utcnow()
    if geo_fence == 'circle':
        geo_fence = GeofenceService.build_circle(CENTER[0], CENTER[1], radius)
    event = Event(
        title=title,
        description='Learn the basics of programming with Python',
        location='Computer Lab 101',
        start_time=now + starts_in,
        end_time=now + ends_in,
        geo_fence=geo_fence,
        qr_code_secret=secret
    )
    return event.save()
