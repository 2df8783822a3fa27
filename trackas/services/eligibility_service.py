# services/eligibility_service.py
"""
Geofence eligibility for attendance registration.
Compares a student's reported position with the class venue against the
configured radius.
"""

from enum import Enum
from typing import NamedTuple, Optional

from trackas.utils.geo import Coordinate, coerce_float, in_range, distance_meters, format_distance

DEFAULT_RADIUS_METERS = 30000

DENIED_ERRORS = {'denied', 'permission_denied'}


class PositionStatus(Enum):
    UNKNOWN = 'unknown'
    AVAILABLE = 'available'
    DENIED = 'denied'


class PositionResult(NamedTuple):
    """A single device position sample, or why there is none."""

    status: PositionStatus
    coordinate: Optional[Coordinate] = None

    @classmethod
    def unknown(cls):
        return cls(PositionStatus.UNKNOWN)

    @classmethod
    def denied(cls):
        return cls(PositionStatus.DENIED)

    @classmethod
    def available(cls, coordinate):
        return cls(PositionStatus.AVAILABLE, coordinate)

    @classmethod
    def from_payload(cls, latitude, longitude, error=None):
        """
        Build a result from what the browser reported.

        Device positions are range-checked but never axis-swapped.
        """
        if error:
            if str(error).strip().lower() in DENIED_ERRORS:
                return cls.denied()
            return cls.unknown()

        lat = coerce_float(latitude)
        lng = coerce_float(longitude)
        if lat is None or lng is None or not in_range(lat, lng):
            return cls.unknown()

        return cls.available(Coordinate(lat, lng))


class EligibilityVerdict(NamedTuple):
    distance_meters: Optional[float]
    within_range: bool
    distance_check_enabled: bool

    def to_dict(self):
        distance_km = None
        if self.distance_meters is not None:
            distance_km = round(self.distance_meters / 1000, 2)
        return {
            'distance_meters': self.distance_meters,
            'distance_km': distance_km,
            'distance_display': format_distance(self.distance_meters),
            'within_range': self.within_range,
            'distance_check_enabled': self.distance_check_enabled
        }


NOT_EVALUATED = EligibilityVerdict(None, False, True)


class EligibilityService:
    """Stateless eligibility checks."""

    @staticmethod
    def evaluate(live_coordinate, venue_coordinate, threshold_meters=DEFAULT_RADIUS_METERS):
        """
        Decide whether a position is close enough to the venue.

        Args:
            live_coordinate: Student's Coordinate, or None when unavailable
            venue_coordinate: Venue Coordinate, or None when missing/invalid
            threshold_meters: Inclusive radius

        Returns:
            EligibilityVerdict. With no venue coordinate the distance check is
            disabled and the verdict is never within range.
        """
        if venue_coordinate is None:
            return EligibilityVerdict(None, False, False)

        if live_coordinate is None:
            return EligibilityVerdict(None, False, True)

        meters = distance_meters(live_coordinate, venue_coordinate)
        return EligibilityVerdict(meters, meters <= threshold_meters, True)
