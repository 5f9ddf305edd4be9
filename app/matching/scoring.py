"""Match scoring between a found-item report and a registered lost asset.

Pure functions only: no database, no clock, no logging. Everything the score
depends on is read from the two records passed in.

Score composition
-----------------
* Category is a hard filter. A mismatch makes the pair ineligible.
* Temporal term: hours between the found report and the moment the asset was
  last marked lost, bucketed into 100 / 50 / 0.
* Spatial term: haversine distance between the found location and the
  owner's last-seen location, bucketed into 100 / 50 / 0. Only used when both
  sides have coordinates; otherwise the final score is the temporal term alone.
"""

import math
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

EARTH_RADIUS_M = 6371e3


@dataclass(frozen=True)
class ScoringPolicy:
    threshold: float = 80.0
    temporal_full_hours: float = 24.0
    temporal_half_hours: float = 48.0
    spatial_full_meters: float = 500.0
    spatial_half_meters: float = 1500.0
    temporal_weight: float = 0.5
    spatial_weight: float = 0.5


DEFAULT_POLICY = ScoringPolicy()


@dataclass(frozen=True)
class MatchScore:
    score: float
    eligible: bool
    is_match: bool
    time_delta_hours: Optional[float] = None
    distance_m: Optional[float] = None


def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in meters between two points in decimal degrees."""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    delta_phi = math.radians(lat2 - lat1)
    delta_lambda = math.radians(lon2 - lon1)

    a = (
        math.sin(delta_phi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(delta_lambda / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_M * c


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes, they were stored as UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def hours_between(a: datetime, b: datetime) -> float:
    return abs((_as_utc(a) - _as_utc(b)).total_seconds()) / 3600


def temporal_score(delta_hours: float, policy: ScoringPolicy = DEFAULT_POLICY) -> float:
    if delta_hours < policy.temporal_full_hours:
        return 100.0
    if delta_hours < policy.temporal_half_hours:
        return 50.0
    return 0.0


def spatial_score(distance_m: float, policy: ScoringPolicy = DEFAULT_POLICY) -> float:
    if distance_m < policy.spatial_full_meters:
        return 100.0
    if distance_m < policy.spatial_half_meters:
        return 50.0
    return 0.0


def _coordinates(lat: Optional[float], lon: Optional[float]):
    if lat is None or lon is None:
        return None
    return lat, lon


def score(found_item, lost_asset, policy: ScoringPolicy = DEFAULT_POLICY) -> MatchScore:
    """Score one found item against one lost asset.

    ``found_item`` needs ``category``, ``created_at``, ``latitude`` and
    ``longitude``; ``lost_asset`` needs ``category``, ``updated_at``,
    ``last_seen_latitude`` and ``last_seen_longitude``.
    """
    if found_item.category != lost_asset.category:
        return MatchScore(score=0.0, eligible=False, is_match=False)

    delta_hours = hours_between(found_item.created_at, lost_asset.updated_at)
    time_part = temporal_score(delta_hours, policy)

    found_at = _coordinates(found_item.latitude, found_item.longitude)
    lost_at = _coordinates(lost_asset.last_seen_latitude, lost_asset.last_seen_longitude)

    distance = None
    if found_at and lost_at:
        distance = haversine_distance(*found_at, *lost_at)
        final = (
            policy.temporal_weight * time_part
            + policy.spatial_weight * spatial_score(distance, policy)
        )
    else:
        # missing location is not a penalty
        final = time_part

    return MatchScore(
        score=final,
        eligible=True,
        is_match=final >= policy.threshold,
        time_delta_hours=delta_hours,
        distance_m=distance,
    )
