from __future__ import annotations

import math
from datetime import datetime, timedelta

import pytest

from worksite_tracking.container import build_in_memory_container
from worksite_tracking.geofence.model import GeofenceSpec
from worksite_tracking.projects.model import Project
from worksite_tracking.settings import EngineSettings

SITE_LAT = 9.908612
SITE_LNG = 78.090842

GEOFENCED_PROJECT = 1
BYPASS_PROJECT = 2
UNCONFIGURED_PROJECT = 3


def north_of_site(meters: float) -> tuple[float, float]:
    """A point ``meters`` due north of the site center (exact on the haversine sphere)."""
    return SITE_LAT + math.degrees(meters / 6_371_000), SITE_LNG


class FakeClock:
    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2024, 3, 4, 7, 0, 0))


@pytest.fixture
def engine_settings() -> EngineSettings:
    return EngineSettings()


@pytest.fixture
def container(clock, engine_settings):
    c = build_in_memory_container(engine_settings, clock=clock)
    c.projects_repo.add(
        Project(
            project_id=GEOFENCED_PROJECT,
            name="Riverside Tower",
            geofence=GeofenceSpec(center_latitude=SITE_LAT, center_longitude=SITE_LNG, radius_meters=100, allowed_variance_meters=50),
        )
    )
    c.projects_repo.add(Project(project_id=BYPASS_PROJECT, name="Depot yard", geofence=None, allow_geofence_bypass=True))
    c.projects_repo.add(Project(project_id=UNCONFIGURED_PROJECT, name="Survey", geofence=None))
    return c
