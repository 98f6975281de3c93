"""Root conftest for all tests.

Provides small GPX and TCX documents shared across test modules.
"""

import pytest

from tests.factories import gpx_point, make_gpx, make_tcx, tcx_point


@pytest.fixture
def gpx_text():
    """Three points along the equator, one second apart, with HR and cadence."""
    return make_gpx(
        gpx_point(0, 0, "2024-05-01T10:00:00Z", hr=140, cad=170, ele=10.5),
        gpx_point(0, 0.001, "2024-05-01T10:00:01Z", hr=150, cad=172, ele=11.0),
        gpx_point(0, 0.002, "2024-05-01T10:00:02Z", hr=160, cad=174, ele=11.5),
    )


@pytest.fixture
def tcx_text():
    """Three points matching the GPX fixture's timestamps, with chest-strap HR."""
    return make_tcx(
        tcx_point("2024-05-01T10:00:00Z", lat=0, lon=0, hr=145, cad=85, distance_m=0.0),
        tcx_point("2024-05-01T10:00:01Z", lat=0, lon=0.001, hr=155, cad=86, distance_m=111.0),
        tcx_point("2024-05-01T10:00:02Z", lat=0, lon=0.002, hr=165, cad=87, distance_m=222.0),
    )
