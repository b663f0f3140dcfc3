# app/utils/test_geo_utils.py
import math

import pytest

from app.models.geo import Coordinate
from app.utils.geo_utils import EARTH_RADIUS_KM, haversine_km, format_distance

def test_same_point_is_zero():
    """같은 좌표 사이의 거리는 0"""
    for point in [Coordinate(0.0, 0.0), Coordinate(37.5665, 126.978), Coordinate(-89.9, 179.9)]:
        assert haversine_km(point, point) == 0.0

def test_symmetry():
    a = Coordinate(40.0, -75.0)
    b = Coordinate(41.3, -73.2)
    assert haversine_km(a, b) == pytest.approx(haversine_km(b, a))

def test_one_degree_of_latitude_is_about_111_km():
    """적도에서 위도 1도 차이는 약 111km"""
    distance = haversine_km(Coordinate(0.0, 0.0), Coordinate(1.0, 0.0))
    assert distance == pytest.approx(EARTH_RADIUS_KM * math.pi / 180, rel=1e-9)
    assert distance == pytest.approx(111.19, abs=0.01)

def test_antipodal_points():
    """대척점 사이 거리는 지구 반둘레 (NaN 없이 계산되어야 함)"""
    distance = haversine_km(Coordinate(0.0, 0.0), Coordinate(0.0, 180.0))
    assert distance == pytest.approx(math.pi * EARTH_RADIUS_KM, rel=1e-9)

    distance = haversine_km(Coordinate(90.0, 0.0), Coordinate(-90.0, 0.0))
    assert distance == pytest.approx(math.pi * EARTH_RADIUS_KM, rel=1e-9)

def test_known_city_distance():
    """서울 - 부산 직선 거리 약 325km"""
    seoul = Coordinate(37.5665, 126.9780)
    busan = Coordinate(35.1796, 129.0756)
    assert haversine_km(seoul, busan) == pytest.approx(325, abs=5)

def test_format_distance():
    assert format_distance(5.5597) == "5.6"
    assert format_distance(0.0) == "0.0"
    assert format_distance(19.94) == "19.9"
    assert format_distance(20.0) == "20.0"
