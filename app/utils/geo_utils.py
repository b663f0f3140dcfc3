# app/utils/geo_utils.py
import math

from app.models.geo import Coordinate

EARTH_RADIUS_KM = 6371.0

def haversine_km(origin: Coordinate, target: Coordinate) -> float:
    """
    두 좌표 사이의 대원(great-circle) 거리를 km 단위로 계산합니다. (Haversine 공식)

    :param origin: 기준 좌표 (도 단위)
    :param target: 대상 좌표 (도 단위)
    :return: 거리 (km)
    """
    lat1 = math.radians(origin.latitude)
    lat2 = math.radians(target.latitude)
    d_lat = lat2 - lat1
    d_lon = math.radians(target.longitude - origin.longitude)

    a = math.sin(d_lat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(d_lon / 2) ** 2
    # 부동소수점 오차로 a가 [0, 1]을 벗어나면 대척점에서 sqrt(1 - a)가 실패합니다.
    a = min(1.0, max(0.0, a))
    return 2 * EARTH_RADIUS_KM * math.atan2(math.sqrt(a), math.sqrt(1 - a))

def format_distance(distance_km: float) -> str:
    """알림 본문에 표시할 거리 문자열 (소수점 첫째 자리)"""
    return f"{distance_km:.1f}"
