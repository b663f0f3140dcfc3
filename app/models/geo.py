# app/models/geo.py
from dataclasses import dataclass

@dataclass(frozen=True)
class Coordinate:
    """위도/경도 좌표 (도 단위). User, Post 문서의 'location' 필드에 포함됩니다."""
    latitude: float
    longitude: float
