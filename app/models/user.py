# app/models/user.py
from dataclasses import dataclass
from typing import Optional

from app.models.geo import Coordinate

@dataclass
class User:
    """
    Firestore 'users' 컬렉션의 문서 구조를 정의하는 데이터클래스.
    문서 ID가 사용자 ID입니다. 앱이 프로필/위치를 갱신하며, 백엔드는 읽기만 합니다.
    """
    user_id: str
    name: str
    fcm_token: Optional[str] = None       # 없으면 푸시 알림 대상이 아님
    location: Optional[Coordinate] = None # 없으면 근처 알림 대상이 아님
