# app/services/proximity_service.py
import logging
from dataclasses import dataclass, field
from typing import Callable, Iterable, List

from app.core.errors import MalformedTriggerPayloadError
from app.models.geo import Coordinate
from app.models.post import Post
from app.models.user import User
from app.schemas.document_schemas import UserDocumentSchema, load_document
from app.utils.geo_utils import haversine_km, format_distance

USERS_COLLECTION = 'users'

@dataclass
class NearbyUser:
    """근처 알림 대상 사용자와 게시물까지의 거리"""
    user: User
    distance_km: float

    @property
    def distance_label(self) -> str:
        """알림에 표시할 거리 (소수점 첫째 자리, 예: '5.6')"""
        return format_distance(self.distance_km)

@dataclass
class ProximityScanResult:
    author: User
    nearby: List[NearbyUser] = field(default_factory=list)

class ProximityScanner:
    """
    새 나눔 게시물 근처의 알림 대상 사용자를 찾는 서비스.
    전체 사용자를 한 번 순회하며(O(U)) 다음 조건을 모두 만족하는 사용자만 남깁니다.
    1. 게시물 작성자가 아님
    2. FCM 토큰이 있음
    3. 위치 정보가 있음
    4. 게시물까지의 거리 <= radius_km (경계 포함)
    """
    def __init__(self, store, radius_km: float = 20.0,
                 distance_fn: Callable[[Coordinate, Coordinate], float] = haversine_km):
        self.store = store
        self.radius_km = radius_km
        self.distance_fn = distance_fn

    def filter_nearby(self, post: Post, users: Iterable[User]) -> List[NearbyUser]:
        nearby = []
        for user in users:
            # 비용이 적은 검사부터 수행하고, 거리 계산은 마지막에 합니다.
            if user.user_id == post.posted_by:
                continue
            if not user.fcm_token:
                continue
            if user.location is None:
                continue

            distance = self.distance_fn(post.location, user.location)
            if distance <= self.radius_km:
                nearby.append(NearbyUser(user=user, distance_km=distance))
        return nearby

    def scan(self, post: Post) -> ProximityScanResult:
        """
        게시물 작성자를 조회한 뒤 전체 사용자 중 근처 사용자를 찾습니다.

        :raises ReferenceNotFoundError: 작성자 문서가 없는 경우 (스캔 중단, 알림 없음)
        """
        author_data = self.store.get(USERS_COLLECTION, post.posted_by)
        author = load_document(UserDocumentSchema(), post.posted_by, author_data,
                               f"{USERS_COLLECTION}/{post.posted_by}")

        nearby = self.filter_nearby(post, self._load_users())
        logging.info(f"게시물 {post.post_id} 근처 사용자 {len(nearby)}명 발견 (반경 {self.radius_km}km)")
        return ProximityScanResult(author=author, nearby=nearby)

    def _load_users(self) -> List[User]:
        schema = UserDocumentSchema()
        users = []
        for doc in self.store.get_all(USERS_COLLECTION):
            try:
                users.append(load_document(schema, doc.id, doc.data, f"{USERS_COLLECTION}/{doc.id}"))
            except MalformedTriggerPayloadError as e:
                logging.debug(f"사용자 문서를 건너뜁니다: {e}")
        return users
