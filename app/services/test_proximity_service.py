# app/services/test_proximity_service.py
import logging

import pytest

from app.core.errors import ReferenceNotFoundError
from app.models.geo import Coordinate
from app.models.post import Post
from app.models.user import User
from app.services.proximity_service import ProximityScanner

POST_LOCATION = Coordinate(0.0, 0.0)

def make_post(author="A", location=POST_LOCATION):
    return Post(post_id="p1", posted_by=author, title="Kimchi", location=location)

def test_author_is_never_included(store):
    """작성자는 거리 0이어도 알림 대상이 아님"""
    scanner = ProximityScanner(store)
    users = [
        User(user_id="A", name="Author", fcm_token="tok-a", location=POST_LOCATION),
        User(user_id="B", name="Bob", fcm_token="tok-b", location=POST_LOCATION),
    ]
    nearby = scanner.filter_nearby(make_post(), users)
    assert [n.user.user_id for n in nearby] == ["B"]

def test_users_without_token_or_location_are_excluded(store):
    """토큰 또는 위치가 없는 사용자는 같은 위치에 있어도 제외"""
    scanner = ProximityScanner(store)
    users = [
        User(user_id="no-token", name="N", fcm_token=None, location=POST_LOCATION),
        User(user_id="empty-token", name="E", fcm_token="", location=POST_LOCATION),
        User(user_id="no-location", name="L", fcm_token="tok", location=None),
    ]
    assert scanner.filter_nearby(make_post(), users) == []

def test_radius_boundary_is_inclusive(store):
    """반경 20km: 5, 19.9, 20.0km 사용자는 포함, 20.1, 50km 사용자는 제외"""
    distances = {"u5": 5.0, "u19.9": 19.9, "u20.0": 20.0, "u20.1": 20.1, "u50": 50.0}
    locations = {user_id: Coordinate(float(i + 1), 0.0) for i, user_id in enumerate(distances)}
    by_location = {location: distances[user_id] for user_id, location in locations.items()}

    scanner = ProximityScanner(store, radius_km=20.0, distance_fn=lambda origin, target: by_location[target])
    users = [User(user_id=uid, name=uid, fcm_token=f"tok-{uid}", location=loc) for uid, loc in locations.items()]

    nearby = scanner.filter_nearby(make_post(), users)
    assert {n.user.user_id for n in nearby} == {"u5", "u19.9", "u20.0"}
    assert {n.distance_label for n in nearby} == {"5.0", "19.9", "20.0"}

def test_radius_with_real_geometry(store):
    """실제 haversine 거리로 경계 안/밖 판별"""
    km_per_degree = 6371.0 * 3.141592653589793 / 180
    scanner = ProximityScanner(store, radius_km=20.0)
    users = [
        User(user_id="near", name="n", fcm_token="t1", location=Coordinate(19.9 / km_per_degree, 0.0)),
        User(user_id="far", name="f", fcm_token="t2", location=Coordinate(20.1 / km_per_degree, 0.0)),
    ]
    nearby = scanner.filter_nearby(make_post(), users)
    assert [n.user.user_id for n in nearby] == ["near"]
    assert nearby[0].distance_label == "19.9"

def test_distance_is_computed_only_for_candidates(store):
    """저렴한 조건을 통과하지 못한 사용자는 거리 계산을 하지 않음"""
    calls = []

    def counting_distance(origin, target):
        calls.append(target)
        return 1.0

    scanner = ProximityScanner(store, distance_fn=counting_distance)
    users = [
        User(user_id="A", name="Author", fcm_token="tok", location=Coordinate(1.0, 1.0)),
        User(user_id="B", name="NoToken", location=Coordinate(2.0, 2.0)),
        User(user_id="C", name="NoLocation", fcm_token="tok"),
        User(user_id="D", name="Ok", fcm_token="tok", location=Coordinate(3.0, 3.0)),
    ]
    scanner.filter_nearby(make_post(), users)
    assert calls == [Coordinate(3.0, 3.0)]

def test_scan_loads_author_and_population(store):
    store.add("users", "A", {"name": "Alice", "fcmToken": "tok-a", "location": {"latitude": 0.0, "longitude": 0.0}})
    store.add("users", "B", {"name": "Bob", "fcmToken": "tok-b", "location": {"latitude": 0.05, "longitude": 0.0}})
    store.add("users", "C", {"name": "Carol", "fcmToken": "tok-c", "location": {"latitude": 1.0, "longitude": 0.0}})

    result = ProximityScanner(store).scan(make_post())
    assert result.author.name == "Alice"
    assert [n.user.user_id for n in result.nearby] == ["B"]
    assert result.nearby[0].distance_label == "5.6"

def test_scan_aborts_when_author_is_missing(store):
    """작성자 문서가 없으면 스캔 전체를 중단"""
    store.add("users", "B", {"name": "Bob", "fcmToken": "tok-b", "location": {"latitude": 0.0, "longitude": 0.0}})
    with pytest.raises(ReferenceNotFoundError) as exc_info:
        ProximityScanner(store).scan(make_post(author="ghost"))
    assert exc_info.value.collection == "users"
    assert exc_info.value.doc_id == "ghost"

def test_scan_with_no_other_users_is_empty(store):
    store.add("users", "A", {"name": "Alice"})
    result = ProximityScanner(store).scan(make_post())
    assert result.nearby == []

def test_malformed_user_documents_are_skipped(store, caplog):
    caplog.set_level(logging.DEBUG)
    store.add("users", "A", {"name": "Alice"})
    store.add("users", "broken", {"name": 42, "fcmToken": "tok", "location": {"latitude": 0.0, "longitude": 0.0}})
    store.add("users", "B", {"name": "Bob", "fcmToken": "tok-b", "location": {"latitude": 0.0, "longitude": 0.0}})

    result = ProximityScanner(store).scan(make_post())
    assert [n.user.user_id for n in result.nearby] == ["B"]
    assert "users/broken" in caplog.text
