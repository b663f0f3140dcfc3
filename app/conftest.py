# app/conftest.py
"""
테스트 공용 fixture

Firestore와 FCM 대신 사용할 메모리 기반 가짜 객체를 제공합니다.
사용법: python -m pytest -v
"""
import threading
from datetime import datetime, timezone

import pytest

from app.core.errors import DeliveryError, DeliveryFailureKind, ReferenceNotFoundError, StaleTokenError
from app.core.observability import ObservabilitySink
from app.services.firestore_service import StoredDocument
from app.services.notification_service import NotificationDispatcher
from app.services.proximity_service import ProximityScanner
from app.triggers.handlers import NotificationHandlers
from app.triggers.router import TriggerRouter, register_handlers

FIXED_NOW = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)

class FakeDocumentStore:
    """FirestoreDocumentStore와 같은 인터페이스의 메모리 저장소. {컬렉션 경로: {문서 ID: 데이터}}"""

    def __init__(self, collections=None):
        self.collections = {name: dict(docs) for name, docs in (collections or {}).items()}

    def add(self, collection, doc_id, data):
        self.collections.setdefault(collection, {})[doc_id] = data

    def find(self, collection, doc_id):
        if not doc_id:
            return None
        return self.collections.get(collection, {}).get(doc_id)

    def get(self, collection, doc_id):
        data = self.find(collection, doc_id)
        if data is None:
            raise ReferenceNotFoundError(collection, doc_id)
        return data

    def get_all(self, collection):
        return [StoredDocument(id=doc_id, data=data) for doc_id, data in self.collections.get(collection, {}).items()]

class RecordingPushService:
    """보낸 NotificationJob을 기록하는 가짜 발송 서비스. 지정한 토큰은 실패시킵니다."""

    def __init__(self, failures=None):
        # {token: 예외 인스턴스}
        self.failures = dict(failures or {})
        self.sent = []
        self._lock = threading.Lock()

    def send(self, job):
        with self._lock:
            self.sent.append(job)
        error = self.failures.get(job.token)
        if error is not None:
            raise error
        return f"projects/zerowaste/messages/{job.token}"

    @property
    def tokens(self):
        return [job.token for job in self.sent]

@pytest.fixture
def store():
    return FakeDocumentStore()

@pytest.fixture
def push_service():
    return RecordingPushService()

@pytest.fixture
def sink():
    return ObservabilitySink()

@pytest.fixture
def dispatcher(push_service, sink):
    return NotificationDispatcher(push_service, max_workers=4, on_stale_token=sink.record_stale_token)

@pytest.fixture
def handlers(store, dispatcher, sink):
    return NotificationHandlers(store, ProximityScanner(store, radius_km=20.0), dispatcher, sink,
                                clock=lambda: FIXED_NOW)

@pytest.fixture
def router(handlers):
    return register_handlers(TriggerRouter(), handlers)

@pytest.fixture
def stale_token_error():
    return StaleTokenError("Requested entity was not found.")

@pytest.fixture
def unavailable_error():
    return DeliveryError(DeliveryFailureKind.UNAVAILABLE, "FCM service unavailable")

@pytest.fixture
def push_service_factory():
    """실패시킬 토큰을 지정해 발송 서비스를 만드는 팩토리"""
    return RecordingPushService
