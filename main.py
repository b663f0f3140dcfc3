# main.py
"""
Cloud Functions for Firebase 진입점.
Firestore 문서 트리거 하나당 함수 하나를 등록하고, 모든 처리는 TriggerRouter에 위임합니다.
"""
import logging
import os
from typing import Any, Optional

from firebase_admin import firestore
from firebase_functions import firestore_fn
from firebase_functions.options import set_global_options

from app import init_firebase, LOG_FORMAT
from app.core.config import load_settings
from app.triggers.events import MutationKind
from app.triggers.router import build_trigger_router
from app.triggers.runtime import LazyTriggerRouter

set_global_options(max_instances=10)

def _build_router():
    """콜드 스타트 시 설정 로드, Firebase 초기화, 파이프라인 구성을 수행합니다."""
    settings = load_settings(os.getenv('APP_ENV', 'production'))
    logging.basicConfig(level=settings.get('LOG_LEVEL', 'INFO'), format=LOG_FORMAT)
    init_firebase(settings.get('FIREBASE_CREDENTIALS_PATH'))
    return build_trigger_router(firestore.client(), settings)

_lazy_router = LazyTriggerRouter(_build_router)

def _snapshot_data(snapshot) -> Optional[dict]:
    if snapshot is None or not snapshot.exists:
        return None
    return snapshot.to_dict()

def _route_created(event: Any):
    router = _lazy_router.get()
    if router is None:
        logging.error(f"라우터가 없어 이벤트를 처리하지 못했습니다 (event: {event.id}, document: {event.document})")
        return
    router.route(MutationKind.CREATED, event.document,
                 after=_snapshot_data(event.data), event_id=event.id)

def _route_updated(event: Any):
    router = _lazy_router.get()
    if router is None:
        logging.error(f"라우터가 없어 이벤트를 처리하지 못했습니다 (event: {event.id}, document: {event.document})")
        return
    change = event.data
    router.route(MutationKind.UPDATED, event.document,
                 before=_snapshot_data(change.before if change else None),
                 after=_snapshot_data(change.after if change else None),
                 event_id=event.id)

# 1. 나눔 신청 알림 (게시물 작성자에게)
@firestore_fn.on_document_created(document="claims/{claimId}")
def notify_food_claimed(event: firestore_fn.Event[firestore_fn.DocumentSnapshot | None]) -> None:
    _route_created(event)

# 2. 신청 수락/거절 알림 (신청자에게)
@firestore_fn.on_document_updated(document="claims/{claimId}")
def notify_claim_update(event: firestore_fn.Event[firestore_fn.Change[firestore_fn.DocumentSnapshot | None]]) -> None:
    _route_updated(event)

# 3. 근처 사용자에게 새 나눔 알림
@firestore_fn.on_document_created(document="posts/{postId}")
def notify_nearby_food(event: firestore_fn.Event[firestore_fn.DocumentSnapshot | None]) -> None:
    _route_created(event)

# 4. 새 채팅 메시지 알림
@firestore_fn.on_document_created(document="chats/{chatId}/messages/{messageId}")
def notify_new_message(event: firestore_fn.Event[firestore_fn.DocumentSnapshot | None]) -> None:
    _route_created(event)

# 5. 새 평가 알림
@firestore_fn.on_document_created(document="ratings/{ratingId}")
def notify_new_rating(event: firestore_fn.Event[firestore_fn.DocumentSnapshot | None]) -> None:
    _route_created(event)

# 6. 발송 경로 점검용 테스트 알림
@firestore_fn.on_document_created(document="test_notifications/{testId}")
def test_notification(event: firestore_fn.Event[firestore_fn.DocumentSnapshot | None]) -> None:
    _route_created(event)

# 7. 유통기한 지난 게시물 감시
@firestore_fn.on_document_updated(document="posts/{postId}")
def cleanup_expired_posts(event: firestore_fn.Event[firestore_fn.Change[firestore_fn.DocumentSnapshot | None]]) -> None:
    _route_updated(event)
