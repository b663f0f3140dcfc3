# app/triggers/router.py
import logging
import re
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple, Union

from app.core.observability import ObservabilitySink
from app.services.firestore_service import FirestoreDocumentStore
from app.services.messaging_service import FcmPushService
from app.services.notification_service import NotificationDispatcher
from app.services.proximity_service import ProximityScanner
from app.triggers.events import MutationKind, TriggerEvent
from app.triggers.handlers import NotificationHandlers

# (문서 경로 패턴, 변경 유형) -> NotificationHandlers 메서드 이름
TRIGGER_TABLE = [
    ("posts/{postId}", MutationKind.CREATED, "on_post_created"),
    ("posts/{postId}", MutationKind.UPDATED, "on_post_updated"),
    ("claims/{claimId}", MutationKind.CREATED, "on_claim_created"),
    ("claims/{claimId}", MutationKind.UPDATED, "on_claim_updated"),
    ("chats/{chatId}/messages/{messageId}", MutationKind.CREATED, "on_message_created"),
    ("ratings/{ratingId}", MutationKind.CREATED, "on_rating_created"),
    ("test_notifications/{testId}", MutationKind.CREATED, "on_test_notification_created"),
]

# Eventarc 등이 전달하는 전체 리소스 이름의 접두사
_RESOURCE_PREFIX = re.compile(r'^(?:projects/[^/]+/databases/[^/]+/)?documents/')
_WILDCARD = re.compile(r'^\{(\w+)\}$')

def _compile_pattern(pattern: str):
    parts = []
    for segment in pattern.strip('/').split('/'):
        match = _WILDCARD.match(segment)
        parts.append(f"(?P<{match.group(1)}>[^/]+)" if match else re.escape(segment))
    return re.compile('^' + '/'.join(parts) + '$')

def normalize_document_path(document_path: str) -> str:
    """'projects/p/databases/(default)/documents/posts/abc' 같은 이름을 'posts/abc'로 정규화합니다."""
    return _RESOURCE_PREFIX.sub('', document_path.strip('/'))

class TriggerRouter:
    """
    (컬렉션 경로 패턴, 변경 유형) 쌍을 핸들러에 매핑하는 명시적 라우팅 테이블.
    실제 change-feed 구독(Cloud Functions 트리거, HTTP 중계)은 이 라우터 바깥의 어댑터가 담당합니다.
    """
    def __init__(self):
        self._routes: List[Tuple[str, Any, MutationKind, Callable[[TriggerEvent], None]]] = []

    def register(self, pattern: str, kind: Union[MutationKind, str], handler: Callable[[TriggerEvent], None]):
        kind = MutationKind(kind)
        if any(p == pattern and k == kind for p, _, k, _ in self._routes):
            raise ValueError(f"이미 등록된 트리거입니다: {kind.value} {pattern}")
        self._routes.append((pattern, _compile_pattern(pattern), kind, handler))

    @property
    def routes(self) -> List[Tuple[str, MutationKind]]:
        return [(pattern, kind) for pattern, _, kind, _ in self._routes]

    def resolve(self, kind: Union[MutationKind, str], document_path: str) -> Optional[Tuple[Callable, Dict[str, str]]]:
        """문서 경로와 변경 유형에 맞는 핸들러와 경로 파라미터를 찾습니다."""
        kind = MutationKind(kind)
        path = normalize_document_path(document_path)
        for _, regex, route_kind, handler in self._routes:
            if route_kind != kind:
                continue
            match = regex.match(path)
            if match:
                return handler, match.groupdict()
        return None

    def route(self, kind: Union[MutationKind, str], document_path: str,
              before: Optional[Mapping] = None, after: Optional[Mapping] = None,
              event_id: Optional[str] = None) -> bool:
        """
        이벤트를 해당 핸들러로 전달합니다.

        :return: 핸들러가 있으면 True, 등록되지 않은 경로/유형이면 False
        """
        kind = MutationKind(kind)
        resolved = self.resolve(kind, document_path)
        if resolved is None:
            logging.warning(f"등록되지 않은 트리거입니다: {kind.value} {document_path}")
            return False

        handler, params = resolved
        event = TriggerEvent(
            kind=kind,
            document_path=normalize_document_path(document_path),
            params=params,
            before=dict(before) if before is not None else None,
            after=dict(after) if after is not None else None,
            event_id=event_id,
        )
        handler(event)
        return True

def register_handlers(router: TriggerRouter, handlers: NotificationHandlers) -> TriggerRouter:
    for pattern, kind, method_name in TRIGGER_TABLE:
        router.register(pattern, kind, getattr(handlers, method_name))
    return router

def build_trigger_router(db, settings: Mapping[str, Any], push_service=None) -> TriggerRouter:
    """
    Firestore 클라이언트와 설정값으로 알림 파이프라인 전체를 조립합니다.
    create_app()과 Cloud Functions 진입점(main.py)이 같은 구성을 사용합니다.

    :param db: firebase_admin.firestore.client()
    :param settings: NEARBY_RADIUS_KM 등 대문자 설정 키를 가진 매핑 (Flask app.config 등)
    :param push_service: 발송 서비스 (기본값: FcmPushService)
    """
    store = FirestoreDocumentStore(db)
    sink = ObservabilitySink()
    push_service = push_service or FcmPushService(
        channel_id=settings.get('NOTIFICATION_CHANNEL_ID', 'zerowaste_channel'),
        dry_run=settings.get('FCM_DRY_RUN', False),
    )
    scanner = ProximityScanner(store, radius_km=settings.get('NEARBY_RADIUS_KM', 20.0))
    dispatcher = NotificationDispatcher(
        push_service,
        max_workers=settings.get('DISPATCH_MAX_WORKERS', 10),
        on_stale_token=sink.record_stale_token,
    )
    handlers = NotificationHandlers(
        store, scanner, dispatcher, sink,
        message_preview_length=settings.get('MESSAGE_PREVIEW_LENGTH', 50),
    )
    router = register_handlers(TriggerRouter(), handlers)
    logging.info(f"트리거 라우터 구성 완료: {len(router.routes)}개 트리거")
    return router
