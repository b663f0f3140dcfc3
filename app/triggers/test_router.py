# app/triggers/test_router.py
import pytest

from app.triggers.events import MutationKind
from app.services.messaging_service import FcmPushService
from app.triggers.router import TRIGGER_TABLE, TriggerRouter, build_trigger_router, normalize_document_path

@pytest.fixture
def recording_router():
    received = []
    router = TriggerRouter()
    router.register("posts/{postId}", MutationKind.CREATED, received.append)
    router.register("posts/{postId}", "updated", received.append)
    router.register("chats/{chatId}/messages/{messageId}", MutationKind.CREATED, received.append)
    return router, received

def test_route_extracts_wildcard_params(recording_router):
    router, received = recording_router
    assert router.route("created", "chats/chat1/messages/m9", after={"content": "hi"}, event_id="e1")

    event = received[0]
    assert event.kind == MutationKind.CREATED
    assert event.params == {"chatId": "chat1", "messageId": "m9"}
    assert event.document_path == "chats/chat1/messages/m9"
    assert event.doc_id == "m9"
    assert event.after == {"content": "hi"}
    assert event.before is None
    assert event.event_id == "e1"

def test_route_matches_mutation_kind(recording_router):
    router, received = recording_router
    router.route(MutationKind.UPDATED, "posts/p1", before={"status": "available"}, after={"status": "claimed"})

    assert received[0].kind == MutationKind.UPDATED
    assert received[0].params == {"postId": "p1"}

def test_route_accepts_full_resource_names(recording_router):
    router, received = recording_router
    assert router.route("created", "projects/zerowaste/databases/(default)/documents/posts/p1", after={})
    assert received[0].document_path == "posts/p1"

def test_unknown_routes_are_not_handled(recording_router, caplog):
    router, received = recording_router
    assert not router.route("created", "ratings/r1", after={})
    assert not router.route("updated", "chats/chat1/messages/m1", after={})
    assert not router.route("created", "posts/p1/comments/c1", after={})
    assert received == []
    assert "등록되지 않은 트리거" in caplog.text

def test_duplicate_registration_is_rejected(recording_router):
    router, _ = recording_router
    with pytest.raises(ValueError):
        router.register("posts/{postId}", MutationKind.CREATED, lambda event: None)

def test_invalid_mutation_kind():
    with pytest.raises(ValueError):
        TriggerRouter().route("deleted", "posts/p1")

def test_normalize_document_path():
    assert normalize_document_path("/posts/p1/") == "posts/p1"
    assert normalize_document_path("documents/claims/c1") == "claims/c1"

def test_all_trigger_kinds_are_registered(router):
    """새 게시물, 신청 생성/수정, 메시지, 평가, 테스트 알림, 게시물 수정"""
    assert set(router.routes) == {(pattern, kind) for pattern, kind, _ in TRIGGER_TABLE}
    assert len(router.routes) == 7

def test_router_delivers_to_handlers(router, store, push_service):
    store.add("users", "A", {"name": "Alice", "fcmToken": "tok-a"})
    store.add("users", "B", {"name": "Bob", "fcmToken": "tok-b"})
    store.add("chats", "chat1", {"participants": ["A", "B"]})

    assert router.route("created", "chats/chat1/messages/m1", after={"senderId": "B", "content": "On my way"})
    assert push_service.tokens == ["tok-a"]

def _push_service_of(router):
    handler, _ = router.resolve("created", "posts/p1")
    return handler.__self__.dispatcher.push_service

def test_build_trigger_router_passes_fcm_settings():
    router = build_trigger_router(object(), {"FCM_DRY_RUN": True, "NOTIFICATION_CHANNEL_ID": "staging_channel"})

    push_service = _push_service_of(router)
    assert isinstance(push_service, FcmPushService)
    assert push_service.dry_run is True
    assert push_service.channel_id == "staging_channel"
    assert set(router.routes) == {(pattern, kind) for pattern, kind, _ in TRIGGER_TABLE}

def test_build_trigger_router_sends_for_real_by_default():
    router = build_trigger_router(object(), {})

    assert _push_service_of(router).dry_run is False
