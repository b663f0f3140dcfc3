# app/triggers/handlers.py
import logging
from functools import wraps
from typing import Callable, List, Optional

from app.core.errors import MalformedTriggerPayloadError
from app.core.observability import ObservabilitySink
from app.models.claim import ClaimStatus
from app.models.notification import NotificationJob
from app.models.post import PostStatus
from app.schemas.document_schemas import (
    ChatDocumentSchema, ClaimDocumentSchema, MessageDocumentSchema, PostDocumentSchema,
    RatingDocumentSchema, TestNotificationDocumentSchema, UserDocumentSchema, load_document
)
from app.triggers import messages
from app.triggers.events import TriggerEvent
from app.utils.datetime_utils import DateTimeUtils

def fail_soft(f):
    """
    핸들러 경계 데코레이터.
    트리거에는 오류를 돌려받을 호출자가 없으므로, 모든 예외를 ObservabilitySink로 기록하고 None을 반환합니다.
    """
    @wraps(f)
    def decorated_function(self, event: TriggerEvent):
        try:
            f(self, event)
        except Exception as e:
            self.sink.report_failure(f.__name__, e, event)
        return None
    return decorated_function

class NotificationHandlers:
    """
    Firestore 문서 변경 이벤트마다 호출되는 알림 핸들러 모음.
    각 핸들러는 (1) 트리거 문서와 참조 문서를 읽고 (2) NotificationJob을 만들고 (3) Dispatcher로 발송합니다.
    """
    def __init__(self, store, scanner, dispatcher, sink: Optional[ObservabilitySink] = None,
                 message_preview_length: int = 50, clock: Callable = DateTimeUtils.now):
        self.store = store
        self.scanner = scanner
        self.dispatcher = dispatcher
        self.sink = sink or ObservabilitySink()
        self.message_preview_length = message_preview_length
        self.clock = clock

    # --- 문서 조회 헬퍼 ---

    def _load(self, schema, collection: str, doc_id: Optional[str]):
        """참조 문서를 조회하여 변환합니다. 없으면 ReferenceNotFoundError."""
        data = self.store.get(collection, doc_id)
        return load_document(schema, doc_id, data, f"{collection}/{doc_id}")

    def _find_user_name(self, user_id: Optional[str], fallback: str) -> str:
        data = self.store.find('users', user_id)
        if data is None:
            return fallback
        return data.get('name') or fallback

    def _dispatch(self, handler: str, jobs: List[NotificationJob], event: TriggerEvent):
        if not jobs:
            logging.info(f"{handler}: 발송할 알림이 없습니다 ({event.document_path})")
            return
        report = self.dispatcher.dispatch(jobs)
        self.sink.record_dispatch(handler, report, event)

    # --- 트리거 핸들러 ---

    @fail_soft
    def on_post_created(self, event: TriggerEvent):
        """posts/{postId} 생성: 반경 내 사용자에게 새 나눔 알림을 보냅니다."""
        post = load_document(PostDocumentSchema(), event.doc_id, event.after, event.document_path)
        logging.info(f"새 게시물 생성: {post.post_id} (작성자: {post.posted_by})")

        result = self.scanner.scan(post)
        jobs = [messages.nearby_food_job(nearby, result.author, post) for nearby in result.nearby]
        self._dispatch('on_post_created', jobs, event)

    @fail_soft
    def on_post_updated(self, event: TriggerEvent):
        """
        posts/{postId} 수정: 유통기한이 지난 'available' 게시물을 기록합니다. (문서는 수정하지 않음)
        expiry와 status만 읽으므로 작성자나 위치가 없는 게시물도 검사합니다.
        """
        after = event.after or {}
        raw_expiry = after.get('expiry')
        if raw_expiry is None:
            return
        try:
            expiry = DateTimeUtils.validate_datetime_field(raw_expiry, 'expiry')
        except ValueError as e:
            raise MalformedTriggerPayloadError(event.document_path, str(e))

        if after.get('status') == PostStatus.AVAILABLE.value and DateTimeUtils.is_past(expiry, self.clock()):
            logging.info(f"게시물 {event.doc_id}의 유통기한이 지났습니다. 정리가 필요합니다 (expiry: {expiry.isoformat()})")

    @fail_soft
    def on_claim_created(self, event: TriggerEvent):
        """claims/{claimId} 생성: 게시물 작성자에게 나눔 신청 알림을 보냅니다."""
        claim = load_document(ClaimDocumentSchema(), event.doc_id, event.after, event.document_path)
        logging.info(f"새 나눔 신청: {claim.claim_id} (post: {claim.post_id})")

        post = self._load(PostDocumentSchema(), 'posts', claim.post_id)
        poster = self._load(UserDocumentSchema(), 'users', claim.creator_id)
        claimant = self._load(UserDocumentSchema(), 'users', claim.claimer_id)

        jobs = []
        if poster.fcm_token:
            jobs.append(messages.food_claimed_job(poster, claimant, claim, post))
        self._dispatch('on_claim_created', jobs, event)

    @fail_soft
    def on_claim_updated(self, event: TriggerEvent):
        """claims/{claimId} 수정: 상태가 accepted/rejected로 바뀌면 신청자에게 알립니다."""
        before_status = (event.before or {}).get('status')
        claim = load_document(ClaimDocumentSchema(), event.doc_id, event.after, event.document_path)

        if before_status == claim.status:
            return
        if claim.status not in (ClaimStatus.ACCEPTED.value, ClaimStatus.REJECTED.value):
            return
        logging.info(f"나눔 신청 상태 변경: {claim.claim_id} {before_status} -> {claim.status}")

        post = self._load(PostDocumentSchema(), 'posts', claim.post_id)
        claimant = self._load(UserDocumentSchema(), 'users', claim.claimer_id)
        poster_name = self._find_user_name(claim.creator_id, "Food poster")

        jobs = []
        if claimant.fcm_token:
            jobs.append(messages.claim_update_job(claimant, poster_name, claim, post))
        self._dispatch('on_claim_updated', jobs, event)

    @fail_soft
    def on_message_created(self, event: TriggerEvent):
        """chats/{chatId}/messages/{messageId} 생성: 상대방에게 새 메시지 알림을 보냅니다."""
        chat_id = event.params.get('chatId')
        message = load_document(MessageDocumentSchema(), event.doc_id, event.after, event.document_path)
        chat = self._load(ChatDocumentSchema(), 'chats', chat_id)

        receiver_id = chat.other_participant(message.sender_id)
        if not receiver_id:
            raise MalformedTriggerPayloadError(f"chats/{chat_id}", "메시지 수신자를 결정할 수 없습니다.")

        sender = self._load(UserDocumentSchema(), 'users', message.sender_id)
        receiver = self._load(UserDocumentSchema(), 'users', receiver_id)

        jobs = []
        if receiver.fcm_token:
            jobs.append(messages.new_message_job(receiver, sender, chat, message, self.message_preview_length))
        self._dispatch('on_message_created', jobs, event)

    @fail_soft
    def on_rating_created(self, event: TriggerEvent):
        """ratings/{ratingId} 생성: 평가를 받은 사용자에게 알립니다."""
        rating = load_document(RatingDocumentSchema(), event.doc_id, event.after, event.document_path)
        logging.info(f"새 평가 생성: {rating.rating_id} ({rating.from_user_id} -> {rating.to_user_id})")

        giver = self._load(UserDocumentSchema(), 'users', rating.from_user_id)
        receiver = self._load(UserDocumentSchema(), 'users', rating.to_user_id)
        post_data = self.store.find('posts', rating.post_id)
        post_title = (post_data or {}).get('title') or "a food post"

        jobs = []
        if receiver.fcm_token:
            jobs.append(messages.new_rating_job(receiver, giver, rating, post_title))
        self._dispatch('on_rating_created', jobs, event)

    @fail_soft
    def on_test_notification_created(self, event: TriggerEvent):
        """test_notifications/{testId} 생성: 문서의 토큰으로 테스트 알림을 보냅니다. (발송 경로 점검용)"""
        probe = load_document(TestNotificationDocumentSchema(), event.doc_id, event.after, event.document_path)

        jobs = []
        if probe['fcm_token']:
            jobs.append(messages.diagnostic_notification_job(probe['fcm_token'], self.clock()))
        self._dispatch('on_test_notification_created', jobs, event)
