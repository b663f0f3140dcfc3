# app/core/errors.py
from enum import Enum
from typing import Optional


class DeliveryFailureKind(Enum):
    """푸시 발송 실패 유형을 정의하는 Enum 클래스"""
    STALE_TOKEN = "stale_token"            # 만료되었거나 등록 해제된 FCM 토큰
    INVALID_ARGUMENT = "invalid_argument"  # 잘못된 토큰 형식, 잘못된 페이로드
    UNAVAILABLE = "unavailable"            # FCM 일시 장애, 쿼터 초과, 타임아웃
    INVALID_JOB = "invalid_job"            # 토큰이 비어 있는 작업 (호출자 계약 위반)
    UNKNOWN = "unknown"


class NotificationError(Exception):
    """알림 파이프라인에서 발생하는 모든 예외의 기반 클래스."""


class ReferenceNotFoundError(NotificationError):
    """트리거 처리에 필요한 문서(post, user, chat 등)가 존재하지 않을 때 발생합니다."""

    def __init__(self, collection: str, doc_id: Optional[str]):
        self.collection = collection
        self.doc_id = doc_id
        super().__init__(f"문서를 찾을 수 없습니다: {collection}/{doc_id}")


class MalformedTriggerPayloadError(NotificationError):
    """트리거 문서에 필수 필드가 없거나 형식이 잘못되었을 때 발생합니다."""

    def __init__(self, path: str, details):
        self.path = path
        self.details = details
        super().__init__(f"잘못된 문서 형식입니다 ({path}): {details}")


class DeliveryError(NotificationError):
    """푸시 발송 서비스가 개별 메시지 발송을 거부하거나 실패했을 때 발생합니다."""

    def __init__(self, kind: DeliveryFailureKind, message: str):
        self.kind = kind
        super().__init__(message)


class StaleTokenError(DeliveryError):
    """수신자의 FCM 토큰이 더 이상 유효하지 않을 때 발생합니다. (토큰 정리 대상)"""

    def __init__(self, message: str):
        super().__init__(DeliveryFailureKind.STALE_TOKEN, message)
