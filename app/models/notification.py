# app/models/notification.py
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Any, List, Optional

from app.core.errors import DeliveryFailureKind

class NotificationType(Enum):
    """알림 유형을 정의하는 Enum 클래스. 앱은 data.type 값으로 화면을 분기합니다."""
    NEW_FOOD_NEARBY = "new_food_nearby"
    FOOD_CLAIMED = "food_claimed"
    CLAIM_ACCEPTED = "claim_accepted"
    CLAIM_REJECTED = "claim_rejected"
    NEW_MESSAGE = "new_message"
    NEW_RATING = "new_rating"
    TEST = "test"

class DispatchStatus(Enum):
    DELIVERED = "delivered"
    FAILED = "failed"

@dataclass(frozen=True)
class NotificationJob:
    """
    한 명의 수신자에게 보낼 푸시 알림 한 건.
    발송 직전에 만들어지고 발송 결과가 나오면 버려집니다. (저장하지 않음)
    """
    token: str
    title: str
    body: str
    type: NotificationType
    data: Dict[str, str] = field(default_factory=dict)
    recipient_id: Optional[str] = None

    @classmethod
    def create(cls, token: str, title: str, body: str, n_type: NotificationType,
               data: Optional[Dict[str, Any]] = None, recipient_id: Optional[str] = None) -> 'NotificationJob':
        """
        FCM data 페이로드는 문자열 값만 허용하므로 모든 값을 str로 변환하고,
        'type' 키는 알림 유형 값으로 채웁니다.
        """
        payload = {key: str(value) for key, value in (data or {}).items() if value is not None}
        payload['type'] = n_type.value
        return cls(token=token, title=title, body=body, type=n_type, data=payload, recipient_id=recipient_id)

@dataclass
class DispatchResult:
    """NotificationJob 한 건의 발송 결과"""
    job: NotificationJob
    status: DispatchStatus
    message_id: Optional[str] = None
    failure_kind: Optional[DeliveryFailureKind] = None
    error: Optional[str] = None

    @property
    def delivered(self) -> bool:
        return self.status == DispatchStatus.DELIVERED

@dataclass
class DispatchReport:
    """한 번의 fan-out 결과. results는 입력 작업 순서를 따릅니다."""
    results: List[DispatchResult] = field(default_factory=list)

    @property
    def delivered(self) -> List[DispatchResult]:
        return [r for r in self.results if r.delivered]

    @property
    def failed(self) -> List[DispatchResult]:
        return [r for r in self.results if not r.delivered]

    @property
    def delivered_count(self) -> int:
        return len(self.delivered)

    @property
    def failed_count(self) -> int:
        return len(self.failed)
