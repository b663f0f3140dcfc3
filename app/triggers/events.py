# app/triggers/events.py
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

class MutationKind(Enum):
    """트리거를 발생시킨 문서 변경 유형"""
    CREATED = "created"
    UPDATED = "updated"

@dataclass(frozen=True)
class TriggerEvent:
    """
    문서 변경 이벤트 한 건.
    Cloud Functions 트리거와 HTTP 이벤트 중계 모두 이 형태로 변환되어 핸들러에 전달됩니다.
    """
    kind: MutationKind
    document_path: str                      # 예: 'claims/abc123'
    params: Dict[str, str] = field(default_factory=dict)   # 경로 와일드카드 값 (예: {'claimId': 'abc123'})
    before: Optional[Dict[str, Any]] = None # 변경 전 문서 (CREATED이면 None)
    after: Optional[Dict[str, Any]] = None  # 변경 후 문서
    event_id: Optional[str] = None

    @property
    def doc_id(self) -> str:
        return self.document_path.rstrip('/').split('/')[-1]
