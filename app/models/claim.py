# app/models/claim.py
from dataclasses import dataclass
from enum import Enum

class ClaimStatus(Enum):
    """나눔 신청(claim)의 상태"""
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"

@dataclass
class Claim:
    """
    Firestore 'claims' 컬렉션의 문서 구조를 정의하는 데이터클래스.
    """
    claim_id: str
    post_id: str
    claimer_id: str   # 음식을 받겠다고 신청한 사용자
    creator_id: str   # 게시물 작성자
    status: str = ClaimStatus.PENDING.value
