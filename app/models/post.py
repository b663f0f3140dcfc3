# app/models/post.py
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

from app.models.geo import Coordinate

class PostStatus(Enum):
    """나눔 게시물의 상태"""
    AVAILABLE = "available"
    CLAIMED = "claimed"
    EXPIRED = "expired"

@dataclass
class Post:
    """
    Firestore 'posts' 컬렉션의 문서 구조를 정의하는 데이터클래스.
    """
    post_id: str
    posted_by: str         # 작성자 사용자 ID
    title: str
    location: Coordinate
    status: str = PostStatus.AVAILABLE.value
    created_at: Optional[datetime] = None
    expiry: Optional[datetime] = None
