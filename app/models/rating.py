# app/models/rating.py
from dataclasses import dataclass
from typing import Optional

@dataclass
class Rating:
    """
    Firestore 'ratings' 컬렉션의 문서 구조를 정의하는 데이터클래스.
    나눔이 끝난 뒤 사용자가 상대방에게 남기는 평점입니다.
    """
    rating_id: str
    from_user_id: str
    to_user_id: str
    post_id: str
    rating: float          # 0 ~ 5
    review: Optional[str] = None
