# app/models/chat.py
from dataclasses import dataclass, field
from typing import List, Optional

@dataclass
class Chat:
    """Firestore 'chats' 컬렉션의 문서 구조. 게시물 하나를 두고 두 사용자가 대화합니다."""
    chat_id: str
    participants: List[str] = field(default_factory=list)
    post_id: str = ""
    post_title: str = ""

    def other_participant(self, user_id: str) -> Optional[str]:
        """user_id가 아닌 첫 번째 참여자 ID를 반환합니다."""
        return next((p for p in self.participants if p != user_id), None)

@dataclass
class Message:
    """'chats/{chatId}/messages' 하위 컬렉션의 문서 구조."""
    message_id: str
    sender_id: str
    content: str = ""
