# app/services/firestore_service.py
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from app.core.errors import ReferenceNotFoundError

@dataclass
class StoredDocument:
    """get_all()이 반환하는 문서 한 건 (문서 ID + 데이터)."""
    id: str
    data: Dict[str, Any]

class FirestoreDocumentStore:
    """
    트리거 핸들러가 사용하는 읽기 전용 문서 저장소.
    firebase_admin의 Firestore 클라이언트를 감싸며, 테스트에서는 같은 인터페이스의 가짜 객체로 대체됩니다.
    컬렉션 경로에는 하위 컬렉션('chats/{chatId}/messages')도 사용할 수 있습니다.
    """
    def __init__(self, db):
        """
        :param db: firebase_admin.firestore.client()가 반환한 클라이언트
        """
        self.db = db

    def find(self, collection: str, doc_id: Optional[str]) -> Optional[Dict[str, Any]]:
        """문서를 조회합니다. 문서가 없으면 None을 반환합니다."""
        if not doc_id:
            return None
        doc = self.db.collection(collection).document(doc_id).get()
        if not doc.exists:
            return None
        return doc.to_dict() or {}

    def get(self, collection: str, doc_id: Optional[str]) -> Dict[str, Any]:
        """
        문서를 조회합니다.

        :raises ReferenceNotFoundError: 문서가 존재하지 않는 경우
        """
        data = self.find(collection, doc_id)
        if data is None:
            raise ReferenceNotFoundError(collection, doc_id)
        return data

    def get_all(self, collection: str) -> List[StoredDocument]:
        """컬렉션의 모든 문서를 조회합니다."""
        try:
            return [StoredDocument(id=doc.id, data=doc.to_dict() or {}) for doc in self.db.collection(collection).stream()]
        except Exception as e:
            logging.error(f"Firestore 컬렉션 조회 실패 (Collection: {collection}): {e}", exc_info=True)
            raise
