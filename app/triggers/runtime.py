# app/triggers/runtime.py
import logging
import threading
from typing import Callable, Optional

from app.triggers.router import TriggerRouter

class LazyTriggerRouter:
    """
    Cloud Functions 인스턴스에서 TriggerRouter를 처음 필요할 때 한 번만 구성합니다.
    - 동시에 들어온 콜드 스타트 요청도 구성(초기화)은 한 번만 실행됩니다.
    - 구성 중 오류(자격 증명, 설정 등)는 기록만 하고 None을 반환합니다. 다음 호출에서 다시 시도합니다.
    """
    def __init__(self, factory: Callable[[], TriggerRouter]):
        """
        :param factory: 설정 로드, Firebase 초기화, 라우터 조립을 수행하는 함수
        """
        self.factory = factory
        self._router: Optional[TriggerRouter] = None
        self._lock = threading.Lock()

    def get(self) -> Optional[TriggerRouter]:
        if self._router is not None:
            return self._router

        with self._lock:
            if self._router is None:
                try:
                    self._router = self.factory()
                except Exception as e:
                    logging.error(f"트리거 라우터 구성 실패: {e}", exc_info=True)
                    return None
        return self._router
