# app/services/notification_service.py
import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable, Optional, Sequence

from app.core.errors import DeliveryError, DeliveryFailureKind
from app.models.notification import DispatchReport, DispatchResult, DispatchStatus, NotificationJob

class NotificationDispatcher:
    """
    NotificationJob 목록을 동시에 발송하고, 모든 발송이 끝날 때까지 기다린 뒤 결과를 모아 반환합니다.
    - 한 건의 실패가 다른 발송을 막지 않습니다. (fail-fast 하지 않음)
    - 재시도하지 않습니다. 실패한 작업은 결과에 failed로만 기록됩니다.
    - dispatch()는 예외를 던지지 않습니다. 작업별 실패는 DispatchResult 데이터로 표현됩니다.
    """
    def __init__(self, push_service, max_workers: int = 10,
                 on_stale_token: Optional[Callable[[DispatchResult], None]] = None):
        """
        :param push_service: send(job) -> message_id 를 제공하는 발송 서비스 (FcmPushService)
        :param max_workers: 동시에 진행할 최대 발송 수
        :param on_stale_token: 만료 토큰으로 실패한 결과마다 호출되는 훅 (토큰 정리 정책은 호출자 몫)
        """
        self.push_service = push_service
        self.max_workers = max(1, max_workers)
        self.on_stale_token = on_stale_token

    def dispatch(self, jobs: Sequence[NotificationJob]) -> DispatchReport:
        results: list = [None] * len(jobs)
        pending = {}

        for index, job in enumerate(jobs):
            if not job.token:
                logging.warning(f"FCM 토큰이 없는 알림은 발송하지 않습니다 (recipient: {job.recipient_id})")
                results[index] = DispatchResult(job=job, status=DispatchStatus.FAILED,
                                                failure_kind=DeliveryFailureKind.INVALID_JOB,
                                                error="empty recipient token")
            else:
                pending[index] = job

        if pending:
            with ThreadPoolExecutor(max_workers=min(self.max_workers, len(pending))) as pool:
                futures = {pool.submit(self._send_one, job): index for index, job in pending.items()}
                # 완료 순서와 관계없이 입력 순서(index)에 결과를 기록합니다.
                for future in as_completed(futures):
                    results[futures[future]] = future.result()

        report = DispatchReport(results=results)
        for result in report.failed:
            if result.failure_kind == DeliveryFailureKind.STALE_TOKEN:
                self._notify_stale_token(result)

        logging.info(f"알림 발송 완료: 성공 {report.delivered_count}건, 실패 {report.failed_count}건")
        return report

    def _send_one(self, job: NotificationJob) -> DispatchResult:
        """발송 한 건. 어떤 예외도 밖으로 던지지 않고 DispatchResult로 변환합니다."""
        try:
            message_id = self.push_service.send(job)
            return DispatchResult(job=job, status=DispatchStatus.DELIVERED, message_id=message_id)
        except DeliveryError as e:
            logging.error(f"알림 발송 실패 (recipient: {job.recipient_id}, kind: {e.kind.value}): {e}")
            return DispatchResult(job=job, status=DispatchStatus.FAILED, failure_kind=e.kind, error=str(e))
        except Exception as e:
            logging.error(f"알림 발송 중 예상치 못한 오류 (recipient: {job.recipient_id}): {e}", exc_info=True)
            return DispatchResult(job=job, status=DispatchStatus.FAILED,
                                  failure_kind=DeliveryFailureKind.UNKNOWN, error=str(e))

    def _notify_stale_token(self, result: DispatchResult):
        if self.on_stale_token is None:
            return
        try:
            self.on_stale_token(result)
        except Exception as e:
            logging.error(f"만료 토큰 훅 실행 중 오류 (recipient: {result.job.recipient_id}): {e}", exc_info=True)
