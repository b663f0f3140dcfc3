# app/core/observability.py
import logging
from typing import Any, Dict, Optional

from app.core.errors import DeliveryError, MalformedTriggerPayloadError, ReferenceNotFoundError

class ObservabilitySink:
    """
    트리거 핸들러가 삼킨(propagate하지 않은) 모든 오류와 발송 결과를 한 곳에서 기록합니다.
    이벤트 ID와 문서 경로는 메시지 본문에도 포함되므로 LOG_FORMAT 포매터만으로 추적할 수 있습니다.
    extra의 'json_fields'는 Cloud Logging 핸들러가 붙어 있을 때 구조화된 필드로 수집됩니다.
    """
    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger('app.notifications')

    @staticmethod
    def error_kind(error: Exception) -> str:
        if isinstance(error, ReferenceNotFoundError):
            return "reference_not_found"
        if isinstance(error, MalformedTriggerPayloadError):
            return "malformed_trigger_payload"
        if isinstance(error, DeliveryError):
            return f"delivery_failure.{error.kind.value}"
        return "unexpected"

    @staticmethod
    def _event_fields(event) -> Dict[str, Any]:
        if event is None:
            return {}
        return {
            "event_id": getattr(event, 'event_id', None),
            "document": getattr(event, 'document_path', None),
            "mutation": getattr(getattr(event, 'kind', None), 'value', None),
        }

    @classmethod
    def _event_suffix(cls, event) -> str:
        """이벤트 ID/문서 경로를 메시지 본문에 붙입니다. 일반 포매터로도 중복 전달을 추적할 수 있습니다."""
        if event is None:
            return ""
        fields = cls._event_fields(event)
        return f" [event: {fields['event_id']}, document: {fields['document']}, mutation: {fields['mutation']}]"

    def report_failure(self, handler: str, error: Exception, event=None):
        """핸들러 경계에서 잡힌 오류를 기록합니다. 참조/형식 오류는 WARNING, 그 외는 ERROR."""
        kind = self.error_kind(error)
        fields = {"handler": handler, "error_kind": kind, **self._event_fields(event)}
        suffix = self._event_suffix(event)

        if kind in ("reference_not_found", "malformed_trigger_payload"):
            self.logger.warning(f"{handler} 처리 중단 ({kind}): {error}{suffix}", extra={"json_fields": fields})
        else:
            self.logger.error(f"{handler} 처리 중 오류 발생 ({kind}): {error}{suffix}",
                              extra={"json_fields": fields}, exc_info=error)

    def record_stale_token(self, result):
        """만료 토큰 훅. 토큰 정리는 앱/관리 작업이 이 로그를 보고 수행합니다."""
        self.logger.warning(
            f"만료된 FCM 토큰입니다. 사용자 문서에서 제거가 필요합니다 (recipient: {result.job.recipient_id})",
            extra={"json_fields": {"recipient_id": result.job.recipient_id, "error_kind": "delivery_failure.stale_token"}},
        )

    def record_dispatch(self, handler: str, report, event=None):
        """한 번의 fan-out 결과 집계를 기록합니다."""
        fields = {
            "handler": handler,
            "delivered": report.delivered_count,
            "failed": report.failed_count,
            "failure_kinds": sorted({r.failure_kind.value for r in report.failed if r.failure_kind}),
            **self._event_fields(event),
        }
        kinds = ", ".join(fields["failure_kinds"]) or "-"
        self.logger.info(f"{handler} 알림 발송 결과: 성공 {report.delivered_count}건, 실패 {report.failed_count}건 "
                         f"(실패 유형: {kinds}){self._event_suffix(event)}",
                         extra={"json_fields": fields})
