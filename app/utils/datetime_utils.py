# app/utils/datetime_utils.py
"""
알림 백엔드 전체에서 일관된 시간 처리를 위한 유틸리티 모듈

트리거 문서의 시간 필드는 경로에 따라 다른 형태로 들어옵니다.
- Cloud Functions 트리거: Firestore Timestamp (DatetimeWithNanoseconds)
- HTTP 이벤트 중계: ISO 8601 문자열 또는 Unix timestamp (밀리초)
이 모듈은 이들을 모두 UTC timezone-aware datetime으로 통일합니다.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Optional
from dateutil import parser as dateutil_parser

logger = logging.getLogger(__name__)

class DateTimeUtils:
    """시간 처리를 위한 중앙화된 유틸리티 클래스"""

    @staticmethod
    def now() -> datetime:
        """현재 시간을 UTC timezone-aware datetime으로 반환"""
        return datetime.now(timezone.utc)

    @staticmethod
    def parse_iso_datetime(iso_string: str) -> datetime:
        """
        ISO 포맷 문자열을 datetime 객체로 파싱

        지원 포맷:
        - 2024-01-15T10:30:00Z
        - 2024-01-15T10:30:00+09:00
        - 2024-01-15T10:30:00.123456Z
        - 2024-01-15T10:30:00
        """
        try:
            if not iso_string:
                raise ValueError("빈 문자열은 파싱할 수 없습니다")

            # 'Z' 접미사 처리 (UTC 표시)
            if iso_string.endswith('Z'):
                iso_string = iso_string[:-1] + '+00:00'

            dt = dateutil_parser.isoparse(iso_string)

            # timezone-naive인 경우 UTC로 가정
            if dt.tzinfo is None:
                dt = dt.replace(tzinfo=timezone.utc)

            return dt.astimezone(timezone.utc)

        except Exception as e:
            logger.error(f"ISO datetime 파싱 실패: {iso_string} - {e}")
            raise ValueError(f"잘못된 ISO 날짜 형식입니다: {iso_string}")

    @staticmethod
    def to_iso_string(dt: datetime) -> str:
        """datetime 객체를 ISO 포맷 문자열로 변환 (Z 접미사)"""
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        else:
            dt = dt.astimezone(timezone.utc)
        return dt.isoformat().replace('+00:00', 'Z')

    @staticmethod
    def validate_datetime_field(value: Any, field_name: str = "datetime") -> datetime:
        """
        트리거 문서에서 읽은 시간 값을 검증하고 변환

        Args:
            value: 검증할 값 (ISO 문자열, 밀리초 timestamp, datetime, Firestore Timestamp)
            field_name: 필드명 (오류 메시지용)

        Returns:
            검증된 timezone-aware datetime 객체 (UTC)

        Raises:
            ValueError: 잘못된 형식이거나 파싱할 수 없는 경우
        """
        if value is None:
            raise ValueError(f"{field_name}은 필수 필드입니다")

        if isinstance(value, str):
            return DateTimeUtils.parse_iso_datetime(value)

        # bool은 int의 하위 타입이므로 먼저 걸러냅니다.
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return datetime.fromtimestamp(value / 1000.0, tz=timezone.utc)

        # DatetimeWithNanoseconds는 datetime의 하위 클래스입니다.
        if isinstance(value, datetime):
            if value.tzinfo is None:
                return value.replace(tzinfo=timezone.utc)
            return value.astimezone(timezone.utc)

        # protobuf Timestamp 등 timestamp()만 제공하는 객체
        if hasattr(value, 'timestamp'):
            return datetime.fromtimestamp(value.timestamp(), tz=timezone.utc)

        logger.error(f"{field_name} 검증 실패: {value!r}")
        raise ValueError(f"잘못된 {field_name} 형식입니다: {value!r}")

    @staticmethod
    def is_past(value: datetime, reference: Optional[datetime] = None) -> bool:
        """value가 reference(기본값: 현재 시각)보다 과거인지 확인"""
        reference = reference or DateTimeUtils.now()
        return reference > value

