# app/utils/test_datetime_utils.py
"""
시간 유틸리티 기능 테스트

사용법: python -m pytest app/utils/test_datetime_utils.py -v
"""

import pytest
from datetime import datetime, timedelta, timezone
from app.utils.datetime_utils import DateTimeUtils

def test_parse_iso_datetime():
    """ISO 포맷 파싱 테스트"""
    test_cases = [
        "2024-01-15T10:30:00Z",
        "2024-01-15T10:30:00+09:00",
        "2024-01-15T10:30:00.123456Z",
        "2024-01-15T10:30:00"
    ]

    for iso_string in test_cases:
        dt = DateTimeUtils.parse_iso_datetime(iso_string)
        assert isinstance(dt, datetime)
        assert dt.tzinfo == timezone.utc  # UTC로 정규화되어야 함

    assert DateTimeUtils.parse_iso_datetime("2024-01-15T10:30:00+09:00").hour == 1

def test_to_iso_string():
    dt = datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)
    assert DateTimeUtils.to_iso_string(dt) == "2024-01-15T10:30:00Z"
    # naive datetime은 UTC로 간주
    assert DateTimeUtils.to_iso_string(datetime(2024, 1, 15, 10, 30)) == "2024-01-15T10:30:00Z"

def test_validate_datetime_field():
    """트리거 문서 시간 필드 검증 테스트"""
    class FirestoreTimestamp:
        """timestamp()만 제공하는 Timestamp 흉내"""
        def timestamp(self):
            return 1705314600.0

    expected = datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)
    valid_cases = [
        "2024-01-15T10:30:00Z",
        1705314600000,                          # 밀리초 timestamp
        datetime(2024, 1, 15, 10, 30),
        datetime(2024, 1, 15, 19, 30, tzinfo=timezone(timedelta(hours=9))),
        FirestoreTimestamp(),
    ]

    for case in valid_cases:
        result = DateTimeUtils.validate_datetime_field(case)
        assert result == expected
        assert result.tzinfo == timezone.utc

def test_is_past():
    reference = datetime(2024, 1, 15, tzinfo=timezone.utc)
    assert DateTimeUtils.is_past(reference - timedelta(seconds=1), reference)
    assert not DateTimeUtils.is_past(reference, reference)
    assert not DateTimeUtils.is_past(reference + timedelta(days=1), reference)

def test_error_handling():
    """오류 처리 테스트"""
    with pytest.raises(ValueError):
        DateTimeUtils.parse_iso_datetime("invalid-date")

    with pytest.raises(ValueError):
        DateTimeUtils.parse_iso_datetime("")

    with pytest.raises(ValueError):
        DateTimeUtils.validate_datetime_field(None)

    with pytest.raises(ValueError):
        DateTimeUtils.validate_datetime_field(True)
