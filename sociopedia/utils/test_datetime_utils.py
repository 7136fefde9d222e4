# sociopedia/utils/test_datetime_utils.py
"""
시간 처리 유틸리티 테스트

사용법: python -m pytest sociopedia/utils/test_datetime_utils.py -v
"""

import pytest
from datetime import datetime, date, timezone, timedelta
from sociopedia.utils.datetime_utils import DateTimeUtils


def test_now_is_utc_aware():
    now = DateTimeUtils.now()
    assert now.tzinfo == timezone.utc


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


def test_parse_iso_datetime_converts_offset():
    dt = DateTimeUtils.parse_iso_datetime("2024-01-15T10:30:00+09:00")
    assert dt.hour == 1


def test_coerce_datetime():
    naive = datetime(2024, 1, 15, 10, 30)
    assert DateTimeUtils.coerce_datetime(naive).tzinfo == timezone.utc
    assert DateTimeUtils.coerce_datetime("2024-01-15T10:30:00Z") == datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)
    assert DateTimeUtils.coerce_datetime(None) is None

    kst = timezone(timedelta(hours=9))
    assert DateTimeUtils.coerce_datetime(datetime(2024, 1, 15, 9, 0, tzinfo=kst)).hour == 0


def test_for_firestore():
    """Firestore 변환 테스트"""
    test_data = {
        'joined': date(2020, 1, 15),
        'timestamp': datetime(2024, 1, 15, 10, 30),
        'nested': {'event_date': date(2023, 12, 25)},
        'list_data': [{'created_at': datetime(2024, 1, 1)}],
        'name': 'Ada',
    }

    converted = DateTimeUtils.for_firestore(test_data)

    assert isinstance(converted['joined'], datetime)
    assert converted['joined'].tzinfo == timezone.utc
    assert converted['timestamp'].tzinfo == timezone.utc
    assert isinstance(converted['nested']['event_date'], datetime)
    assert converted['list_data'][0]['created_at'].tzinfo == timezone.utc
    assert converted['name'] == 'Ada'


def test_error_handling():
    """오류 처리 테스트"""
    with pytest.raises(ValueError):
        DateTimeUtils.parse_iso_datetime("invalid-date")

    with pytest.raises(ValueError):
        DateTimeUtils.parse_iso_datetime("")

    with pytest.raises(ValueError):
        DateTimeUtils.coerce_datetime(12345)
