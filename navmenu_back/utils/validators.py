"""
공통 검증 유틸리티

목적: 메뉴 API 전반에서 사용하는 입력 검증 함수들
"""
import re
import uuid

from .exceptions import ValidationException


class ValidationPatterns:
    """검증 정규표현식 패턴"""

    # UUID (표준 형식, 대소문자 무시)
    UUID = r'^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$'


def parse_uuid(value, field_name='id'):
    """
    식별자 문자열을 UUID로 변환

    저장소 조회 전에 형식을 확인해서, 잘못된 식별자가 쿼리까지 가지 않도록 한다.

    Args:
        value: UUID 문자열 또는 UUID 객체
        field_name: 에러 응답에 표시할 필드명

    Returns:
        uuid.UUID

    Raises:
        ValidationException: 형식이 올바르지 않은 경우
    """
    if isinstance(value, uuid.UUID):
        return value

    if value is None or not re.match(ValidationPatterns.UUID, str(value)):
        raise ValidationException(
            message='식별자 형식이 올바르지 않습니다. (UUID)',
            detail=str(value),
            field=field_name,
        )
    return uuid.UUID(str(value))
