from rest_framework.views import exception_handler
from rest_framework.response import Response
from .exceptions import NavMenuException
from datetime import datetime, timezone
import logging

logger = logging.getLogger(__name__)


def _timestamp():
    return datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z')


def _first_error(errors):
    """중첩된 ValidationError 구조에서 첫 메시지 추출"""
    while isinstance(errors, (list, dict)):
        if not errors:
            return ''
        errors = errors[0] if isinstance(errors, list) else next(iter(errors.values()))
    return str(errors)


def custom_exception_handler(exc, context):
    """DRF 기본 핸들러 + NavMenu 커스텀 핸들러"""

    # NavMenu 커스텀 예외 처리
    if isinstance(exc, NavMenuException):
        logger.warning(f"NavMenu Exception: {exc.code} - {exc.message}", extra={
            'code': exc.code,
            'detail': exc.detail_info,
            'field': exc.field,
            'view': context.get('view'),
        })
        return Response(exc.get_full_details(), status=exc.status_code)

    # DRF 기본 예외 처리 (ValidationError, NotFound 등)
    response = exception_handler(exc, context)

    if response is not None:
        data = response.data
        message = data.get('detail', '요청 처리 중 오류가 발생했습니다.') if isinstance(data, dict) else _first_error(data)
        error_detail = {
            'error': {
                'code': 'ERR_500',
                'message': str(message),
                'timestamp': _timestamp()
            }
        }

        if response.status_code == 404:
            error_detail['error']['code'] = 'ERR_201'
        elif response.status_code < 500:
            # 잘못된 요청 (JSON 파싱 실패, 허용되지 않은 메서드 등)
            error_detail['error']['code'] = 'ERR_101'

        # ValidationError의 경우 field 정보 포함
        if isinstance(data, dict):
            for field, errors in data.items():
                if field != 'detail':
                    error_detail['error']['field'] = field
                    error_detail['error']['detail'] = _first_error(errors)
                    error_detail['error']['code'] = 'ERR_101'
                    break
        elif isinstance(data, list):
            error_detail['error']['code'] = 'ERR_101'

        response.data = error_detail
        logger.warning(f"DRF Exception: {error_detail['error']['code']} - {error_detail['error']['message']}")
        return response

    # 예상치 못한 예외 (500 에러)
    logger.error(f"Unexpected Exception: {str(exc)}", exc_info=True, extra={
        'view': context.get('view'),
    })

    return Response({
        'error': {
            'code': 'ERR_500',
            'message': '서버 내부 오류가 발생했습니다. 관리자에게 문의해주세요.',
            'timestamp': _timestamp()
        }
    }, status=500)
