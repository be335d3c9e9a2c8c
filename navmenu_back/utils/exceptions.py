from rest_framework.exceptions import APIException
from rest_framework import status
from datetime import datetime, timezone


class NavMenuException(APIException):
    """NavMenu 프로젝트 기본 예외 클래스"""
    status_code = status.HTTP_400_BAD_REQUEST
    default_code = 'ERR_500'
    default_detail = '서버 내부 오류가 발생했습니다.'

    def __init__(self, code=None, message=None, detail=None, field=None, status_code=None):
        super().__init__(detail=message or self.default_detail)
        self.code = code or self.default_code
        self.message = message or self.default_detail
        self.detail_info = detail
        self.field = field
        if status_code:
            self.status_code = status_code

    def get_full_details(self):
        error_detail = {
            'code': self.code,
            'message': self.message,
            'timestamp': datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z')
        }
        if self.detail_info:
            error_detail['detail'] = self.detail_info
        if self.field:
            error_detail['field'] = self.field
        return {'error': error_detail}


class ValidationException(NavMenuException):
    """유효성 검증 실패 예외"""
    status_code = status.HTTP_400_BAD_REQUEST
    default_code = 'ERR_101'
    default_detail = '입력값이 올바르지 않습니다.'


class ResourceNotFoundException(NavMenuException):
    """리소스 없음 예외"""
    status_code = status.HTTP_404_NOT_FOUND
    default_code = 'ERR_201'
    default_detail = '요청한 리소스를 찾을 수 없습니다.'


class MenuItemNotFoundException(ResourceNotFoundException):
    """메뉴 항목 없음"""
    default_code = 'ERR_201'
    default_detail = '메뉴 항목을 찾을 수 없습니다.'


class ParentMenuItemNotFoundException(ResourceNotFoundException):
    """상위 메뉴 항목 없음"""
    default_code = 'ERR_202'
    default_detail = '상위 메뉴 항목을 찾을 수 없습니다.'


class BusinessLogicException(NavMenuException):
    """비즈니스 로직 위반 예외"""
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    default_code = 'ERR_401'
    default_detail = '비즈니스 규칙을 위반했습니다.'


class SelfParentException(BusinessLogicException):
    """자기 자신을 상위 메뉴로 지정"""
    default_code = 'ERR_402'
    default_detail = '메뉴 항목은 자기 자신을 상위 메뉴로 지정할 수 없습니다.'


class DescendantParentException(BusinessLogicException):
    """하위 메뉴를 상위 메뉴로 지정 (순환 참조)"""
    default_code = 'ERR_403'
    default_detail = '하위 메뉴 항목을 상위 메뉴로 지정할 수 없습니다.'
