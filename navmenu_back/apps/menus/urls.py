from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views import MenuItemViewSet

app_name = 'menus'

router = DefaultRouter()
router.register(r'menu-items', MenuItemViewSet, basename='menu-item')

urlpatterns = [
    path('', include(router.urls)),
]

# =============================================================================
# 생성된 URL 패턴:
# =============================================================================
# GET    /api/menu-items/          - 평면 목록 (?parent_id=, ?is_root=)
# GET    /api/menu-items/tree/     - 트리
# POST   /api/menu-items/          - 생성
# GET    /api/menu-items/{id}/     - 상세 (parent + children)
# PATCH  /api/menu-items/{id}/     - 수정
# DELETE /api/menu-items/{id}/     - 삭제 (하위 메뉴 포함)
# =============================================================================
