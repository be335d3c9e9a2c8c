from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.permissions import AllowAny
from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import extend_schema, extend_schema_view, OpenApiParameter

from .filters import MenuItemFilter
from .serializers import (
    MenuItemSerializer,
    MenuItemDetailSerializer,
    MenuItemCreateSerializer,
    MenuItemUpdateSerializer,
    MenuTreeNodeSerializer,
)
from .services import MenuItemService


@extend_schema_view(
    list=extend_schema(
        summary="메뉴 평면 목록 조회",
        description="전체 메뉴를 order, created_at 순의 평면 목록으로 조회합니다.",
        parameters=[
            OpenApiParameter(name='parent_id', description='상위 메뉴 ID 필터', type=str),
            OpenApiParameter(name='is_root', description='최상위 메뉴만 조회', type=bool),
        ],
        responses=MenuItemSerializer(many=True),
    ),
    retrieve=extend_schema(
        summary="메뉴 상세 조회",
        responses=MenuItemDetailSerializer,
    ),
    create=extend_schema(
        summary="메뉴 생성",
        request=MenuItemCreateSerializer,
        responses={201: MenuItemSerializer},
    ),
    partial_update=extend_schema(
        summary="메뉴 수정",
        description="전달된 필드만 변경합니다. parent_id를 null로 보내면 최상위로 이동합니다.",
        request=MenuItemUpdateSerializer,
        responses=MenuItemSerializer,
    ),
    destroy=extend_schema(
        summary="메뉴 삭제",
        description="메뉴와 모든 하위 메뉴를 삭제하고, 삭제된 메뉴를 반환합니다.",
        responses=MenuItemSerializer,
    ),
)
class MenuItemViewSet(viewsets.GenericViewSet):
    """
    메뉴 항목 ViewSet

    트리 조회 / 평면 조회 / 상세 / 생성 / 수정 / 삭제.
    검증과 저장은 MenuItemService에서 처리하고, 여기서는 입력 형식 검사와 직렬화만 한다.
    """
    permission_classes = [AllowAny]
    serializer_class = MenuItemSerializer
    filter_backends = [DjangoFilterBackend]
    filterset_class = MenuItemFilter
    http_method_names = ['get', 'post', 'patch', 'delete', 'head', 'options']

    def get_queryset(self):
        return MenuItemService.get_all_menu_items()

    def list(self, request):
        """평면 목록"""
        queryset = self.filter_queryset(self.get_queryset())
        serializer = MenuItemSerializer(queryset, many=True)
        return Response(serializer.data)

    @extend_schema(
        summary="메뉴 트리 조회",
        description="평면 목록에서 트리를 구성해 최상위 메뉴 목록(children 포함)을 반환합니다.",
        responses=MenuTreeNodeSerializer(many=True),
    )
    @action(detail=False, methods=['get'], filter_backends=[])
    def tree(self, request):
        """트리 조회"""
        tree = MenuItemService.get_menu_tree()
        return Response(MenuTreeNodeSerializer(tree, many=True).data)

    def retrieve(self, request, pk=None):
        """상세 조회"""
        item = MenuItemService.get_menu_item(pk)
        return Response(MenuItemDetailSerializer(item).data)

    def create(self, request):
        """생성"""
        serializer = MenuItemCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        item = MenuItemService.create_menu_item(serializer.validated_data)
        return Response(MenuItemSerializer(item).data, status=status.HTTP_201_CREATED)

    def partial_update(self, request, pk=None):
        """수정"""
        serializer = MenuItemUpdateSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        item = MenuItemService.update_menu_item(pk, serializer.validated_data)
        return Response(MenuItemSerializer(item).data)

    def destroy(self, request, pk=None):
        """삭제 (CASCADE)"""
        item = MenuItemService.delete_menu_item(pk)
        return Response(MenuItemSerializer(item).data, status=status.HTTP_200_OK)
