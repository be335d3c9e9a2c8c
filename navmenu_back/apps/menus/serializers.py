from rest_framework import serializers
from .models import MAX_ORDER, MenuItem


# =============================================================================
# 응답용 Serializers
# =============================================================================
class MenuItemSerializer(serializers.ModelSerializer):
    """메뉴 항목 (평면)"""
    parent_id = serializers.UUIDField(read_only=True, allow_null=True)

    class Meta:
        model = MenuItem
        fields = [
            'id', 'label', 'url', 'parent_id', 'order',
            'created_at', 'updated_at',
        ]
        read_only_fields = fields


class MenuItemBriefSerializer(serializers.ModelSerializer):
    """상세 조회에 포함되는 상위/하위 메뉴 요약"""

    class Meta:
        model = MenuItem
        fields = ['id', 'label', 'url', 'order']
        read_only_fields = fields


class MenuItemDetailSerializer(MenuItemSerializer):
    """메뉴 상세 (직계 상위 메뉴 + 직계 하위 메뉴)"""
    parent = MenuItemBriefSerializer(read_only=True, allow_null=True)
    children = MenuItemBriefSerializer(many=True, read_only=True)

    class Meta(MenuItemSerializer.Meta):
        fields = MenuItemSerializer.Meta.fields + ['parent', 'children']
        read_only_fields = fields


class MenuTreeNodeSerializer(serializers.Serializer):
    """build_menu_tree 결과 노드 (dict) 직렬화"""
    id = serializers.UUIDField()
    label = serializers.CharField()
    url = serializers.CharField()
    parent_id = serializers.UUIDField(allow_null=True)
    order = serializers.IntegerField()
    created_at = serializers.DateTimeField()
    children = serializers.SerializerMethodField()

    def get_children(self, obj):
        return MenuTreeNodeSerializer(obj["children"], many=True).data


# =============================================================================
# 요청 검증용 Serializers (서비스 호출 전 형식/길이/타입 검사)
# =============================================================================
class MenuItemCreateSerializer(serializers.Serializer):
    """메뉴 항목 생성용"""
    label = serializers.CharField(max_length=255)
    url = serializers.CharField(max_length=500, trim_whitespace=False)
    parent_id = serializers.UUIDField(required=False, allow_null=True)
    order = serializers.IntegerField(min_value=0, max_value=MAX_ORDER, required=False, default=0)


class MenuItemUpdateSerializer(serializers.Serializer):
    """메뉴 항목 수정용 (모든 필드 선택, 전달된 필드만 변경)"""
    label = serializers.CharField(max_length=255, required=False)
    url = serializers.CharField(max_length=500, required=False, trim_whitespace=False)
    parent_id = serializers.UUIDField(required=False, allow_null=True)
    order = serializers.IntegerField(min_value=0, max_value=MAX_ORDER, required=False)
