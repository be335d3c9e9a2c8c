# apps/menus/filters.py
import django_filters
from .models import MenuItem

# 평면 목록 필터 (상위 메뉴 선택 등)
class MenuItemFilter(django_filters.FilterSet):
    parent_id = django_filters.UUIDFilter(
        field_name="parent_id",
        lookup_expr="exact"
    )
    is_root = django_filters.BooleanFilter(
        field_name="parent",
        lookup_expr="isnull"
    )


    class Meta:
        model = MenuItem
        fields = ["parent_id", "is_root"]
