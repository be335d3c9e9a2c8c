import logging
from collections import defaultdict, deque

from django.db import transaction

from utils.exceptions import (
    DescendantParentException,
    MenuItemNotFoundException,
    ParentMenuItemNotFoundException,
    SelfParentException,
)
from utils.validators import parse_uuid
from .models import MenuItem
from .utils import build_menu_tree

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("label", "url", "parent_id", "order")


def get_descendant_ids(item_id):
    """
    item_id의 모든 하위 메뉴 id 집합 (자기 자신 제외)

    (id, parent_id) 인접 목록을 한 번의 쿼리로 읽은 뒤 메모리에서 BFS.
    깊이만큼 쿼리가 반복되지 않도록 한다.
    """
    children_map = defaultdict(list)
    for child_id, parent_id in MenuItem.objects.values_list("id", "parent_id"):
        if parent_id is not None:
            children_map[parent_id].append(child_id)

    descendants = set()
    queue = deque(children_map.get(item_id, ()))
    while queue:
        current = queue.popleft()
        if current in descendants:
            continue
        descendants.add(current)
        queue.extend(children_map.get(current, ()))
    return descendants


class MenuItemService:
    """메뉴 항목 비즈니스 로직"""

    @staticmethod
    def get_menu_tree():
        """전체 메뉴 트리 조회 (매 요청마다 평면 목록에서 재구성)"""
        return build_menu_tree(MenuItem.objects.order_by("order", "created_at"))

    @staticmethod
    def get_all_menu_items():
        """전체 메뉴 평면 목록 (order, created_at 순)"""
        return MenuItem.objects.order_by("order", "created_at")

    @staticmethod
    def get_menu_item(item_id):
        """메뉴 상세 조회 (상위 메뉴 + 직계 하위 메뉴 포함)"""
        item_id = parse_uuid(item_id, "id")
        try:
            return (
                MenuItem.objects
                .select_related("parent")
                .prefetch_related("children")
                .get(id=item_id)
            )
        except MenuItem.DoesNotExist:
            raise MenuItemNotFoundException(detail=str(item_id))

    @staticmethod
    def ensure_parent_exists(parent_id):
        """parent_id가 주어졌다면 실제로 존재하는 메뉴인지 확인"""
        if parent_id is None:
            return None
        parent_id = parse_uuid(parent_id, "parent_id")
        if not MenuItem.objects.filter(id=parent_id).exists():
            raise ParentMenuItemNotFoundException(detail=str(parent_id), field="parent_id")
        return parent_id

    @staticmethod
    def validate_parent_change(item_id, parent_id):
        """
        item_id의 상위 메뉴를 parent_id로 바꿔도 되는지 검사

        순서: 자기 자신 -> 존재 여부 -> 하위 메뉴 여부.
        None(최상위로 이동)은 항상 허용.
        """
        if parent_id is None:
            return None
        parent_id = parse_uuid(parent_id, "parent_id")

        if parent_id == item_id:
            raise SelfParentException(detail=str(item_id), field="parent_id")

        MenuItemService.ensure_parent_exists(parent_id)

        if parent_id in get_descendant_ids(item_id):
            raise DescendantParentException(detail=str(parent_id), field="parent_id")
        return parent_id

    @staticmethod
    @transaction.atomic
    def create_menu_item(data):
        """메뉴 항목 생성"""
        parent_id = MenuItemService.ensure_parent_exists(data.get("parent_id"))

        item = MenuItem.objects.create(
            label=data["label"],
            url=data["url"],
            parent_id=parent_id,
            order=data.get("order") or 0,
        )
        logger.info("Menu item created: id=%s parent_id=%s", item.id, item.parent_id)
        return item

    @staticmethod
    @transaction.atomic
    def update_menu_item(item_id, data):
        """메뉴 항목 수정 (전달된 필드만 변경)"""
        item_id = parse_uuid(item_id, "id")
        try:
            item = MenuItem.objects.get(id=item_id)
        except MenuItem.DoesNotExist:
            raise MenuItemNotFoundException(detail=str(item_id))

        if "parent_id" in data:
            data = dict(data)
            data["parent_id"] = MenuItemService.validate_parent_change(item.id, data["parent_id"])

        changed = []
        for key in UPDATABLE_FIELDS:
            if key in data:
                setattr(item, key, data[key])
                changed.append(key)

        if changed:
            item.save(update_fields=changed + ["updated_at"])
        logger.info("Menu item updated: id=%s fields=%s", item.id, changed)
        return item

    @staticmethod
    @transaction.atomic
    def delete_menu_item(item_id):
        """메뉴 항목 삭제 (하위 메뉴까지 CASCADE)"""
        item_id = parse_uuid(item_id, "id")
        try:
            item = MenuItem.objects.get(id=item_id)
        except MenuItem.DoesNotExist:
            raise MenuItemNotFoundException(detail=str(item_id))

        deleted_count, _ = item.delete()
        # delete() 후 pk가 None이 되므로 응답용으로 복원
        item.pk = item_id
        logger.info("Menu item deleted: id=%s rows=%s", item_id, deleted_count)
        return item
