import logging

logger = logging.getLogger(__name__)


def _sort_key(node):
    return (node["order"], node["created_at"])


def _sort_children(nodes):
    # sorted()는 안정 정렬이라 (order, created_at)까지 같으면 입력 순서를 유지
    nodes.sort(key=_sort_key)
    for node in nodes:
        if node["children"]:
            _sort_children(node["children"])


def build_menu_tree(menus):
    """
    평면 메뉴 목록 -> 중첩 트리(forest)

    각 노드는 메뉴 필드 + children 리스트를 가진 dict.
    모든 레벨에서 order 오름차순, 같으면 created_at 오름차순으로 정렬한다.
    부모가 목록에 없는 항목(고아)은 트리에서 제외하고 경고 로그를 남긴다.
    """
    menus = list(menus)
    menu_map = {}
    tree = []

    # 모든 메뉴 노드 생성
    for menu in menus:
        menu_map[menu.id] = {
            "id": menu.id,
            "label": menu.label,
            "url": menu.url,
            "parent_id": menu.parent_id,
            "order": menu.order,
            "created_at": menu.created_at,
            "children": [],
        }

    # 메뉴 : 부모-자식 관계 연결
    for menu in menus:
        node = menu_map[menu.id]

        if menu.parent_id is None:
            tree.append(node)
            continue

        parent = menu_map.get(menu.parent_id)
        if parent is not None:
            parent["children"].append(node)
        else:
            logger.warning(
                "Orphan menu item dropped from tree: id=%s parent_id=%s",
                menu.id, menu.parent_id,
            )

    _sort_children(tree)
    return tree


def walk_menu_tree(tree, depth=0):
    """트리를 화면 표시 순서(깊이 우선)로 순회하며 (depth, node) 반환"""
    for node in tree:
        yield depth, node
        yield from walk_menu_tree(node["children"], depth + 1)
