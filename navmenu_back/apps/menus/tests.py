import uuid
from datetime import datetime, timedelta, timezone as dt_timezone
from io import StringIO
from types import SimpleNamespace

from django.core.management import call_command
from django.test import SimpleTestCase, TestCase
from rest_framework import status
from rest_framework.test import APITestCase, APIClient

from utils.exceptions import (
    DescendantParentException,
    MenuItemNotFoundException,
    ParentMenuItemNotFoundException,
    SelfParentException,
    ValidationException,
)
from .admin import MenuItemAdminForm
from .models import MenuItem
from .services import MenuItemService, get_descendant_ids
from .utils import build_menu_tree, walk_menu_tree


BASE_TIME = datetime(2025, 1, 1, tzinfo=dt_timezone.utc)


def make_item(label, parent=None, order=0, offset=0):
    """DB 없이 트리 빌더에 넣을 메뉴 객체"""
    return SimpleNamespace(
        id=uuid.uuid4(),
        label=label,
        url=f'/{label.lower()}',
        parent_id=parent.id if parent else None,
        order=order,
        created_at=BASE_TIME + timedelta(seconds=offset),
    )


def flatten(tree):
    return [node for _, node in walk_menu_tree(tree)]


class BuildMenuTreeTest(SimpleTestCase):
    """트리 빌더 (순수 함수) 테스트"""

    def test_nested_tree(self):
        """A > B > C 중첩 구조"""
        a = make_item('A', order=1)
        b = make_item('B', parent=a, order=1)
        c = make_item('C', parent=b, order=1)

        tree = build_menu_tree([c, a, b])

        self.assertEqual(len(tree), 1)
        self.assertEqual(tree[0]['id'], a.id)
        self.assertEqual(tree[0]['children'][0]['id'], b.id)
        self.assertEqual(tree[0]['children'][0]['children'][0]['id'], c.id)
        self.assertEqual(tree[0]['children'][0]['children'][0]['children'], [])

    def test_siblings_sorted_by_order(self):
        """최상위 형제는 order 오름차순"""
        b = make_item('B', order=2, offset=0)
        a = make_item('A', order=1, offset=1)

        tree = build_menu_tree([b, a])

        self.assertEqual([node['label'] for node in tree], ['A', 'B'])

    def test_order_tie_broken_by_created_at(self):
        """order가 같으면 created_at 오름차순"""
        parent = make_item('P')
        late = make_item('Late', parent=parent, order=3, offset=20)
        early = make_item('Early', parent=parent, order=3, offset=10)
        first = make_item('First', parent=parent, order=0, offset=30)

        tree = build_menu_tree([parent, late, early, first])

        labels = [node['label'] for node in tree[0]['children']]
        self.assertEqual(labels, ['First', 'Early', 'Late'])

    def test_full_tie_keeps_input_order(self):
        """order, created_at까지 같으면 입력 순서 유지 (안정 정렬)"""
        x = make_item('X', order=1)
        y = make_item('Y', order=1)
        y.created_at = x.created_at

        self.assertEqual([n['label'] for n in build_menu_tree([x, y])], ['X', 'Y'])
        self.assertEqual([n['label'] for n in build_menu_tree([y, x])], ['Y', 'X'])

    def test_children_sorted_at_every_level(self):
        """모든 레벨에서 (order, created_at) 비내림차순"""
        root = make_item('Root')
        items = [root]
        for i, order in enumerate([5, 1, 3, 1, 0]):
            child = make_item(f'C{i}', parent=root, order=order, offset=i)
            items.append(child)
            for j, sub_order in enumerate([2, 2, 1]):
                items.append(make_item(f'C{i}S{j}', parent=child, order=sub_order, offset=10 - j))

        tree = build_menu_tree(items)

        for node in flatten(tree):
            keys = [(c['order'], c['created_at']) for c in node['children']]
            self.assertEqual(keys, sorted(keys))

    def test_flatten_returns_same_ids(self):
        """트리를 다시 펼치면 입력과 같은 id 집합"""
        a = make_item('A', order=2)
        b = make_item('B', order=1)
        a1 = make_item('A1', parent=a)
        a2 = make_item('A2', parent=a, order=1)
        a1x = make_item('A1x', parent=a1)
        items = [a, b, a1, a2, a1x]

        tree = build_menu_tree(items)

        self.assertEqual({node['id'] for node in flatten(tree)}, {item.id for item in items})
        self.assertEqual(len(flatten(tree)), len(items))

    def test_orphan_dropped_with_warning(self):
        """부모가 목록에 없는 항목은 제외하고 경고 로그"""
        root = make_item('Root')
        orphan = SimpleNamespace(
            id=uuid.uuid4(), label='Orphan', url='/orphan',
            parent_id=uuid.uuid4(), order=0, created_at=BASE_TIME,
        )

        with self.assertLogs('apps.menus.utils', level='WARNING') as logs:
            tree = build_menu_tree([root, orphan])

        self.assertEqual([node['id'] for node in flatten(tree)], [root.id])
        self.assertIn(str(orphan.id), logs.output[0])

    def test_input_not_mutated(self):
        a = make_item('A')
        b = make_item('B', parent=a)
        items = [b, a]

        build_menu_tree(items)

        self.assertEqual(items, [b, a])
        self.assertFalse(hasattr(a, 'children'))

    def test_empty(self):
        self.assertEqual(build_menu_tree([]), [])

    def test_walk_depth(self):
        a = make_item('A')
        b = make_item('B', parent=a)
        c = make_item('C', parent=b)

        walked = [(depth, node['label']) for depth, node in walk_menu_tree(build_menu_tree([a, b, c]))]

        self.assertEqual(walked, [(0, 'A'), (1, 'B'), (2, 'C')])


class MenuItemServiceTest(TestCase):
    """메뉴 서비스 (검증 + 저장) 테스트"""

    def create(self, label, parent=None, order=0):
        return MenuItemService.create_menu_item({
            'label': label,
            'url': f'/{label.lower()}',
            'parent_id': parent.id if parent else None,
            'order': order,
        })

    def setUp(self):
        """테스트 데이터 설정"""
        # root > child > grandchild, other (별도 최상위)
        self.root = self.create('Root', order=1)
        self.child = self.create('Child', parent=self.root, order=1)
        self.grandchild = self.create('Grandchild', parent=self.child, order=1)
        self.other = self.create('Other', order=2)

    def test_create_root_without_parent(self):
        """parent_id 생략 시 최상위 메뉴"""
        item = MenuItemService.create_menu_item({'label': 'Solo', 'url': '/solo'})

        self.assertIsNone(item.parent_id)
        self.assertEqual(item.order, 0)
        self.assertIsNotNone(item.created_at)

    def test_create_with_missing_parent(self):
        """존재하지 않는 parent_id로 생성 실패"""
        with self.assertRaises(ParentMenuItemNotFoundException):
            MenuItemService.create_menu_item({
                'label': 'X', 'url': '/x', 'parent_id': uuid.uuid4(),
            })
        self.assertFalse(MenuItem.objects.filter(label='X').exists())

    def test_get_menu_item_not_found(self):
        with self.assertRaises(MenuItemNotFoundException):
            MenuItemService.get_menu_item(uuid.uuid4())

    def test_get_menu_item_malformed_id(self):
        """잘못된 형식의 id는 쿼리 전에 거부"""
        with self.assertNumQueries(0):
            with self.assertRaises(ValidationException):
                MenuItemService.get_menu_item('not-a-uuid')

    def test_descendant_ids(self):
        self.assertEqual(
            get_descendant_ids(self.root.id),
            {self.child.id, self.grandchild.id},
        )
        self.assertEqual(get_descendant_ids(self.grandchild.id), set())

    def test_descendant_lookup_single_query(self):
        """깊이와 상관없이 쿼리 1회"""
        parent = self.grandchild
        for i in range(5):
            parent = self.create(f'Deep{i}', parent=parent)

        with self.assertNumQueries(1):
            descendants = get_descendant_ids(self.root.id)
        self.assertEqual(len(descendants), 7)

    def test_update_self_parent(self):
        """자기 자신을 상위 메뉴로 지정하면 실패"""
        with self.assertRaises(SelfParentException):
            MenuItemService.update_menu_item(self.child.id, {'parent_id': self.child.id})

    def test_update_descendant_parent(self):
        """하위 메뉴를 상위 메뉴로 지정하면 실패"""
        for descendant in (self.child, self.grandchild):
            with self.assertRaises(DescendantParentException):
                MenuItemService.update_menu_item(self.root.id, {'parent_id': descendant.id})

        self.root.refresh_from_db()
        self.assertIsNone(self.root.parent_id)

    def test_update_unrelated_parent(self):
        """관계 없는 기존 메뉴로 이동은 성공"""
        item = MenuItemService.update_menu_item(self.child.id, {'parent_id': self.other.id})

        self.assertEqual(item.parent_id, self.other.id)
        self.grandchild.refresh_from_db()
        self.assertEqual(self.grandchild.parent_id, self.child.id)

    def test_update_move_to_root(self):
        """parent_id=None 이면 최상위로 이동"""
        item = MenuItemService.update_menu_item(self.grandchild.id, {'parent_id': None})
        self.assertIsNone(item.parent_id)

    def test_update_missing_parent(self):
        with self.assertRaises(ParentMenuItemNotFoundException):
            MenuItemService.update_menu_item(self.child.id, {'parent_id': uuid.uuid4()})

    def test_update_not_found(self):
        with self.assertRaises(MenuItemNotFoundException):
            MenuItemService.update_menu_item(uuid.uuid4(), {'label': 'Nope'})

    def test_update_only_supplied_fields(self):
        """전달된 필드만 변경"""
        item = MenuItemService.update_menu_item(self.child.id, {'label': 'Renamed'})

        item.refresh_from_db()
        self.assertEqual(item.label, 'Renamed')
        self.assertEqual(item.url, '/child')
        self.assertEqual(item.order, 1)
        self.assertEqual(item.parent_id, self.root.id)

    def test_delete_cascades_subtree_only(self):
        """삭제 시 하위 메뉴 전체만 함께 삭제"""
        deleted = MenuItemService.delete_menu_item(self.root.id)

        self.assertEqual(deleted.id, self.root.id)
        remaining = set(MenuItem.objects.values_list('id', flat=True))
        self.assertEqual(remaining, {self.other.id})

    def test_delete_middle_node(self):
        MenuItemService.delete_menu_item(self.child.id)

        remaining = set(MenuItem.objects.values_list('id', flat=True))
        self.assertEqual(remaining, {self.root.id, self.other.id})

    def test_delete_not_found(self):
        with self.assertRaises(MenuItemNotFoundException):
            MenuItemService.delete_menu_item(uuid.uuid4())

    def test_tree_rebuilt_after_move(self):
        """트리는 저장소에서 매번 재구성"""
        MenuItemService.update_menu_item(self.child.id, {'parent_id': self.other.id})

        tree = MenuItemService.get_menu_tree()

        self.assertEqual([node['id'] for node in tree], [self.root.id, self.other.id])
        self.assertEqual(tree[0]['children'], [])
        self.assertEqual(tree[1]['children'][0]['id'], self.child.id)


class MenuItemAPITest(APITestCase):
    """메뉴 API 테스트"""

    list_url = '/api/menu-items/'
    tree_url = '/api/menu-items/tree/'

    def setUp(self):
        self.client = APIClient()

    def detail_url(self, item_id):
        return f'{self.list_url}{item_id}/'

    def post(self, label, parent_id=None, order=None, url=None):
        data = {'label': label, 'url': url or f'/{label.lower()}'}
        if parent_id is not None:
            data['parent_id'] = str(parent_id)
        if order is not None:
            data['order'] = order
        return self.client.post(self.list_url, data, format='json')

    def test_nested_scenario_and_cascade(self):
        """A > B > C 생성 후 트리 조회, A 삭제 시 전부 삭제"""
        a = self.post('A', order=1).data
        b = self.post('B', parent_id=a['id'], order=1).data
        c = self.post('C', parent_id=b['id'], order=1).data

        response = self.client.get(self.tree_url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)
        node_a = response.data[0]
        self.assertEqual(node_a['id'], a['id'])
        self.assertEqual(node_a['children'][0]['id'], b['id'])
        self.assertEqual(node_a['children'][0]['children'][0]['id'], c['id'])
        self.assertEqual(node_a['children'][0]['children'][0]['children'], [])

        response = self.client.delete(self.detail_url(a['id']))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['id'], a['id'])
        self.assertEqual(response.data['label'], 'A')

        response = self.client.get(self.list_url)
        self.assertEqual(response.data, [])

    def test_root_siblings_order(self):
        """B(order 2), A(order 1) 생성 -> 트리 순서 [A, B]"""
        self.post('B', order=2)
        self.post('A', order=1)

        response = self.client.get(self.tree_url)

        self.assertEqual([node['label'] for node in response.data], ['A', 'B'])

    def test_list_flat_ordered(self):
        self.post('Second', order=2)
        root = self.post('First', order=1).data
        self.post('Nested', parent_id=root['id'], order=0)

        response = self.client.get(self.list_url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([item['label'] for item in response.data], ['Nested', 'First', 'Second'])
        self.assertEqual(response.data[0]['parent_id'], root['id'])

    def test_list_flat_filters(self):
        root = self.post('Root').data
        self.post('Child', parent_id=root['id'])

        response = self.client.get(self.list_url, {'is_root': 'true'})
        self.assertEqual([item['label'] for item in response.data], ['Root'])

        response = self.client.get(self.list_url, {'parent_id': root['id']})
        self.assertEqual([item['label'] for item in response.data], ['Child'])

        response = self.client.get(self.list_url, {'parent_id': 'bad'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_create_defaults(self):
        response = self.post('Home', url='/')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['order'], 0)
        self.assertIsNone(response.data['parent_id'])
        uuid.UUID(response.data['id'])

    def test_create_missing_parent(self):
        response = self.post('Lost', parent_id=uuid.uuid4())

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['error']['code'], 'ERR_202')
        self.assertEqual(response.data['error']['field'], 'parent_id')
        self.assertEqual(MenuItem.objects.count(), 0)

    def test_create_invalid_input(self):
        """형식/길이/타입 오류는 저장소 접근 전에 거부"""
        cases = [
            {'url': '/x'},
            {'label': '', 'url': '/x'},
            {'label': '   ', 'url': '/x'},
            {'label': 'x' * 256, 'url': '/x'},
            {'label': 'X'},
            {'label': 'X', 'url': '/' + 'x' * 500},
            {'label': 'X', 'url': '/x', 'order': -1},
            {'label': 'X', 'url': '/x', 'order': 2 ** 31},
            {'label': 'X', 'url': '/x', 'order': 2 ** 70},
            {'label': 'X', 'url': '/x', 'order': 'first'},
            {'label': 'X', 'url': '/x', 'parent_id': 'not-a-uuid'},
        ]
        for data in cases:
            with self.subTest(data=data):
                with self.assertNumQueries(0):
                    response = self.client.post(self.list_url, data, format='json')
                self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
                self.assertEqual(response.data['error']['code'], 'ERR_101')

    def test_create_boundary_lengths(self):
        response = self.post('x' * 255, url='/' + 'x' * 499)
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

    def test_retrieve_with_parent_and_children(self):
        root = self.post('Root').data
        child = self.post('Child', parent_id=root['id'], order=2).data
        self.post('Sibling', parent_id=root['id'], order=1)
        self.post('Grandchild', parent_id=child['id'])

        response = self.client.get(self.detail_url(root['id']))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIsNone(response.data['parent'])
        self.assertEqual([c['label'] for c in response.data['children']], ['Sibling', 'Child'])

        response = self.client.get(self.detail_url(child['id']))
        self.assertEqual(response.data['parent']['id'], root['id'])
        self.assertEqual([c['label'] for c in response.data['children']], ['Grandchild'])

    def test_retrieve_not_found(self):
        response = self.client.get(self.detail_url(uuid.uuid4()))

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['error']['code'], 'ERR_201')

    def test_retrieve_malformed_id(self):
        response = self.client.get(self.detail_url('abc'))

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error']['code'], 'ERR_101')

    def test_update_partial(self):
        item = self.post('Old', order=3).data

        response = self.client.patch(self.detail_url(item['id']), {'label': 'New'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['label'], 'New')
        self.assertEqual(response.data['url'], '/old')
        self.assertEqual(response.data['order'], 3)

    def test_update_self_parent(self):
        item = self.post('Item').data

        response = self.client.patch(
            self.detail_url(item['id']), {'parent_id': item['id']}, format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_422_UNPROCESSABLE_ENTITY)
        self.assertEqual(response.data['error']['code'], 'ERR_402')

    def test_update_descendant_parent(self):
        root = self.post('Root').data
        child = self.post('Child', parent_id=root['id']).data
        grandchild = self.post('Grandchild', parent_id=child['id']).data

        response = self.client.patch(
            self.detail_url(root['id']), {'parent_id': grandchild['id']}, format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_422_UNPROCESSABLE_ENTITY)
        self.assertEqual(response.data['error']['code'], 'ERR_403')

    def test_update_move_and_to_root(self):
        a = self.post('A').data
        b = self.post('B').data

        response = self.client.patch(self.detail_url(b['id']), {'parent_id': a['id']}, format='json')
        self.assertEqual(response.data['parent_id'], a['id'])

        response = self.client.patch(self.detail_url(b['id']), {'parent_id': None}, format='json')
        self.assertIsNone(response.data['parent_id'])

    def test_update_missing_parent_and_item(self):
        item = self.post('Item').data

        response = self.client.patch(
            self.detail_url(item['id']), {'parent_id': str(uuid.uuid4())}, format='json'
        )
        self.assertEqual(response.data['error']['code'], 'ERR_202')

        response = self.client.patch(self.detail_url(uuid.uuid4()), {'label': 'X'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['error']['code'], 'ERR_201')

    def test_update_invalid_input(self):
        item = self.post('Item').data

        response = self.client.patch(self.detail_url(item['id']), {'label': ''}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.patch(self.detail_url(item['id']), {'order': -5}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        for order in (2 ** 31, 2 ** 70):
            with self.subTest(order=order):
                response = self.client.patch(self.detail_url(item['id']), {'order': order}, format='json')
                self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
                self.assertEqual(response.data['error']['code'], 'ERR_101')
                self.assertEqual(response.data['error']['field'], 'order')

        self.assertEqual(MenuItem.objects.get(id=item['id']).order, 0)

    def test_order_upper_bound_accepted(self):
        response = self.post('Last', order=2 ** 31 - 1)

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['order'], 2 ** 31 - 1)

    def test_url_stored_verbatim(self):
        """url은 앞뒤 공백을 포함해 입력 그대로 저장, label은 앞뒤 공백 제거"""
        response = self.post('  Home  ', url=' /home ')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['url'], ' /home ')
        self.assertEqual(response.data['label'], 'Home')

        response = self.client.patch(self.detail_url(response.data['id']), {'url': '/home/ '}, format='json')
        self.assertEqual(response.data['url'], '/home/ ')

    def test_malformed_json(self):
        """JSON 파싱 실패는 ERR_101"""
        response = self.client.post(self.list_url, '{"label": ', content_type='application/json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error']['code'], 'ERR_101')

    def test_put_not_allowed(self):
        item = self.post('Item').data

        response = self.client.put(
            self.detail_url(item['id']), {'label': 'X', 'url': '/x'}, format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_405_METHOD_NOT_ALLOWED)
        self.assertEqual(response.data['error']['code'], 'ERR_101')

    def test_delete_not_found(self):
        response = self.client.delete(self.detail_url(uuid.uuid4()))

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['error']['code'], 'ERR_201')

    def test_health_check(self):
        response = self.client.get('/health/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['database'], 'connected')


class MenuItemAdminFormTest(TestCase):
    """관리자 화면 폼도 같은 상위 메뉴 검증을 사용"""

    def setUp(self):
        self.root = MenuItem.objects.create(label='Root', url='/root')
        self.child = MenuItem.objects.create(label='Child', url='/child', parent=self.root)

    def test_rejects_descendant_parent(self):
        form = MenuItemAdminForm(
            data={'label': 'Root', 'url': '/root', 'parent': str(self.child.id), 'order': 0},
            instance=self.root,
        )

        self.assertFalse(form.is_valid())
        self.assertIn('parent', form.errors)

    def test_accepts_new_item_under_parent(self):
        form = MenuItemAdminForm(
            data={'label': 'New', 'url': '/new', 'parent': str(self.child.id), 'order': 1},
        )

        self.assertTrue(form.is_valid(), form.errors)
        item = form.save()
        self.assertEqual(item.parent_id, self.child.id)

    def test_url_kept_verbatim_order_capped(self):
        form = MenuItemAdminForm(data={'label': 'X', 'url': ' /x ', 'order': 0})
        self.assertTrue(form.is_valid(), form.errors)
        self.assertEqual(form.save().url, ' /x ')

        form = MenuItemAdminForm(data={'label': 'Y', 'url': '/y', 'order': 2 ** 31})
        self.assertFalse(form.is_valid())
        self.assertIn('order', form.errors)


class MenuCommandTest(TestCase):
    """관리 명령 테스트"""

    def test_seed_menu_items(self):
        out = StringIO()
        call_command('seed_menu_items', stdout=out)

        self.assertEqual(MenuItem.objects.count(), 15)
        self.assertEqual(MenuItem.objects.filter(parent__isnull=True).count(), 3)

        tree = MenuItemService.get_menu_tree()
        self.assertEqual([node['label'] for node in tree], ['Overview', 'About', 'Blog'])
        external = tree[0]['children'][0]['children'][0]
        self.assertEqual(external['label'], 'External')
        self.assertEqual([n['label'] for n in external['children']], ['Departments', 'Teams'])

        # 재실행 시 기존 항목을 지우고 다시 생성
        call_command('seed_menu_items', stdout=StringIO())
        self.assertEqual(MenuItem.objects.count(), 15)

    def test_print_menu_tree(self):
        out = StringIO()
        call_command('print_menu_tree', stdout=out)
        self.assertIn('No menu items.', out.getvalue())

        root = MenuItem.objects.create(label='Root', url='/root')
        MenuItem.objects.create(label='Child', url='/root/child', parent=root)

        out = StringIO()
        call_command('print_menu_tree', stdout=out)
        self.assertIn('- Root (/root) [order=0]', out.getvalue())
        self.assertIn('  - Child (/root/child) [order=0]', out.getvalue())
