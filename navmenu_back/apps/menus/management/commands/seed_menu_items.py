"""
샘플 메뉴 트리 등록 스크립트

사용법:
    python manage.py seed_menu_items
    python manage.py seed_menu_items --no-clear   # 기존 메뉴 유지
"""
from django.core.management.base import BaseCommand
from django.db import transaction

from apps.menus.models import MenuItem
from apps.menus.services import MenuItemService
from apps.menus.utils import walk_menu_tree


# (label, url, children) - 형제 간 order는 1부터 나열 순서대로 부여
SAMPLE_MENU = [
    ('Overview', '/overview', [
        ('Company Overview', '/overview/company', [
            ('External', '/overview/company/external', [
                ('Departments', '/overview/company/external/departments', []),
                ('Teams', '/overview/company/external/teams', []),
            ]),
            ('Internal', '/overview/company/internal', []),
        ]),
        ('Business Overview', '/overview/business', []),
        ('Client Overview', '/overview/clients', []),
    ]),
    ('About', '/about', [
        ('Our Story', '/about/story', []),
        ('Team', '/about/team', []),
        ('Careers', '/about/careers', []),
    ]),
    ('Blog', '/blog', [
        ('Latest Posts', '/blog/latest', []),
        ('Categories', '/blog/categories', []),
    ]),
]


class Command(BaseCommand):
    help = '샘플 메뉴 트리 등록 (4단계 중첩)'

    def add_arguments(self, parser):
        parser.add_argument(
            '--no-clear',
            action='store_true',
            help='기존 메뉴 항목을 삭제하지 않고 추가만 합니다.',
        )

    def _create_level(self, entries, parent_id=None):
        created = 0
        for order, (label, url, children) in enumerate(entries, start=1):
            item = MenuItemService.create_menu_item({
                'label': label,
                'url': url,
                'parent_id': parent_id,
                'order': order,
            })
            created += 1 + self._create_level(children, item.id)
        return created

    @transaction.atomic
    def handle(self, *args, **options):
        self.stdout.write("=" * 60)
        self.stdout.write("Menu Item Seeding")
        self.stdout.write("=" * 60)

        if not options['no_clear']:
            deleted, _ = MenuItem.objects.all().delete()
            self.stdout.write(f"\n[Step 1] Cleared existing menu items ({deleted})")
        else:
            self.stdout.write("\n[Step 1] Keeping existing menu items")

        created = self._create_level(SAMPLE_MENU)
        self.stdout.write(f"\n[Step 2] Created {created} menu items")

        self.stdout.write("\n[Step 3] Menu Structure:")
        for depth, node in walk_menu_tree(MenuItemService.get_menu_tree()):
            self.stdout.write(f"{'  ' * (depth + 1)}- {node['label']}")

        self.stdout.write("\n" + "=" * 60)
        self.stdout.write(self.style.SUCCESS('Successfully seeded menu items!'))
        self.stdout.write("=" * 60)
