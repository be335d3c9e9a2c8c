from django.core.management.base import BaseCommand

from apps.menus.services import MenuItemService
from apps.menus.utils import walk_menu_tree


class Command(BaseCommand):
    help = '현재 메뉴 트리 출력'

    def add_arguments(self, parser):
        parser.add_argument(
            '--ids',
            action='store_true',
            help='메뉴 ID도 함께 출력합니다.',
        )

    def handle(self, *args, **options):
        tree = MenuItemService.get_menu_tree()
        if not tree:
            self.stdout.write('No menu items.')
            return

        count = 0
        for depth, node in walk_menu_tree(tree):
            line = f"{'  ' * depth}- {node['label']} ({node['url']}) [order={node['order']}]"
            if options['ids']:
                line += f" id={node['id']}"
            self.stdout.write(line)
            count += 1

        self.stdout.write(self.style.SUCCESS(f'{count} menu items'))
