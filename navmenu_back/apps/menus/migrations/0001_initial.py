import uuid

import django.core.validators
import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="MenuItem",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                ("label", models.CharField(max_length=255, verbose_name="표시 이름")),
                ("url", models.CharField(max_length=500, verbose_name="URL 경로")),
                (
                    "order",
                    models.PositiveIntegerField(
                        default=0,
                        validators=[
                            django.core.validators.MinValueValidator(0),
                            django.core.validators.MaxValueValidator(2147483647),
                        ],
                        verbose_name="정렬 순서",
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="생성일시")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="수정일시")),
                (
                    "parent",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="children",
                        to="menus.menuitem",
                        verbose_name="상위 메뉴",
                    ),
                ),
            ],
            options={
                "verbose_name": "메뉴 항목",
                "verbose_name_plural": "메뉴 항목",
                "db_table": "menu_items",
                "ordering": ["order", "created_at"],
                "indexes": [
                    models.Index(fields=["parent", "order"], name="menu_items_parent_order_idx"),
                ],
            },
        ),
    ]
