import uuid

from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

# order 상한 (PostgreSQL integer 범위)
MAX_ORDER = 2147483647


# 메뉴 항목 (label, url, parent-child 구조)
# 트리는 저장하지 않고, 조회할 때마다 평면 목록에서 다시 구성한다.
class MenuItem(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    label = models.CharField(max_length=255, verbose_name='표시 이름')
    url = models.CharField(max_length=500, verbose_name='URL 경로')
    parent = models.ForeignKey(
        "self",
        related_name="children",
        on_delete=models.CASCADE,
        blank=True,
        null=True,
        verbose_name='상위 메뉴'
    )
    order = models.PositiveIntegerField(
        default=0,
        validators=[MinValueValidator(0), MaxValueValidator(MAX_ORDER)],
        verbose_name='정렬 순서'
    )  # 형제 간 정렬 키 (중복 허용)
    created_at = models.DateTimeField(auto_now_add=True, verbose_name='생성일시')
    updated_at = models.DateTimeField(auto_now=True, verbose_name='수정일시')

    class Meta:
        db_table = 'menu_items'
        verbose_name = '메뉴 항목'
        verbose_name_plural = '메뉴 항목'
        ordering = ['order', 'created_at']
        indexes = [
            models.Index(fields=['parent', 'order'], name='menu_items_parent_order_idx'),
        ]

    def __str__(self):
        return f"{self.label} ({self.url})"

    @property
    def is_root(self):
        return self.parent_id is None
