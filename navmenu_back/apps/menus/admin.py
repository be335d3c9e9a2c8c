from django import forms
from django.contrib import admin

from utils.exceptions import NavMenuException
from .models import MenuItem
from .services import MenuItemService


class MenuItemAdminForm(forms.ModelForm):
    """API와 같은 상위 메뉴 검증(존재/자기 자신/하위 메뉴)을 관리자 화면에도 적용"""
    url = forms.CharField(max_length=500, strip=False, label='URL 경로')

    class Meta:
        model = MenuItem
        fields = ['label', 'url', 'parent', 'order']

    def clean(self):
        cleaned_data = super().clean()
        parent = cleaned_data.get('parent')
        parent_id = parent.pk if parent else None

        try:
            if not self.instance._state.adding:
                MenuItemService.validate_parent_change(self.instance.pk, parent_id)
            else:
                MenuItemService.ensure_parent_exists(parent_id)
        except NavMenuException as exc:
            self.add_error('parent', exc.message)
        return cleaned_data


@admin.register(MenuItem)
class MenuItemAdmin(admin.ModelAdmin):
    form = MenuItemAdminForm
    list_display = ('label', 'url', 'parent', 'order', 'created_at')
    list_filter = ('parent',)
    search_fields = ('label', 'url')
    readonly_fields = ('created_at', 'updated_at')
    ordering = ('order', 'created_at')

    fieldsets = (
        ('기본 정보', {
            'fields': ('label', 'url')
        }),
        ('트리 위치', {
            'fields': ('parent', 'order')
        }),
        ('메타 정보', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )
