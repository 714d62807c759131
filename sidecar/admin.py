from django.contrib import admin

from sidecar.models import SystemSetting
from sidecar.service.constants import MEMOIZED_BINARY_KEYS


@admin.register(SystemSetting)
class SystemSettingAdmin(admin.ModelAdmin):
    list_display = ['key', 'value', 'is_memoized_binary', 'updated_at']
    search_fields = ['key']
    readonly_fields = ['updated_at']
    actions = ['clear_settings']

    def is_memoized_binary(self, obj):
        return obj.key in MEMOIZED_BINARY_KEYS

    is_memoized_binary.boolean = True
    is_memoized_binary.short_description = 'Detected binary'

    def clear_settings(self, request, queryset):
        count = queryset.count()
        queryset.delete()
        self.message_user(request, f'Cleared {count} setting(s).')

    clear_settings.short_description = 'Clear selected settings (forces re-detection)'
