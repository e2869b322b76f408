from django.contrib import admin
from .models import StoreEntry


@admin.register(StoreEntry)
class StoreEntryAdmin(admin.ModelAdmin):
    """
    Raw view of the election store.
    This is READ-ONLY: every change must go through the voting engine.
    """
    list_display = ('key', 'value', 'updated_at')
    search_fields = ('key',)
    readonly_fields = ('key', 'value', 'updated_at')

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
