from django.contrib import admin

from resources.models import Resource


@admin.register(Resource)
class ResourceAdmin(admin.ModelAdmin):
    list_display = ["id", "type", "resource_server", "grant", "created"]
    list_filter = ["type"]
    search_fields = ["id", "grant__id", "resource_server"]
    raw_id_fields = ["grant"]

    def has_change_permission(self, request, obj=None):
        return False
