from django.contrib import admin

from tokens.models import AccessToken


@admin.register(AccessToken)
class AccessTokenAdmin(admin.ModelAdmin):
    list_display = ["id", "grant", "resource_server", "access_type", "expires"]
    search_fields = ["id", "grant__id"]
    raw_id_fields = ["grant"]
    # Values are credentials, so keep them out of the change form
    exclude = ["value"]

    def has_add_permission(self, request, obj=None):
        return False
