from django.contrib import admin

from interactions.models import Interaction


@admin.register(Interaction)
class InteractionAdmin(admin.ModelAdmin):
    list_display = ["id", "type", "grant", "hash_method", "expires"]
    list_filter = ["type"]
    search_fields = ["id", "grant__id", "user_code"]
    raw_id_fields = ["grant"]
