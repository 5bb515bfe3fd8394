from django.contrib import admin

from clients.models import Client


@admin.register(Client)
class ClientAdmin(admin.ModelAdmin):
    list_display = ["id", "display_name", "instance_id", "key_id", "created"]
    search_fields = ["id", "display_name", "instance_id", "key_id"]
    readonly_fields = ["created", "updated"]
