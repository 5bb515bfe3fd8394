from django.contrib import admin

from grants.models import GrantRequest, GrantStates
from stator.exceptions import TransitionError


@admin.register(GrantRequest)
class GrantRequestAdmin(admin.ModelAdmin):
    list_display = ["id", "client", "state", "user_id", "expires", "created"]
    list_filter = ["state"]
    search_fields = ["id", "user_id", "client__display_name"]
    raw_id_fields = ["client"]
    readonly_fields = ["state", "state_changed", "state_version", "tokens_issued"]
    actions = ["force_revoked"]

    @admin.action(description="Revoke")
    def force_revoked(self, request, queryset):
        for instance in queryset:
            try:
                instance.transition_perform(GrantStates.revoked)
            except TransitionError as e:
                self.message_user(request, str(e))
            else:
                instance.access_tokens.all().delete()
