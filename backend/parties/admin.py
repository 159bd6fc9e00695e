from django.contrib import admin

from .models import (
    CompanyInvitation,
    CompanyPartner,
    PartnershipInvitation,
    PartnershipPartner,
    SpouseInvitation,
    SpousePartner,
    TrustInvitation,
    TrustPartner,
)


class PartyAdmin(admin.ModelAdmin):
    list_display = ("email", "name", "display_role", "status", "account", "created_at")
    list_filter = ("status",)
    search_fields = ("email", "name", "account__name")
    readonly_fields = ("public_id", "user", "responded_at", "created_at", "updated_at")
    raw_id_fields = ("account",)


class InvitationAdmin(admin.ModelAdmin):
    list_display = ("email", "account", "expires_at", "accepted_at", "created_at")
    list_filter = ("accepted_at",)
    search_fields = ("email", "account__name")
    readonly_fields = ("token_hash", "expires_at", "accepted_at", "created_at")
    raw_id_fields = ("account",)

    def has_add_permission(self, request):
        return False


admin.site.register(CompanyPartner, PartyAdmin)
admin.site.register(PartnershipPartner, PartyAdmin)
admin.site.register(TrustPartner, PartyAdmin)
admin.site.register(SpousePartner, PartyAdmin)
admin.site.register(CompanyInvitation, InvitationAdmin)
admin.site.register(PartnershipInvitation, InvitationAdmin)
admin.site.register(TrustInvitation, InvitationAdmin)
admin.site.register(SpouseInvitation, InvitationAdmin)
