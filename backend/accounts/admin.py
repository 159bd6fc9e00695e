from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as DjangoUserAdmin

from accounts.identifiers import find_accounts_by_identifier, reveal_identifier
from .models import (
    Account,
    CompanyProfile,
    IndividualProfile,
    PartnershipProfile,
    TrustProfile,
    User,
)


@admin.register(User)
class UserAdmin(DjangoUserAdmin):
    fieldsets = (
        (None, {"fields": ("email", "password", "name")}),
        ("Permissions", {"fields": ("is_active", "is_staff", "is_superuser", "groups", "user_permissions")}),
        ("Important dates", {"fields": ("last_login", "date_joined")}),
    )
    add_fieldsets = (
        (None, {"classes": ("wide",), "fields": ("email", "name", "password1", "password2")}),
    )
    list_display = ("email", "name", "is_staff")
    search_fields = ("email", "name")
    ordering = ("email",)


@admin.register(Account)
class AccountAdmin(admin.ModelAdmin):
    list_display = ("name", "account_type", "status", "owner", "created_at")
    list_filter = ("account_type", "status")
    search_fields = ("name", "owner__email")
    readonly_fields = ("public_id", "created_at", "updated_at")

    def get_search_results(self, request, queryset, search_term):
        """Name/email search, plus an exact TFN match on the digest."""
        queryset, may_have_duplicates = super().get_search_results(request, queryset, search_term)
        if search_term:
            matched = [account.pk for account in find_accounts_by_identifier(search_term)]
            if matched:
                queryset |= self.model.objects.filter(pk__in=matched)
        return queryset, may_have_duplicates


class ProfileAdmin(admin.ModelAdmin):
    """Profiles show the decrypted TFN; ciphertext and digest are never editable."""

    exclude = ("tfn_ciphertext", "tfn_digest")
    readonly_fields = ("account", "tfn", "created_at", "updated_at")
    list_display = ("account", "display_name", "has_tfn")
    search_fields = ("account__name", "account__owner__email")

    @admin.display(description="TFN")
    def tfn(self, obj):
        plaintext, unavailable = reveal_identifier(obj)
        if unavailable:
            return "(unavailable)"
        return plaintext or "-"

    def has_add_permission(self, request):
        return False


admin.site.register(IndividualProfile, ProfileAdmin)
admin.site.register(CompanyProfile, ProfileAdmin)
admin.site.register(TrustProfile, ProfileAdmin)
admin.site.register(PartnershipProfile, ProfileAdmin)
