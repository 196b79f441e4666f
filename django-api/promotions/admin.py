from django.contrib import admin

from promotions.models import PromoCode, PromoRedemption, Promotion


class PromoCodeInline(admin.TabularInline):
    model = PromoCode
    extra = 0
    fields = ["code", "max_redemptions", "per_user_limit", "starts_at", "ends_at"]


@admin.register(Promotion)
class PromotionAdmin(admin.ModelAdmin):
    list_display = ["name", "org_id", "discount_type", "discount_value", "starts_at", "ends_at", "redemptions"]
    list_filter = ["type", "discount_type"]
    search_fields = ["name", "org_id"]
    readonly_fields = ["redemptions", "created_by", "created_at"]
    inlines = [PromoCodeInline]


@admin.register(PromoCode)
class PromoCodeAdmin(admin.ModelAdmin):
    list_display = ["code", "org_id", "promotion", "percent_off", "amount_off_cents", "currency"]
    search_fields = ["code", "org_id"]
    readonly_fields = ["created_by", "created_at"]


@admin.register(PromoRedemption)
class PromoRedemptionAdmin(admin.ModelAdmin):
    list_display = ["code", "user_id", "order_id", "redeemed_at"]
    search_fields = ["code", "user_id", "order_id"]

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
