from django.contrib import admin

from currency.models import CurrencyChangeLog, CurrencyConfiguration, ExchangeRate


@admin.register(CurrencyConfiguration)
class CurrencyConfigurationAdmin(admin.ModelAdmin):
    list_display = ["default_currency", "multi_currency_enabled", "updated_by", "updated_at"]

    def has_add_permission(self, request):
        return not CurrencyConfiguration.objects.exists()

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(ExchangeRate)
class ExchangeRateAdmin(admin.ModelAdmin):
    list_display = ["from_currency", "to_currency", "rate", "is_active", "valid_from", "valid_until", "source"]
    list_filter = ["is_active", "source", "from_currency", "to_currency"]
    readonly_fields = ["inverse_rate", "created_by", "created_at"]

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(CurrencyChangeLog)
class CurrencyChangeLogAdmin(admin.ModelAdmin):
    list_display = ["change_type", "changed_by", "ip_address", "created_at"]
    list_filter = ["change_type"]

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
