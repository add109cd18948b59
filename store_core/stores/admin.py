from django.contrib import admin

from store_core.stores.models import Store, UserPreference


@admin.register(Store)
class StoreAdmin(admin.ModelAdmin):
    list_display = ("name", "code", "owner_user_id", "is_active", "created_at")
    list_filter = ("is_active",)
    search_fields = ("name", "code")


@admin.register(UserPreference)
class UserPreferenceAdmin(admin.ModelAdmin):
    list_display = ("user_id", "key", "value", "updated_at")
    search_fields = ("key",)
