from django.contrib import admin

from store_core.revenue.models import DailyRevenue


@admin.register(DailyRevenue)
class DailyRevenueAdmin(admin.ModelAdmin):
    list_display = ("store_id", "date", "amount", "updated_at")
    search_fields = ("store_id",)
    ordering = ("-date",)
