from django.contrib import admin
from .models import Farmer

@admin.register(Farmer)
class FarmerAdmin(admin.ModelAdmin):
    list_display = ('display_name', 'district', 'phone_number', 'total_carbon_credits', 'rank', 'has_rank', 'created_at')
    list_filter = ('district', 'unit_system', 'created_at')
    search_fields = ('full_name', 'farm_name', 'phone_number', 'user__username')
    ordering = ('rank',)

    # Maintained by the aggregation service and the ranking job
    readonly_fields = ('total_carbon_credits', 'rank', 'created_at', 'updated_at')

    def has_rank(self, obj):
        """Check if farmer has been placed on the leaderboard"""
        return obj.rank is not None

    has_rank.boolean = True
    has_rank.short_description = "Ranked"
