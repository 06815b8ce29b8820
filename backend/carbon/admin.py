from django.contrib import admin, messages

from .models import Activity, CreditAggregation, Suggestion
from .verification_service import ActivityVerificationService, VerificationError


@admin.register(Activity)
class ActivityAdmin(admin.ModelAdmin):
    list_display = ('id', 'user', 'activity_type', 'area', 'status', 'calculated_credits', 'used_fallback', 'created_at')
    list_filter = ('status', 'used_fallback', 'activity_type')
    search_fields = ('user__username', 'activity_type', 'id')
    readonly_fields = ('created_at', 'verified_at', 'calculated_credits', 'reward_points', 'used_fallback')
    actions = ['approve_selected']

    @admin.action(description="Approve selected pending activities")
    def approve_selected(self, request, queryset):
        service = ActivityVerificationService()
        approved = 0
        for activity in queryset:
            try:
                service.approve_activity(activity.pk, verifier=request.user)
                approved += 1
            except VerificationError as e:
                self.message_user(request, f"{activity.pk}: {e}", level=messages.WARNING)
        self.message_user(request, f"{approved} activities approved.")


@admin.register(Suggestion)
class SuggestionAdmin(admin.ModelAdmin):
    list_display = ('related_activity', 'user', 'is_read', 'created_at')
    list_filter = ('is_read',)
    search_fields = ('user__username', 'suggestion_text')
    readonly_fields = ('created_at',)


@admin.register(CreditAggregation)
class CreditAggregationAdmin(admin.ModelAdmin):
    list_display = ('activity', 'user', 'credits', 'created_at')
    search_fields = ('user__username',)
    readonly_fields = ('activity', 'user', 'credits', 'created_at')
