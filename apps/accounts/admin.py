# accounts/admin.py

from django.contrib import admin
from django.contrib.auth import get_user_model
from django.contrib.auth.admin import UserAdmin
from .models import UserProfile

User = get_user_model()


class UserProfileInline(admin.StackedInline):
    """Role and staff number edited on the user page"""
    model = UserProfile
    can_delete = False
    fields = ('role', 'employee_id', 'is_active')
    verbose_name_plural = 'School Role'


class SchoolUserAdmin(UserAdmin):
    inlines = (UserProfileInline,)
    list_display = ('username', 'get_full_name', 'email', 'school_role', 'is_staff', 'is_active')
    list_filter = UserAdmin.list_filter + ('profile__role',)
    list_select_related = ('profile',)

    @admin.display(description='Role', ordering='profile__role')
    def school_role(self, obj):
        try:
            return obj.profile.get_role_display()
        except UserProfile.DoesNotExist:
            return '-'


@admin.register(UserProfile)
class UserProfileAdmin(admin.ModelAdmin):
    list_display = ('user', 'role', 'employee_id', 'is_active', 'updated_at')
    list_filter = ('role', 'is_active')
    search_fields = ('user__username', 'user__first_name', 'user__last_name', 'employee_id')
    list_select_related = ('user',)


if admin.site.is_registered(User):
    admin.site.unregister(User)
admin.site.register(User, SchoolUserAdmin)

admin.site.site_header = "Schoolara Administration"
admin.site.site_title = "Schoolara Admin"
admin.site.index_title = "Academic records"
