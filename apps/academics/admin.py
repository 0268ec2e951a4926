# academics/admin.py

from django.contrib import admin
from .models import AcademicSession, AcademicLevel, Class, StudentProgression
from .utils import get_class_capacity_summary


@admin.register(AcademicSession)
class AcademicSessionAdmin(admin.ModelAdmin):
    list_display = ['year_name', 'start_date', 'end_date', 'is_current', 'is_active']
    list_filter = ['is_current', 'is_active']
    search_fields = ['year_name']
    readonly_fields = ['created_at', 'updated_at', 'created_by_id', 'updated_by_id']


@admin.register(AcademicLevel)
class AcademicLevelAdmin(admin.ModelAdmin):
    list_display = ['name', 'code', 'order', 'next_level', 'is_graduation_level', 'is_active']
    list_filter = ['is_active', 'is_graduation_level']
    search_fields = ['name', 'code']
    ordering = ['order']


@admin.register(Class)
class ClassAdmin(admin.ModelAdmin):
    list_display = [
        'get_display_name', 'academic_session', 'capacity', 'occupancy_display', 'is_active'
    ]
    list_filter = ['academic_session', 'academic_level', 'is_active']
    search_fields = ['name', 'section', 'academic_level__name']
    list_select_related = ['academic_level', 'academic_session']

    @admin.display(description='Occupancy')
    def occupancy_display(self, obj):
        summary = get_class_capacity_summary(obj)
        if not summary['is_configured']:
            return f"{summary['occupancy']} / not set"
        return f"{summary['occupancy']} / {summary['capacity']}"


@admin.register(StudentProgression)
class StudentProgressionAdmin(admin.ModelAdmin):
    list_display = [
        'student', 'progression_type', 'from_class', 'to_class',
        'to_academic_session', 'effective_date', 'processed_by'
    ]
    list_filter = ['progression_type', 'to_academic_session', 'to_academic_level']
    search_fields = [
        'student__first_name', 'student__last_name', 'student__admission_number', 'reason'
    ]
    list_select_related = [
        'student', 'from_class__academic_level', 'to_class__academic_level',
        'to_academic_session', 'processed_by'
    ]
    date_hierarchy = 'effective_date'

    fieldsets = (
        ('Student', {
            'fields': ('student', 'progression_type', 'reason')
        }),
        ('From', {
            'fields': ('from_academic_session', 'from_academic_level', 'from_class')
        }),
        ('To', {
            'fields': ('to_academic_session', 'to_academic_level', 'to_class')
        }),
        ('Processing', {
            'fields': ('effective_date', 'processed_by', 'created_at')
        }),
    )

    def get_readonly_fields(self, request, obj=None):
        return [field.name for field in self.model._meta.fields]

    # Progression records are written by progression runs only
    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
