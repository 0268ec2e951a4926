# students/admin.py

from django.contrib import admin
from .models import Student


@admin.register(Student)
class StudentAdmin(admin.ModelAdmin):
    list_display = [
        'admission_number', 'get_full_name', 'gender', 'current_class', 'enrollment_status'
    ]
    list_filter = ['enrollment_status', 'gender', 'current_class__academic_level']
    search_fields = ['admission_number', 'first_name', 'middle_name', 'last_name']
    list_select_related = ['current_class__academic_level', 'current_class__academic_session']
    readonly_fields = ['created_at', 'updated_at']
    autocomplete_fields = ['current_class']

    @admin.display(description='Name', ordering='first_name')
    def get_full_name(self, obj):
        return obj.get_full_name()
