# academics/urls.py
"""
URL Configuration for Academics Module
Student progression JSON endpoints and ledger exports.
"""
from django.urls import path
from . import views

app_name = 'academics'

urlpatterns = [
    # =============================================================================
    # STUDENT PROGRESSION
    # =============================================================================
    path('progression/', views.student_progression, name='student_progression'),
    path('progression/history/', views.progression_history, name='progression_history'),

    # Exports
    path('progression/export/excel/', views.export_progressions_excel, name='progression_export_excel'),
    path('progression/export/pdf/', views.export_progressions_pdf, name='progression_export_pdf'),
]
