"""
URL configuration for schoolara project.
"""
from django.contrib import admin
from django.urls import path, include

urlpatterns = [
    # Django admin
    path('admin/', admin.site.urls),

    # Academics app - sessions, classes, student progression
    path('academics/', include(('academics.urls', 'academics'), namespace='academics')),
]
