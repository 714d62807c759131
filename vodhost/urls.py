"""
URL configuration for vodhost project.

Only the admin is exposed; it is where operators inspect or clear the
memoized binary paths stored in the sidecar key/value settings.
"""

from django.contrib import admin
from django.urls import path

admin.site.site_header = 'vodhost Administration'
admin.site.site_title = 'vodhost site admin'


urlpatterns = [
    path('admin/', admin.site.urls),
]
