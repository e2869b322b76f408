"""
URL configuration for the proxyvote project.

    /admin/   Django admin (read-only view of the election store)
    /api/v1/  The voting API, see proxy_voting/urls.py
"""
from django.contrib import admin
from django.urls import path, include

urlpatterns = [
    path('admin/', admin.site.urls),

    # Any URL starting with 'api/v1/' is handled by 'proxy_voting.urls'.
    path('api/v1/', include('proxy_voting.urls')),
]
