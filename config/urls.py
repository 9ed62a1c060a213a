# config/urls.py

from django.conf import settings
from django.conf.urls.static import static
from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    # Admin
    path('admin/', admin.site.urls),

    # Apps
    path('', include('apps.core.urls')),
    path('board/', include('apps.board.urls')),
    path('reports/', include('apps.reports.urls')),
]

# django-health-check (production)
if 'health_check' in settings.INSTALLED_APPS:
    urlpatterns += [path('ht/', include('health_check.urls'))]

# Media and static files in development
if settings.DEBUG:
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
    urlpatterns += static(settings.STATIC_URL, document_root=settings.STATIC_ROOT)

    if 'debug_toolbar' in settings.INSTALLED_APPS:
        import debug_toolbar

        urlpatterns = [
            path('__debug__/', include(debug_toolbar.urls)),
        ] + urlpatterns

admin.site.site_header = 'Taskboard Admin'
admin.site.site_title = 'Taskboard'
admin.site.index_title = 'Administration'
