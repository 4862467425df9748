from django.contrib import admin
from django.urls import path, include
from django.conf import settings
from django.conf.urls.static import static

from core.views import HealthCheckView

urlpatterns = [

    path('admin/', admin.site.urls),
    path('ckeditor/', include('ckeditor_uploader.urls')),
    path('api/health/', HealthCheckView.as_view(), name='health-check'),
    path('api/', include('portal.urls')),
    path('api/registrations/', include('registrations.urls')),
    path('api/accounts/', include('accounts.urls')),
    path('api/content/', include('content.urls')),
]

if settings.DEBUG:
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
