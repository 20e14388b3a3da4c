from django.contrib import admin
from django.urls import path, include

urlpatterns = [
    path('admin/', admin.site.urls),
    path('', include('core.urls', namespace='core')),
    path('businesses/', include('businesses.urls', namespace='businesses')),
    path('verifications/', include('verifications.urls', namespace='verifications')),
    path('accounts/', include('django.contrib.auth.urls')),
]
