from django.urls import path
from . import views

app_name = 'verifications'

urlpatterns = [
    path('', views.queue, name='queue'),
    path('<uuid:pk>/', views.credential_detail, name='detail'),
    path('<uuid:pk>/decide/', views.credential_decide, name='decide'),
    path('<uuid:pk>/sync/', views.credential_sync, name='sync'),
]
