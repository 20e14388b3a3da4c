from django.urls import path
from . import views

app_name = 'businesses'

urlpatterns = [
    path('<uuid:pk>/verify/', views.business_verify, name='verify'),
]
