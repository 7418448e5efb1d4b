from django.urls import path

from . import views

app_name = 'tenants'

urlpatterns = [
    path('current/', views.CurrentOrganizationView.as_view(), name='current'),
]
