from django.urls import path
from . import views

app_name = 'caja'

urlpatterns = [
    path('corte/preview/', views.corte_preview, name='corte_preview'),
    path('corte/', views.corte, name='corte_create'),
]
