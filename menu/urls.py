from django.urls import path
from . import views

app_name = 'menu'

urlpatterns = [
    path('recetas/<int:pk>/', views.receta_detalle, name='receta_detalle'),
]
