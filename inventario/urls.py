from django.urls import path
from . import views

app_name = 'inventario'

urlpatterns = [
    # Insumos
    path('inventario/', views.inventario, name='insumo_list'),
    path('inventario/<int:pk>/', views.insumo_detalle, name='insumo_detalle'),
    # Compras
    path('compras/', views.compras, name='compra_create'),
]
