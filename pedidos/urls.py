from django.urls import path
from . import views
app_name = 'pedidos'

urlpatterns = [
    path('pedidos/', views.pedidos, name='pedido_list'),
    path('pedidos/<int:pk>/', views.pedido_detalle, name='pedido_detalle'),
    path('clientes/<str:telefono>/', views.cliente_detalle, name='cliente_detalle'),
]
