from django.contrib import admin
from django.urls import path, include

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/', include('pedidos.urls', namespace='pedidos')),
    path('api/', include('inventario.urls', namespace='inventario')),
    path('api/', include('menu.urls', namespace='menu')),
    path('api/', include('caja.urls', namespace='caja')),
]
