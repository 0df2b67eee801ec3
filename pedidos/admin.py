from django.contrib import admin

from .models import Cliente, DetallePedido, OpcionDetalle, Pedido


class DetallePedidoInline(admin.TabularInline):
    model = DetallePedido
    extra = 0
    fields = ('nombre_producto', 'menu_producto', 'cantidad', 'precio_unitario', 'notas')


@admin.register(Pedido)
class PedidoAdmin(admin.ModelAdmin):
    list_display = ('id', 'cliente', 'canal_venta', 'metodo_pago', 'estado', 'total', 'comision', 'fecha_creacion')
    list_filter = ('estado', 'canal_venta', 'metodo_pago', 'expirado')
    search_fields = ('cliente', 'telefono')
    # El estado se cambia por la API para que se descuente el inventario
    readonly_fields = ('estado', 'inventario_descontado', 'expirado', 'comision')
    inlines = [DetallePedidoInline]


@admin.register(OpcionDetalle)
class OpcionDetalleAdmin(admin.ModelAdmin):
    list_display = ('detalle', 'opcion', 'orden')


@admin.register(Cliente)
class ClienteAdmin(admin.ModelAdmin):
    list_display = ('telefono', 'nombre', 'visitas', 'total_gastado', 'puntos', 'ultima_visita')
    search_fields = ('telefono', 'nombre')
