from django.contrib import admin

from .models import Compra, DetalleCompra, Insumo, MovimientoInventario


@admin.register(Insumo)
class InsumoAdmin(admin.ModelAdmin):
    list_display = ('nombre', 'cantidad', 'unidad', 'stock_minimo', 'costo_promedio', 'estado')
    list_filter = ('categoria',)


class DetalleCompraInline(admin.TabularInline):
    model = DetalleCompra
    extra = 0
    readonly_fields = ('insumo', 'cantidad_comprada', 'costo_unitario', 'subtotal')


@admin.register(Compra)
class CompraAdmin(admin.ModelAdmin):
    list_display = ('id', 'proveedor', 'total_compra', 'fecha')
    inlines = [DetalleCompraInline]


@admin.register(MovimientoInventario)
class MovimientoInventarioAdmin(admin.ModelAdmin):
    list_display = ('fecha', 'insumo', 'tipo', 'cantidad', 'pedido', 'compra')
    list_filter = ('tipo',)
