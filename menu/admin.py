from django.contrib import admin

from .models import OpcionMenu, ProductoMenu, Receta, RecetaInsumo


class RecetaInsumoInline(admin.TabularInline):
    model = RecetaInsumo
    extra = 1


@admin.register(Receta)
class RecetaAdmin(admin.ModelAdmin):
    list_display = ('nombre', 'descripcion')
    inlines = [RecetaInsumoInline]


@admin.register(ProductoMenu)
class ProductoMenuAdmin(admin.ModelAdmin):
    list_display = ('nombre_venta', 'categoria', 'precio_base', 'receta')
    list_filter = ('categoria',)


@admin.register(OpcionMenu)
class OpcionMenuAdmin(admin.ModelAdmin):
    list_display = ('nombre_opcion', 'valor', 'precio_adicional', 'insumo', 'cantidad_insumo')
    list_filter = ('nombre_opcion',)
