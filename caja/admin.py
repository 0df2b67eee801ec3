from django.contrib import admin

from .models import CorteCaja


@admin.register(CorteCaja)
class CorteCajaAdmin(admin.ModelAdmin):
    list_display = ('id', 'usuario', 'fecha_corte', 'total_ventas', 'esperado_efectivo', 'real_efectivo', 'diferencia')
    date_hierarchy = 'fecha_corte'

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
