from decimal import Decimal
from django.db import models
from django.db.models import F
from django.utils import timezone


class Insumo(models.Model):
    ESTADO_AGOTADO = 'Agotado'
    ESTADO_RESTOCK = 'Requiere re-stock'
    ESTADO_EN_STOCK = 'En stock'
    ESTADOS = [
        (ESTADO_AGOTADO, 'Agotado'),
        (ESTADO_RESTOCK, 'Requiere re-stock'),
        (ESTADO_EN_STOCK, 'En stock'),
    ]

    nombre = models.CharField(max_length=100)
    # Puede quedar negativo: la venta no se bloquea por falta de insumo
    cantidad = models.DecimalField(max_digits=12, decimal_places=3, default=0)
    unidad = models.CharField(max_length=20, default="unidad")
    stock_minimo = models.DecimalField(max_digits=12, decimal_places=3, default=0)
    categoria = models.CharField(max_length=50, blank=True)
    proveedor = models.CharField(max_length=100, blank=True)
    costo_promedio = models.DecimalField(max_digits=12, decimal_places=4, default=0)

    class Meta:
        ordering = ['id']

    def __str__(self):
        return f"{self.nombre} ({self.cantidad} {self.unidad})"

    @property
    def estado(self):
        if self.cantidad <= 0:
            return self.ESTADO_AGOTADO
        if self.cantidad <= self.stock_minimo:
            return self.ESTADO_RESTOCK
        return self.ESTADO_EN_STOCK

    @classmethod
    def filtrar_por_estado(cls, queryset, estado):
        if estado == cls.ESTADO_AGOTADO:
            return queryset.filter(cantidad__lte=0)
        if estado == cls.ESTADO_RESTOCK:
            return queryset.filter(cantidad__gt=0, cantidad__lte=F('stock_minimo'))
        if estado == cls.ESTADO_EN_STOCK:
            return queryset.filter(cantidad__gt=F('stock_minimo'))
        return queryset

    @classmethod
    def descontar(cls, insumo_id, cantidad, pedido=None, descripcion=None):
        """
        Resta ``cantidad`` con una expresión evaluada por la base de datos,
        de modo que dos entregas concurrentes no pierdan actualizaciones.
        Devuelve False si el insumo no existe.
        """
        actualizados = cls.objects.filter(pk=insumo_id).update(
            cantidad=F('cantidad') - cantidad
        )
        if not actualizados:
            return False
        MovimientoInventario.objects.create(
            insumo_id=insumo_id,
            tipo=MovimientoInventario.TIPO_SALIDA,
            cantidad=cantidad,
            descripcion=descripcion or f"Pedido #{pedido.id if pedido else ''}",
            pedido=pedido,
        )
        return True

    def registrar_entrada(self, cantidad, costo_unitario, compra=None):
        """
        Suma stock y recalcula el costo promedio ponderado.
        Debe llamarse sobre una fila bloqueada con select_for_update().
        """
        nueva_cantidad = self.cantidad + cantidad
        if nueva_cantidad > 0:
            nuevo_costo = (
                self.cantidad * self.costo_promedio + cantidad * costo_unitario
            ) / nueva_cantidad
        else:
            # Evitar división por cero
            nuevo_costo = costo_unitario

        self.cantidad = nueva_cantidad
        self.costo_promedio = nuevo_costo.quantize(Decimal('0.0001'))
        self.save(update_fields=['cantidad', 'costo_promedio'])

        MovimientoInventario.objects.create(
            insumo=self,
            tipo=MovimientoInventario.TIPO_ENTRADA,
            cantidad=cantidad,
            descripcion=f"Compra #{compra.id if compra else ''}",
            compra=compra,
        )


class MovimientoInventario(models.Model):
    TIPO_ENTRADA = 'entrada'
    TIPO_SALIDA = 'salida'
    TIPOS = [
        (TIPO_ENTRADA, 'Entrada'),
        (TIPO_SALIDA, 'Salida'),
    ]

    insumo = models.ForeignKey(Insumo, on_delete=models.CASCADE, related_name='movimientos')
    tipo = models.CharField(max_length=10, choices=TIPOS)
    cantidad = models.DecimalField(max_digits=12, decimal_places=3)
    descripcion = models.CharField(max_length=255, blank=True, null=True)
    fecha = models.DateTimeField(default=timezone.now)
    pedido = models.ForeignKey('pedidos.Pedido', null=True, blank=True, on_delete=models.SET_NULL)
    compra = models.ForeignKey('inventario.Compra', null=True, blank=True, on_delete=models.SET_NULL)

    class Meta:
        ordering = ['-fecha', '-id']

    def __str__(self):
        pedido_info = f" (Pedido #{self.pedido_id})" if self.pedido_id else ""
        return f"{self.tipo} - {self.cantidad} {self.insumo.unidad} de {self.insumo.nombre}{pedido_info}"


class Compra(models.Model):
    proveedor = models.CharField(max_length=100, default='General')
    total_compra = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    fecha = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ['-fecha']

    def __str__(self):
        return f"Compra #{self.id} - {self.proveedor}"


class DetalleCompra(models.Model):
    compra = models.ForeignKey(Compra, on_delete=models.CASCADE, related_name='detalles')
    insumo = models.ForeignKey(Insumo, on_delete=models.PROTECT, related_name='compras')
    cantidad_comprada = models.DecimalField(max_digits=12, decimal_places=3)
    costo_unitario = models.DecimalField(max_digits=12, decimal_places=4)
    subtotal = models.DecimalField(max_digits=14, decimal_places=2)

    def __str__(self):
        return f"{self.cantidad_comprada} {self.insumo.unidad} de {self.insumo.nombre}"
