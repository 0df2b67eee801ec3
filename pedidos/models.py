from decimal import Decimal, ROUND_HALF_UP
from django.conf import settings
from django.db import models
from django.db import transaction
from django.utils import timezone

from inventario.models import Insumo
from menu.models import OpcionMenu, ProductoMenu
from olimpollo.exceptions import NotFoundError, ValidationError
from pedidos.utils import extraer_modificadores, normalizar_texto


class MetodoPago(models.TextChoices):
    EFECTIVO = 'Efectivo', 'Efectivo'
    TARJETA = 'Tarjeta', 'Tarjeta'
    TRANSFERENCIA = 'Transferencia', 'Transferencia'
    APLICACION = 'Aplicación', 'Aplicación'

    @classmethod
    def desde_texto(cls, texto):
        """
        Normaliza un nombre de método de pago ('tarjeta', 'Pago con Tarjeta',
        'Aplicacion'...) al valor de la enumeración. Lanza ValueError si no
        corresponde a ninguno.
        """
        normalizado = normalizar_texto(texto)
        if not normalizado:
            raise ValueError("Método de pago vacío")
        for metodo in (cls.APLICACION, cls.TARJETA, cls.TRANSFERENCIA, cls.EFECTIVO):
            if normalizar_texto(metodo.value) in normalizado:
                return metodo
        raise ValueError(f"Método de pago desconocido: {texto}")


class Cliente(models.Model):
    telefono = models.CharField(max_length=20, unique=True)
    nombre = models.CharField(max_length=100, blank=True)
    visitas = models.PositiveIntegerField(default=0)
    total_gastado = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    puntos = models.PositiveIntegerField(default=0)
    ultima_visita = models.DateTimeField(default=timezone.now)

    def __str__(self):
        return f"{self.nombre} ({self.telefono})" if self.nombre else self.telefono


class Pedido(models.Model):
    ESTADO_PENDIENTE = 'Pendiente'
    ESTADO_ENTREGADO = 'Entregado'
    ESTADOS_PEDIDO = (
        (ESTADO_PENDIENTE, 'Pendiente'),
        (ESTADO_ENTREGADO, 'Entregado'),
    )
    CANAL_DEFAULT = 'OyR'

    cliente = models.CharField(max_length=100)
    telefono = models.CharField(max_length=20, blank=True)
    canal_venta = models.CharField(max_length=20, default=CANAL_DEFAULT)
    metodo_pago = models.CharField(max_length=20, choices=MetodoPago.choices, default=MetodoPago.EFECTIVO)
    estado = models.CharField(max_length=15, choices=ESTADOS_PEDIDO, default=ESTADO_PENDIENTE)
    total = models.DecimalField(max_digits=10, decimal_places=2)
    comision = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    fecha_creacion = models.DateTimeField(default=timezone.now, db_index=True)
    # El stock se descuenta una sola vez por pedido
    inventario_descontado = models.BooleanField(default=False)
    # Entregado por el barrido de pendientes viejos, sin descontar stock
    expirado = models.BooleanField(default=False)

    class Meta:
        ordering = ['-fecha_creacion', '-id']

    def __str__(self):
        return f"Pedido #{self.id} - {self.cliente} ({self.estado})"

    @staticmethod
    def calcular_comision(total, metodo_pago):
        if metodo_pago == MetodoPago.TARJETA:
            tasa = Decimal(str(settings.COMISION_TARJETA))
        elif metodo_pago == MetodoPago.APLICACION:
            tasa = Decimal(str(settings.COMISION_APLICACION))
        else:
            return Decimal('0.00')
        return (total * tasa).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)

    @transaction.atomic
    def cambiar_estado(self, nuevo_estado):
        """
        Cambia el estado del pedido. Al entregarse descuenta los insumos de
        todas sus líneas antes de guardar el estado; cualquier error revierte
        tanto el descuento como el cambio de estado.

        Devuelve los ids de insumos descontados.
        """
        estados_validos = [e[0] for e in self.ESTADOS_PEDIDO]
        if nuevo_estado not in estados_validos:
            raise ValidationError(f"Estado inválido: {nuevo_estado}")

        descontados = []
        if nuevo_estado == self.ESTADO_ENTREGADO and not self.inventario_descontado:
            for detalle in self.detalles.select_related('menu_producto__receta'):
                descontados.extend(detalle.descontar_insumos())
            self.inventario_descontado = True

        self.estado = nuevo_estado
        self.save(update_fields=['estado', 'inventario_descontado'])
        return descontados


class DetallePedido(models.Model):
    pedido = models.ForeignKey(Pedido, on_delete=models.CASCADE, related_name='detalles')
    menu_producto = models.ForeignKey(ProductoMenu, on_delete=models.SET_NULL, null=True, blank=True)
    # Nombre tal como se mostró, puede incluir "(BBQ, Ranch)"
    nombre_producto = models.CharField(max_length=255)
    cantidad = models.PositiveIntegerField()
    precio_unitario = models.DecimalField(max_digits=10, decimal_places=2)
    notas = models.TextField(blank=True)

    class Meta:
        ordering = ['id']

    def __str__(self):
        return f"{self.cantidad}x {self.nombre_producto} (Pedido {self.pedido_id})"

    @property
    def subtotal(self):
        return self.cantidad * self.precio_unitario

    def opciones_resueltas(self):
        """
        Opciones elegidas para la línea. Si la línea guardó referencias
        explícitas se usan en su orden; si no, se interpretan los
        modificadores escritos en el nombre.
        """
        selecciones = list(self.selecciones.select_related('opcion'))
        if selecciones:
            return [s.opcion for s in selecciones if s.opcion is not None]

        opciones = []
        for token in extraer_modificadores(self.nombre_producto):
            opcion = OpcionMenu.objects.por_valor(token)
            # Modificadores sin opción registrada son cosméticos
            if opcion is not None:
                opciones.append(opcion)
        return opciones

    def consumos(self):
        """Lista de (insumo_id, cantidad, descripción) a descontar por esta línea."""
        resultado = []
        producto = self.menu_producto
        receta = producto.receta if producto is not None else None
        if receta is not None:
            for ingrediente in receta.insumos.all():
                resultado.append((
                    ingrediente.insumo_id,
                    ingrediente.cantidad_necesaria * self.cantidad,
                    f"Consumo de insumos por {self.cantidad}x {producto.nombre_venta}",
                ))

        for opcion in self.opciones_resueltas():
            if not opcion.consume_insumo:
                continue
            resultado.append((
                opcion.insumo_id,
                opcion.cantidad_insumo * self.cantidad,
                f"Modificador {opcion.valor} por {self.cantidad}x {self.nombre_producto}",
            ))
        return resultado

    def descontar_insumos(self):
        descontados = []
        for insumo_id, cantidad, descripcion in self.consumos():
            if not Insumo.descontar(insumo_id, cantidad, pedido=self.pedido, descripcion=descripcion):
                raise NotFoundError("Insumo", insumo_id)
            descontados.append(insumo_id)
        return descontados


class OpcionDetalle(models.Model):
    detalle = models.ForeignKey(DetallePedido, on_delete=models.CASCADE, related_name='selecciones')
    opcion = models.ForeignKey(OpcionMenu, on_delete=models.SET_NULL, null=True)
    orden = models.PositiveSmallIntegerField(default=0)

    class Meta:
        ordering = ['orden', 'id']

    def __str__(self):
        return f"{self.opcion} en {self.detalle}"
