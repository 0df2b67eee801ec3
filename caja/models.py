import logging
from decimal import Decimal
from django.db import models
from django.db import DatabaseError, transaction
from django.db.models import Max, Sum
from django.utils import timezone

from olimpollo.decorators import a_decimal
from olimpollo.exceptions import ConflictError, TransactionFailure, ValidationError
from pedidos.models import MetodoPago, Pedido

logger = logging.getLogger(__name__)


def _totales_por_metodo(mapa, nombre):
    """Convierte {'Efectivo': '100', 'tarjeta': 50, ...} a {MetodoPago: Decimal}."""
    if not isinstance(mapa, dict):
        raise ValidationError(f"'{nombre}' debe ser un objeto con totales por método de pago")

    totales = {metodo: Decimal('0.00') for metodo in MetodoPago}
    for clave, valor in mapa.items():
        try:
            metodo = MetodoPago.desde_texto(clave)
        except ValueError:
            raise ValidationError(f"Método de pago desconocido en '{nombre}': {clave}")
        totales[metodo] += a_decimal(valor, f"{nombre}.{clave}", default=Decimal('0'))
    return totales


class CorteCaja(models.Model):
    usuario = models.CharField(max_length=100, default='Anonimo')
    fecha_corte = models.DateTimeField(default=timezone.now, db_index=True)

    # Totales del sistema
    total_ventas = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    esperado_efectivo = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    esperado_tarjeta = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    esperado_transferencia = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    esperado_apps = models.DecimalField(max_digits=12, decimal_places=2, default=0)

    # Totales físicos
    real_efectivo = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    real_tarjeta = models.DecimalField(max_digits=12, decimal_places=2, default=0)

    # Auditoría: sólo el efectivo se compara contra un conteo físico
    diferencia = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    observaciones = models.TextField(blank=True)

    class Meta:
        verbose_name = 'Corte de Caja'
        verbose_name_plural = 'Cortes de Caja'
        ordering = ['-fecha_corte']

    def __str__(self):
        return f"Corte #{self.id} - {self.usuario} ({self.fecha_corte:%Y-%m-%d %H:%M})"

    def save(self, *args, **kwargs):
        if self.pk is not None and CorteCaja.objects.filter(pk=self.pk).exists():
            raise ConflictError("Un corte de caja registrado no se puede modificar")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ConflictError("Un corte de caja registrado no se puede eliminar")

    @classmethod
    def ultimo_corte(cls):
        return cls.objects.aggregate(ultimo=Max('fecha_corte'))['ultimo']

    @classmethod
    def previsualizar(cls):
        """
        Totales esperados por método de pago de los pedidos entregados desde
        el último corte (o de todo el histórico si nunca se ha cortado).
        Cubre turnos que cruzan la medianoche y días sin cortes.
        """
        ultimo = cls.ultimo_corte()
        pedidos = Pedido.objects.filter(estado=Pedido.ESTADO_ENTREGADO)
        if ultimo is not None:
            pedidos = pedidos.filter(fecha_creacion__gt=ultimo)

        resumen = {metodo.value: Decimal('0.00') for metodo in MetodoPago}
        sin_clasificar = Decimal('0.00')

        filas = pedidos.values('metodo_pago').annotate(total=Sum('total')).order_by('metodo_pago')
        for fila in filas:
            total = fila['total'] or Decimal('0.00')
            try:
                metodo = MetodoPago.desde_texto(fila['metodo_pago'])
            except ValueError:
                logger.warning(
                    "Método de pago sin clasificar en corte: %r (%s)", fila['metodo_pago'], total
                )
                sin_clasificar += total
                continue
            resumen[metodo.value] += total

        return {
            'desde': ultimo,
            'totales': resumen,
            'sin_clasificar': sin_clasificar,
        }

    @classmethod
    def registrar(cls, usuario, esperados, reales, observaciones=''):
        """Guarda el corte definitivo; su fecha abre la ventana del siguiente."""
        if esperados is None or reales is None:
            raise ValidationError("Datos incompletos")

        esperado = _totales_por_metodo(esperados, 'totales_esperados')
        real = _totales_por_metodo(reales, 'totales_reales')

        try:
            with transaction.atomic():
                corte = cls.objects.create(
                    usuario=usuario or 'Anonimo',
                    total_ventas=sum(esperado.values()),
                    esperado_efectivo=esperado[MetodoPago.EFECTIVO],
                    esperado_tarjeta=esperado[MetodoPago.TARJETA],
                    esperado_transferencia=esperado[MetodoPago.TRANSFERENCIA],
                    esperado_apps=esperado[MetodoPago.APLICACION],
                    real_efectivo=real[MetodoPago.EFECTIVO],
                    real_tarjeta=real[MetodoPago.TARJETA],
                    diferencia=real[MetodoPago.EFECTIVO] - esperado[MetodoPago.EFECTIVO],
                    observaciones=observaciones or '',
                )
        except DatabaseError as exc:
            raise TransactionFailure(f"No se pudo guardar el corte: {exc}") from exc

        logger.info(
            "Corte #%s registrado por %s: ventas %s, diferencia en efectivo %s",
            corte.id, corte.usuario, corte.total_ventas, corte.diferencia,
        )
        return corte
