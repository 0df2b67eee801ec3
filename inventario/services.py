import logging
from decimal import Decimal

from django.db import DatabaseError, transaction
from django.db.models import ProtectedError

from inventario.models import Compra, DetalleCompra, Insumo
from olimpollo.decorators import a_decimal, a_entero, leer_lista
from olimpollo.exceptions import (
    ConflictError, NotFoundError, TransactionFailure, ValidationError,
)

logger = logging.getLogger(__name__)

CENTAVOS = Decimal('0.01')


def listar_insumos(categoria=None, estado=None):
    qs = Insumo.objects.all()
    if categoria:
        qs = qs.filter(categoria=categoria)
    if estado:
        estados_validos = [e[0] for e in Insumo.ESTADOS]
        if estado not in estados_validos:
            raise ValidationError(f"Estado de inventario inválido: {estado}")
        qs = Insumo.filtrar_por_estado(qs, estado)
    return qs.order_by('id')


def eliminar_insumo(insumo_id):
    insumo = Insumo.objects.filter(pk=insumo_id).first()
    if insumo is None:
        raise NotFoundError("Insumo", insumo_id)
    try:
        with transaction.atomic():
            insumo.delete()
    except ProtectedError as e:
        modelos = {obj._meta.model_name for obj in e.protected_objects}
        if 'recetainsumo' in modelos or 'opcionmenu' in modelos:
            raise ConflictError("Este insumo está vinculado a una receta activa.")
        raise ConflictError("Este insumo tiene compras registradas.")
    logger.info("Insumo #%s (%s) eliminado", insumo_id, insumo.nombre)


def _validar_items_compra(items):
    items = leer_lista(items, 'items')
    if not items:
        raise ValidationError("La compra no tiene insumos")

    lineas = []
    for item in items:
        if item.get('insumo_id') in (None, ''):
            raise ValidationError("Cada insumo de la compra requiere 'insumo_id'")
        insumo_id = a_entero(item['insumo_id'], 'insumo_id')
        cantidad = a_decimal(item.get('cantidad'), 'cantidad')
        costo_unitario = a_decimal(item.get('costo_unitario'), 'costo_unitario')
        if cantidad <= 0:
            raise ValidationError(f"Cantidad inválida para el insumo {insumo_id}")
        if costo_unitario < 0:
            raise ValidationError(f"Costo inválido para el insumo {insumo_id}")
        lineas.append((insumo_id, cantidad, costo_unitario))
    return lineas


def registrar_compra(items, proveedor=None, total_compra=None):
    """
    Registra una compra: suma stock y promedia el costo de cada insumo.

    Todas las líneas se aplican en una sola transacción; si un insumo no
    existe o la base de datos falla, no queda ningún cambio aplicado.
    """
    lineas = _validar_items_compra(items)
    total_lineas = sum(
        (cantidad * costo).quantize(CENTAVOS) for _, cantidad, costo in lineas
    )
    total = a_decimal(total_compra, 'total_compra', default=total_lineas)

    try:
        with transaction.atomic():
            compra = Compra.objects.create(
                proveedor=proveedor or 'General',
                total_compra=total.quantize(CENTAVOS),
            )
            for insumo_id, cantidad, costo_unitario in lineas:
                insumo = Insumo.objects.select_for_update().filter(pk=insumo_id).first()
                if insumo is None:
                    raise NotFoundError("Insumo", insumo_id)

                DetalleCompra.objects.create(
                    compra=compra,
                    insumo=insumo,
                    cantidad_comprada=cantidad,
                    costo_unitario=costo_unitario,
                    subtotal=(cantidad * costo_unitario).quantize(CENTAVOS),
                )
                insumo.registrar_entrada(cantidad, costo_unitario, compra=compra)
    except DatabaseError as exc:
        raise TransactionFailure(f"No se pudo registrar la compra: {exc}") from exc

    logger.info("Compra #%s registrada (%s, %s insumos)", compra.id, compra.proveedor, len(lineas))
    return compra
