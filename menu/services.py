import logging

from django.db import DatabaseError, transaction

from inventario.models import Insumo
from menu.models import ProductoMenu, Receta
from olimpollo.decorators import a_decimal, a_entero, leer_lista
from olimpollo.exceptions import NotFoundError, TransactionFailure, ValidationError

logger = logging.getLogger(__name__)


def actualizar_receta(receta_id, nombre, ingredientes, descripcion='', pasos='', producto_venta_id=None):
    """Actualiza la cabecera y reemplaza todas las líneas de una receta."""
    if not nombre or ingredientes is None:
        raise ValidationError("Datos faltantes")
    if not isinstance(nombre, str):
        raise ValidationError("'nombre' debe ser texto")
    if producto_venta_id not in (None, ''):
        producto_venta_id = a_entero(producto_venta_id, 'producto_venta_id')

    lineas = []
    for ing in leer_lista(ingredientes, 'ingredientes'):
        if ing.get('insumo_id') in (None, ''):
            raise ValidationError("Cada ingrediente requiere 'insumo_id'")
        insumo_id = a_entero(ing['insumo_id'], 'insumo_id')
        cantidad = a_decimal(ing.get('cantidad_necesaria'), 'cantidad_necesaria')
        if cantidad <= 0:
            raise ValidationError(f"Cantidad inválida para el insumo {insumo_id}")
        lineas.append((insumo_id, cantidad, ing.get('unidad_medida')))

    existentes = set(
        Insumo.objects.filter(pk__in=[l[0] for l in lineas]).values_list('id', flat=True)
    )
    for insumo_id, _, _ in lineas:
        if insumo_id not in existentes:
            raise NotFoundError("Insumo", insumo_id)

    try:
        with transaction.atomic():
            receta = Receta.objects.select_for_update().filter(pk=receta_id).first()
            if receta is None:
                raise NotFoundError("Receta", receta_id)

            producto = None
            if producto_venta_id:
                producto = ProductoMenu.objects.filter(pk=producto_venta_id).first()
                if producto is None:
                    raise NotFoundError("Producto", producto_venta_id)

            receta.nombre = nombre
            receta.descripcion = descripcion or ''
            receta.pasos = pasos or ''
            receta.save()
            receta.reemplazar_insumos(lineas, producto=producto)
    except DatabaseError as exc:
        raise TransactionFailure(f"No se pudo actualizar la receta: {exc}") from exc

    logger.info("Receta #%s actualizada con %s insumos", receta.id, len(lineas))
    return receta
