import logging

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer

from inventario.models import Insumo

logger = logging.getLogger(__name__)

GRUPO_INVENTARIO = 'inventario'


def insumo_a_dict(insumo):
    return {
        'id': insumo.id,
        'nombre': insumo.nombre,
        'cantidad': str(insumo.cantidad),
        'unidad': insumo.unidad,
        'estado': insumo.estado,
    }


def insumos_agotados(insumo_ids=None):
    """Insumos en cero o negativo, opcionalmente limitados a ``insumo_ids``."""
    qs = Insumo.objects.filter(cantidad__lte=0)
    if insumo_ids is not None:
        qs = qs.filter(pk__in=set(insumo_ids))
    return list(qs.order_by('id'))


def notificar_agotados(insumo_ids, pedido_id=None):
    """
    Avisa por WebSocket de los insumos que quedaron en cero o negativo.
    Se llama con transaction.on_commit, nunca dentro de la transacción.
    """
    agotados = insumos_agotados(insumo_ids)
    if not agotados:
        return []

    for insumo in agotados:
        logger.warning(
            "Insumo agotado: %s (%s %s) tras pedido #%s",
            insumo.nombre, insumo.cantidad, insumo.unidad, pedido_id,
        )

    channel_layer = get_channel_layer()
    if channel_layer is None:
        return agotados

    async_to_sync(channel_layer.group_send)(
        GRUPO_INVENTARIO,
        {
            'type': 'alerta_stock',
            'message': {
                'pedido_id': pedido_id,
                'insumos': [insumo_a_dict(insumo) for insumo in agotados],
            },
        }
    )
    return agotados
