from django.http import HttpResponse
from django.views.decorators.http import require_GET, require_http_methods

from olimpollo.decorators import api_view, leer_json, respuesta_json
from pedidos import services


def _detalle_a_dict(detalle):
    return {
        'menu_producto_id': detalle.menu_producto_id,
        'nombre_producto': detalle.nombre_producto,
        'cantidad': detalle.cantidad,
        'precio_unitario': detalle.precio_unitario,
        'notas': detalle.notas,
    }


def _pedido_a_dict(pedido):
    return {
        'id': pedido.id,
        'cliente': pedido.cliente,
        'telefono': pedido.telefono,
        'estado': pedido.estado,
        'total': pedido.total,
        'comision': pedido.comision,
        'fecha_creacion': pedido.fecha_creacion,
        'canal_venta': pedido.canal_venta,
        'metodo_pago': pedido.metodo_pago,
        'expirado': pedido.expirado,
        'items': [_detalle_a_dict(d) for d in pedido.detalles.all()],
    }


@api_view
@require_http_methods(["GET", "POST"])
def pedidos(request):
    if request.method == "GET":
        qs = services.listar_pedidos(
            canal=request.GET.get('canal'),
            estado=request.GET.get('estado'),
            fecha_inicio=request.GET.get('fechaInicio'),
            fecha_fin=request.GET.get('fechaFin'),
        )
        return respuesta_json([_pedido_a_dict(p) for p in qs])

    data = leer_json(request)
    pedido = services.crear_pedido(
        cliente=data.get('cliente'),
        items=data.get('items') or [],
        telefono=data.get('telefono'),
        canal_venta=data.get('canal_venta'),
        metodo_pago=data.get('metodo_pago'),
        total_ajustado=data.get('total_ajustado'),
    )
    return respuesta_json(
        {'id': pedido.id, 'mensaje': 'Pedido guardado', 'comision': pedido.comision},
        status=201,
    )


@api_view
@require_http_methods(["PUT", "DELETE"])
def pedido_detalle(request, pk):
    if request.method == "DELETE":
        services.eliminar_pedido(pk)
        return HttpResponse(status=204)

    data = leer_json(request)
    pedido = services.cambiar_estado(pk, data.get('estado'))
    return respuesta_json({'mensaje': 'Estado actualizado', 'estado': pedido.estado})


@api_view
@require_GET
def cliente_detalle(request, telefono):
    cliente = services.buscar_cliente(telefono)
    return respuesta_json({
        'id': cliente.id,
        'telefono': cliente.telefono,
        'nombre': cliente.nombre,
        'visitas': cliente.visitas,
        'total_gastado': cliente.total_gastado,
        'puntos': cliente.puntos,
        'ultima_visita': cliente.ultima_visita,
    })
