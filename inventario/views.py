from django.http import HttpResponse
from django.views.decorators.http import require_GET, require_http_methods, require_POST

from inventario import services
from olimpollo.decorators import api_view, leer_json, respuesta_json


@api_view
@require_GET
def inventario(request):
    insumos = services.listar_insumos(
        categoria=request.GET.get('categoria'),
        estado=request.GET.get('estado'),
    )
    return respuesta_json([
        {
            'id': insumo.id,
            'nombre': insumo.nombre,
            'cantidad': insumo.cantidad,
            'unidad': insumo.unidad,
            'stock_minimo': insumo.stock_minimo,
            'categoria': insumo.categoria,
            'costo_promedio': insumo.costo_promedio,
            'estado': insumo.estado,
        }
        for insumo in insumos
    ])


@api_view
@require_http_methods(["DELETE"])
def insumo_detalle(request, pk):
    services.eliminar_insumo(pk)
    return HttpResponse(status=204)


@api_view
@require_POST
def compras(request):
    data = leer_json(request)
    compra = services.registrar_compra(
        items=data.get('items') or [],
        proveedor=data.get('proveedor'),
        total_compra=data.get('total_compra'),
    )
    return respuesta_json({'id': compra.id, 'mensaje': 'Compra registrada'}, status=201)
