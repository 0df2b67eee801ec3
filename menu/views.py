from django.views.decorators.http import require_http_methods

from menu import services
from olimpollo.decorators import api_view, leer_json, respuesta_json


@api_view
@require_http_methods(["PUT"])
def receta_detalle(request, pk):
    data = leer_json(request)
    receta = services.actualizar_receta(
        pk,
        nombre=data.get('nombre'),
        ingredientes=data.get('ingredientes'),
        descripcion=data.get('descripcion', ''),
        pasos=data.get('pasos', ''),
        producto_venta_id=data.get('producto_venta_id'),
    )
    return respuesta_json({'id': receta.id, 'mensaje': 'Receta actualizada'})
