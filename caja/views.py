from django.views.decorators.http import require_GET, require_POST

from caja.models import CorteCaja
from olimpollo.decorators import api_view, leer_json, respuesta_json


@api_view
@require_GET
def corte_preview(request):
    """Totales esperados desde el último corte."""
    resumen = CorteCaja.previsualizar()
    return respuesta_json({
        **resumen['totales'],
        'sin_clasificar': resumen['sin_clasificar'],
        'desde': resumen['desde'],
    })


@api_view
@require_POST
def corte(request):
    data = leer_json(request)
    cierre = CorteCaja.registrar(
        usuario=data.get('usuario'),
        esperados=data.get('totales_esperados'),
        reales=data.get('totales_reales'),
        observaciones=data.get('observaciones', ''),
    )
    return respuesta_json(
        {
            'mensaje': 'Corte guardado correctamente',
            'id': cierre.id,
            'fecha_corte': cierre.fecha_corte,
            'diferencia': cierre.diferencia,
        },
        status=201,
    )
