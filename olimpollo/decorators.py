import json
import logging
from decimal import Decimal, InvalidOperation
from functools import wraps

from django.core.serializers.json import DjangoJSONEncoder
from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt

from olimpollo.exceptions import ErrorOlimpollo, ValidationError

logger = logging.getLogger(__name__)


def respuesta_json(data, status=200):
    # DjangoJSONEncoder serializa Decimal como texto, sin pasar por float
    return JsonResponse(data, status=status, encoder=DjangoJSONEncoder, safe=False)


def leer_json(request):
    """Decodifica el cuerpo de la petición; un cuerpo vacío equivale a {}."""
    if not request.body:
        return {}
    try:
        data = json.loads(request.body, parse_float=Decimal)
    except (ValueError, UnicodeDecodeError):
        raise ValidationError("El cuerpo de la petición no es JSON válido")
    if not isinstance(data, dict):
        raise ValidationError("El cuerpo de la petición debe ser un objeto JSON")
    return data


def leer_lista(valor, campo):
    """Lista de objetos JSON; ``None`` equivale a una lista vacía."""
    if valor is None:
        return []
    if not isinstance(valor, list) or not all(isinstance(v, dict) for v in valor):
        raise ValidationError(f"'{campo}' debe ser una lista de objetos")
    return valor


def a_decimal(valor, campo, default=None):
    """Convierte un valor recibido (texto o número) a Decimal."""
    if valor is None or valor == '':
        if default is not None:
            return default
        raise ValidationError(f"Falta el campo '{campo}'")
    if isinstance(valor, bool):
        raise ValidationError(f"Valor inválido para '{campo}': {valor}")
    try:
        numero = Decimal(str(valor).replace(',', '.'))
    except InvalidOperation:
        raise ValidationError(f"Valor inválido para '{campo}': {valor}")
    if not numero.is_finite():
        raise ValidationError(f"Valor inválido para '{campo}': {valor}")
    return numero


def a_entero(valor, campo):
    """Entero exacto: '3', 3 o 3.0 valen; 2.5 se rechaza en vez de truncarse."""
    numero = a_decimal(valor, campo)
    if numero != numero.to_integral_value():
        raise ValidationError(f"'{campo}' debe ser un número entero: {valor}")
    return int(numero)


def api_view(view_func):
    """
    Envuelve una vista JSON: exenta de CSRF y con los errores del dominio
    traducidos a respuestas {"error": ...} con su código HTTP.
    """
    @csrf_exempt
    @wraps(view_func)
    def wrapper(request, *args, **kwargs):
        try:
            return view_func(request, *args, **kwargs)
        except ErrorOlimpollo as e:
            if e.status_code >= 500:
                logger.exception("Error en %s %s", request.method, request.path)
            else:
                logger.info("%s %s -> %s: %s", request.method, request.path, e.status_code, e.mensaje)
            return respuesta_json({'error': e.mensaje}, status=e.status_code)
    return wrapper
