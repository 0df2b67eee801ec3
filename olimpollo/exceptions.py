"""
Errores del dominio con su código HTTP equivalente.

Los servicios lanzan estas excepciones; ``olimpollo.decorators.api_view``
las convierte en respuestas JSON.
"""


class ErrorOlimpollo(Exception):
    status_code = 500

    def __init__(self, mensaje):
        super().__init__(mensaje)
        self.mensaje = mensaje


class ValidationError(ErrorOlimpollo):
    """Datos incompletos o mal formados (400)."""
    status_code = 400


class NotFoundError(ErrorOlimpollo):
    """La entidad solicitada no existe (404)."""
    status_code = 404

    def __init__(self, entidad, entidad_id=None):
        if entidad_id is not None:
            mensaje = f"{entidad} con ID {entidad_id} no encontrado"
        else:
            mensaje = f"{entidad} no encontrado"
        super().__init__(mensaje)
        self.entidad = entidad
        self.entidad_id = entidad_id


class ConflictError(ErrorOlimpollo):
    """Operación bloqueada por integridad referencial o inmutabilidad (409)."""
    status_code = 409


class TransactionFailure(ErrorOlimpollo):
    """Error de base de datos dentro de una transacción; ya se hizo rollback."""
    status_code = 500
