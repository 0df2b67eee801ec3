import re
import unicodedata

_MODIFICADORES = re.compile(r'\((.*)\)')


def extraer_modificadores(nombre_producto):
    """
    Lee los modificadores escritos entre paréntesis en el nombre mostrado,
    p. ej. "Boneless (BBQ, Extra Ranch)" -> ["BBQ", "Extra Ranch"].

    Sólo se usa para líneas antiguas que no guardan sus opciones explícitas.
    """
    if not nombre_producto:
        return []
    match = _MODIFICADORES.search(nombre_producto)
    if not match:
        return []
    return [m.strip() for m in match.group(1).split(',') if m.strip()]


def normalizar_texto(texto):
    """Minúsculas y sin acentos: 'Aplicación' -> 'aplicacion'."""
    descompuesto = unicodedata.normalize('NFKD', texto or '')
    return ''.join(c for c in descompuesto if not unicodedata.combining(c)).lower().strip()
