import logging
from datetime import timedelta
from decimal import Decimal
from functools import partial

from django.conf import settings
from django.db import DatabaseError, transaction
from django.db.models import F
from django.utils import timezone
from django.utils.dateparse import parse_date

from inventario.alertas import notificar_agotados
from menu.models import OpcionMenu, ProductoMenu
from olimpollo.decorators import a_decimal, a_entero, leer_lista
from olimpollo.exceptions import NotFoundError, TransactionFailure, ValidationError
from pedidos.models import Cliente, DetallePedido, MetodoPago, OpcionDetalle, Pedido

logger = logging.getLogger(__name__)

CENTAVOS = Decimal('0.01')


def _leer_metodo_pago(metodo_pago):
    if not metodo_pago:
        return MetodoPago.EFECTIVO
    if not isinstance(metodo_pago, str):
        raise ValidationError(f"Método de pago inválido: {metodo_pago}")
    try:
        return MetodoPago.desde_texto(metodo_pago)
    except ValueError as e:
        raise ValidationError(str(e))


def _leer_texto(valor, campo):
    if valor is None:
        return ''
    if not isinstance(valor, str):
        raise ValidationError(f"'{campo}' debe ser texto")
    return valor.strip()


def _leer_items(items):
    lineas = []
    for item in leer_lista(items, 'items'):
        cantidad = a_entero(item.get('cantidad'), 'cantidad')
        if cantidad <= 0:
            raise ValidationError(f"Cantidad inválida: {cantidad}")

        precio_unitario = a_decimal(item.get('precio_unitario'), 'precio_unitario')
        if precio_unitario < 0:
            raise ValidationError(f"Precio inválido: {precio_unitario}")

        producto_id = item.get('menu_producto_id')
        if producto_id is not None and producto_id != '':
            producto_id = a_entero(producto_id, 'menu_producto_id')
        else:
            producto_id = None

        opciones = item.get('opciones') or []
        if not isinstance(opciones, list):
            raise ValidationError("'opciones' debe ser una lista de ids")

        lineas.append({
            'menu_producto_id': producto_id,
            'nombre_producto': (
                _leer_texto(item.get('nombre_producto_completo'), 'nombre_producto_completo')
                or _leer_texto(item.get('nombre_producto'), 'nombre_producto')
            ),
            'cantidad': cantidad,
            'precio_unitario': precio_unitario,
            'notas': _leer_texto(item.get('notas'), 'notas'),
            'opciones': [a_entero(o, 'opciones') for o in opciones],
        })
    return lineas


def _resolver_referencias(lineas):
    """Comprueba que existan los productos y opciones referenciados."""
    producto_ids = {l['menu_producto_id'] for l in lineas if l['menu_producto_id']}
    productos = ProductoMenu.objects.in_bulk(producto_ids)
    opcion_ids = {o for l in lineas for o in l['opciones']}
    opciones = OpcionMenu.objects.in_bulk(opcion_ids)

    for linea in lineas:
        producto = None
        if linea['menu_producto_id']:
            producto = productos.get(linea['menu_producto_id'])
            if producto is None:
                raise NotFoundError("Producto", linea['menu_producto_id'])
        linea['menu_producto'] = producto

        if not linea['nombre_producto']:
            if producto is None:
                raise ValidationError("Cada producto requiere nombre o 'menu_producto_id'")
            linea['nombre_producto'] = producto.nombre_venta

        seleccion = []
        for opcion_id in linea['opciones']:
            if opcion_id not in opciones:
                raise NotFoundError("Opción", opcion_id)
            seleccion.append(opciones[opcion_id])
        linea['opciones'] = seleccion


def _registrar_visita(telefono, nombre, total, ahora):
    actualizados = Cliente.objects.filter(telefono=telefono).update(
        visitas=F('visitas') + 1,
        total_gastado=F('total_gastado') + total,
        ultima_visita=ahora,
        nombre=nombre,
    )
    if not actualizados:
        Cliente.objects.create(
            telefono=telefono,
            nombre=nombre,
            visitas=1,
            total_gastado=total,
            puntos=1,
            ultima_visita=ahora,
        )


def crear_pedido(cliente, items, telefono=None, canal_venta=None, metodo_pago=None, total_ajustado=None):
    """
    Crea un pedido pendiente con sus líneas y calcula la comisión del método
    de pago. Si hay teléfono se registra la visita del cliente en la misma
    transacción.
    """
    cliente = _leer_texto(cliente, 'cliente')
    if not cliente or not items:
        raise ValidationError("Datos incompletos")

    metodo = _leer_metodo_pago(metodo_pago)
    lineas = _leer_items(items)
    _resolver_referencias(lineas)

    total_calculado = sum(l['cantidad'] * l['precio_unitario'] for l in lineas)
    total = a_decimal(total_ajustado, 'total_ajustado', default=total_calculado).quantize(CENTAVOS)
    if total < 0:
        raise ValidationError("El total no puede ser negativo")
    comision = Pedido.calcular_comision(total, metodo)
    telefono = _leer_texto(telefono, 'telefono')
    canal_venta = _leer_texto(canal_venta, 'canal_venta') or Pedido.CANAL_DEFAULT

    try:
        with transaction.atomic():
            ahora = timezone.now()
            if telefono:
                _registrar_visita(telefono, cliente, total, ahora)

            pedido = Pedido.objects.create(
                cliente=cliente,
                telefono=telefono,
                canal_venta=canal_venta,
                metodo_pago=metodo,
                estado=Pedido.ESTADO_PENDIENTE,
                total=total,
                comision=comision,
                fecha_creacion=ahora,
            )

            for linea in lineas:
                detalle = DetallePedido.objects.create(
                    pedido=pedido,
                    menu_producto=linea['menu_producto'],
                    nombre_producto=linea['nombre_producto'],
                    cantidad=linea['cantidad'],
                    precio_unitario=linea['precio_unitario'],
                    notas=linea['notas'],
                )
                OpcionDetalle.objects.bulk_create([
                    OpcionDetalle(detalle=detalle, opcion=opcion, orden=orden)
                    for orden, opcion in enumerate(linea['opciones'])
                ])
    except DatabaseError as exc:
        raise TransactionFailure(f"No se pudo guardar el pedido: {exc}") from exc

    logger.info(
        "Pedido #%s creado: %s, %s %s, comisión %s",
        pedido.id, cliente, total, metodo.value, comision,
    )
    return pedido


def expirar_pendientes():
    """
    Da por entregados los pedidos pendientes más viejos que el límite
    configurado. No descuenta inventario: quedan marcados con
    ``expirado=True`` e ``inventario_descontado=False`` para poder
    entregarlos explícitamente después.
    """
    limite = timezone.now() - timedelta(minutes=settings.PEDIDO_EXPIRACION_MINUTOS)
    expirados = Pedido.objects.filter(
        estado=Pedido.ESTADO_PENDIENTE,
        fecha_creacion__lt=limite,
    ).update(estado=Pedido.ESTADO_ENTREGADO, expirado=True)
    if expirados:
        logger.warning("%s pedidos pendientes marcados como entregados por antigüedad", expirados)
    return expirados


def _leer_fecha(valor, campo):
    if not valor:
        return None
    try:
        fecha = parse_date(valor)
    except ValueError:
        fecha = None
    if fecha is None:
        raise ValidationError(f"Fecha inválida en '{campo}': {valor}")
    return fecha


def listar_pedidos(canal=None, estado=None, fecha_inicio=None, fecha_fin=None):
    """Pedidos con sus líneas, del más reciente al más antiguo."""
    inicio = _leer_fecha(fecha_inicio, 'fechaInicio')
    fin = _leer_fecha(fecha_fin, 'fechaFin')

    expirar_pendientes()

    qs = Pedido.objects.prefetch_related('detalles')
    if canal and canal != 'Todos':
        qs = qs.filter(canal_venta=canal)
    if estado:
        qs = qs.filter(estado=estado)
    # __date convierte a la zona horaria local (settings.TIME_ZONE)
    if inicio:
        qs = qs.filter(fecha_creacion__date__gte=inicio)
    if fin:
        qs = qs.filter(fecha_creacion__date__lte=fin)
    return qs.order_by('-fecha_creacion', '-id')


def cambiar_estado(pedido_id, estado):
    """
    Cambia el estado de un pedido. Entregarlo descuenta los insumos en la
    misma transacción; si algo falla el pedido queda como estaba.
    """
    estados_validos = [e[0] for e in Pedido.ESTADOS_PEDIDO]
    if estado not in estados_validos:
        raise ValidationError(f"Estado inválido: {estado}")

    try:
        with transaction.atomic():
            pedido = Pedido.objects.select_for_update().filter(pk=pedido_id).first()
            if pedido is None:
                raise NotFoundError("Pedido", pedido_id)
            descontados = pedido.cambiar_estado(estado)
            if descontados:
                transaction.on_commit(partial(notificar_agotados, descontados, pedido.id))
    except DatabaseError as exc:
        raise TransactionFailure(f"No se pudo actualizar el pedido #{pedido_id}: {exc}") from exc

    logger.info("Pedido #%s actualizado a %s", pedido.id, pedido.estado)
    return pedido


def eliminar_pedido(pedido_id):
    borrados, _ = Pedido.objects.filter(pk=pedido_id).delete()
    if not borrados:
        raise NotFoundError("Pedido", pedido_id)
    logger.info("Pedido #%s eliminado", pedido_id)


def buscar_cliente(telefono):
    cliente = Cliente.objects.filter(telefono=telefono).first()
    if cliente is None:
        raise NotFoundError("Cliente", telefono)
    return cliente
