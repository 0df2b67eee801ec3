"""
Pytest configuration and fixtures for the ledger tests.

Every fixture builds rows through the ORM on the pytest-django test
database (SQLite, tables created without migrations).
"""

from decimal import Decimal

import pytest
from django.test import Client
from django.utils import timezone

from inventario.models import Insumo
from menu.models import OpcionMenu, ProductoMenu, Receta, RecetaInsumo
from pedidos.models import MetodoPago, Pedido


@pytest.fixture
def api():
    """Django test client for the JSON endpoints."""
    return Client()


@pytest.fixture
def crear_insumo(db):
    def _crear(nombre="Insumo", cantidad="10", stock_minimo="2", costo="0", **extra):
        return Insumo.objects.create(
            nombre=nombre,
            cantidad=Decimal(cantidad),
            stock_minimo=Decimal(stock_minimo),
            costo_promedio=Decimal(costo),
            **extra,
        )
    return _crear


@pytest.fixture
def pollo(crear_insumo):
    return crear_insumo("Pollo", cantidad="20", stock_minimo="5", costo="5", unidad="pieza")


@pytest.fixture
def salsa_bbq(crear_insumo):
    return crear_insumo("Salsa BBQ", cantidad="2", stock_minimo="0.5", unidad="litro")


@pytest.fixture
def papas(crear_insumo):
    return crear_insumo("Papas", cantidad="8", stock_minimo="1", unidad="kg")


@pytest.fixture
def receta_boneless(pollo):
    """Recipe consuming 2 units of Pollo per portion."""
    receta = Receta.objects.create(nombre="Boneless", descripcion="Boneless de pollo")
    RecetaInsumo.objects.create(
        receta=receta, insumo=pollo, cantidad_necesaria=Decimal("2"), unidad_medida="pieza"
    )
    return receta


@pytest.fixture
def boneless(receta_boneless):
    return ProductoMenu.objects.create(
        nombre_venta="Boneless",
        precio_base=Decimal("120.00"),
        categoria="Pollo",
        receta=receta_boneless,
        grupos_modificadores="Salsa",
    )


@pytest.fixture
def refresco(db):
    """Product without a recipe."""
    return ProductoMenu.objects.create(
        nombre_venta="Refresco", precio_base=Decimal("25.00"), categoria="Bebidas"
    )


@pytest.fixture
def opcion_bbq(salsa_bbq):
    return OpcionMenu.objects.create(
        nombre_opcion="Salsa",
        valor="BBQ",
        insumo=salsa_bbq,
        cantidad_insumo=Decimal("0.050"),
        unidad_insumo="litro",
    )


@pytest.fixture
def opcion_ranch(db):
    """Cosmetic modifier with no ingredient bound."""
    return OpcionMenu.objects.create(nombre_opcion="Salsa", valor="Ranch")


@pytest.fixture
def crear_pedido_directo(db):
    """Inserts an order row directly, bypassing the ledger service."""
    def _crear(total="100.00", metodo_pago=MetodoPago.EFECTIVO,
               estado=Pedido.ESTADO_ENTREGADO, fecha_creacion=None, **extra):
        return Pedido.objects.create(
            cliente=extra.pop('cliente', "Cliente"),
            total=Decimal(total),
            metodo_pago=metodo_pago,
            estado=estado,
            fecha_creacion=fecha_creacion or timezone.now(),
            **extra,
        )
    return _crear
