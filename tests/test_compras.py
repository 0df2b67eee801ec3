"""
Tests for purchases: stock entry and weighted average cost.
"""

from decimal import Decimal
from unittest import mock

import pytest
from django.db import DatabaseError

from inventario.models import Compra, DetalleCompra, Insumo, MovimientoInventario
from inventario.services import registrar_compra
from olimpollo.exceptions import NotFoundError, TransactionFailure, ValidationError


class TestCostoPromedio:
    """Weighted average cost recomputation on each purchase line."""

    def test_weighted_average(self, crear_insumo):
        insumo = crear_insumo("Pollo", cantidad="10", costo="5")

        registrar_compra([{'insumo_id': insumo.id, 'cantidad': "5", 'costo_unitario': "8"}])

        insumo.refresh_from_db()
        assert insumo.cantidad == Decimal("15")
        assert insumo.costo_promedio == Decimal("6.0000")

    def test_successive_purchases(self, crear_insumo):
        insumo = crear_insumo("Queso", cantidad="3", costo="10")

        registrar_compra([{'insumo_id': insumo.id, 'cantidad': "3", 'costo_unitario': "11"}])
        registrar_compra([{'insumo_id': insumo.id, 'cantidad': "1", 'costo_unitario': "0"}])

        insumo.refresh_from_db()
        assert insumo.cantidad == Decimal("7")
        # (6 * 10.5 + 1 * 0) / 7
        assert insumo.costo_promedio == Decimal("9.0000")

    def test_empty_stock_takes_purchase_cost(self, crear_insumo):
        insumo = crear_insumo("Tortillas", cantidad="0", costo="0")

        registrar_compra([{'insumo_id': insumo.id, 'cantidad': "2.5", 'costo_unitario': "18.40"}])

        insumo.refresh_from_db()
        assert insumo.costo_promedio == Decimal("18.4000")

    def test_zero_resulting_stock_does_not_divide(self, crear_insumo):
        insumo = crear_insumo("Salsa", cantidad="-5", costo="3")

        registrar_compra([{'insumo_id': insumo.id, 'cantidad': "5", 'costo_unitario': "7"}])

        insumo.refresh_from_db()
        assert insumo.cantidad == Decimal("0")
        assert insumo.costo_promedio == Decimal("7.0000")

    def test_same_ingredient_twice_in_one_purchase(self, crear_insumo):
        insumo = crear_insumo("Pollo", cantidad="10", costo="5")

        registrar_compra([
            {'insumo_id': insumo.id, 'cantidad': "5", 'costo_unitario': "8"},
            {'insumo_id': insumo.id, 'cantidad': "5", 'costo_unitario': "8"},
        ])

        insumo.refresh_from_db()
        assert insumo.cantidad == Decimal("20")
        assert insumo.costo_promedio == Decimal("6.5000")


class TestRegistrarCompra:

    def test_records_header_lines_and_movements(self, pollo, papas):
        compra = registrar_compra(
            [
                {'insumo_id': pollo.id, 'cantidad': "4", 'costo_unitario': "6.25"},
                {'insumo_id': papas.id, 'cantidad': "1.5", 'costo_unitario': "22"},
            ],
            proveedor="Abarrotes Sonora",
        )

        assert compra.proveedor == "Abarrotes Sonora"
        assert compra.total_compra == Decimal("58.00")
        assert compra.detalles.count() == 2
        assert list(
            MovimientoInventario.objects.filter(compra=compra).values_list('tipo', flat=True)
        ) == [MovimientoInventario.TIPO_ENTRADA] * 2

    def test_default_supplier(self, pollo):
        compra = registrar_compra([{'insumo_id': pollo.id, 'cantidad': "1", 'costo_unitario': "5"}])

        assert compra.proveedor == "General"

    def test_explicit_total_is_kept(self, pollo):
        compra = registrar_compra(
            [{'insumo_id': pollo.id, 'cantidad': "1", 'costo_unitario': "5"}],
            total_compra="4.50",
        )

        assert compra.total_compra == Decimal("4.50")

    def test_missing_ingredient_rolls_back_everything(self, pollo):
        with pytest.raises(NotFoundError):
            registrar_compra([
                {'insumo_id': pollo.id, 'cantidad': "5", 'costo_unitario': "8"},
                {'insumo_id': 9999, 'cantidad': "1", 'costo_unitario': "1"},
            ])

        pollo.refresh_from_db()
        assert pollo.cantidad == Decimal("20")
        assert pollo.costo_promedio == Decimal("5")
        assert not Compra.objects.exists()
        assert not DetalleCompra.objects.exists()
        assert not MovimientoInventario.objects.exists()

    def test_database_failure_is_reported(self, pollo):
        with mock.patch.object(Insumo, 'registrar_entrada', side_effect=DatabaseError("deadlock")):
            with pytest.raises(TransactionFailure):
                registrar_compra([{'insumo_id': pollo.id, 'cantidad': "1", 'costo_unitario': "5"}])

        assert not Compra.objects.exists()

    @pytest.mark.parametrize("items", [
        [],
        [{'cantidad': "1", 'costo_unitario': "5"}],
        [{'insumo_id': 1, 'cantidad': "0", 'costo_unitario': "5"}],
        [{'insumo_id': 1, 'cantidad': "1", 'costo_unitario': "-5"}],
        [{'insumo_id': 1, 'cantidad': "uno", 'costo_unitario': "5"}],
        "x",
        ["x"],
        [{'insumo_id': "", 'cantidad': "1", 'costo_unitario': "5"}],
        [{'insumo_id': "uno", 'cantidad': "1", 'costo_unitario': "5"}],
        [{'insumo_id': "1.5", 'cantidad': "1", 'costo_unitario': "5"}],
    ])
    def test_rejects_invalid_items(self, db, items):
        with pytest.raises(ValidationError):
            registrar_compra(items)

    def test_ingredient_id_as_text(self, pollo):
        compra = registrar_compra([{'insumo_id': str(pollo.id), 'cantidad': "2", 'costo_unitario': "5"}])

        pollo.refresh_from_db()
        assert compra.detalles.get().insumo_id == pollo.id
        assert pollo.cantidad == Decimal("22")
