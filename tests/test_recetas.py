"""
Tests for recipe updates: header fields and all-or-nothing replacement
of the ingredient lines.
"""

from decimal import Decimal
from unittest import mock

import pytest
from django.db import DatabaseError

from menu.models import ProductoMenu, RecetaInsumo
from menu.services import actualizar_receta
from olimpollo.exceptions import NotFoundError, TransactionFailure, ValidationError


def _lineas(receta):
    return [
        (ri.insumo_id, ri.cantidad_necesaria, ri.unidad_medida)
        for ri in receta.insumos.order_by('id')
    ]


class TestActualizarReceta:

    def test_replaces_all_lines(self, receta_boneless, pollo, papas, salsa_bbq):
        receta = actualizar_receta(
            receta_boneless.id,
            nombre="Boneless con papas",
            ingredientes=[
                {'insumo_id': papas.id, 'cantidad_necesaria': "0.250", 'unidad_medida': "kg"},
                {'insumo_id': salsa_bbq.id, 'cantidad_necesaria': "0.03", 'unidad_medida': "litro"},
            ],
            descripcion="Con guarnición",
            pasos="Freír y bañar",
        )

        receta.refresh_from_db()
        assert receta.nombre == "Boneless con papas"
        assert receta.descripcion == "Con guarnición"
        assert _lineas(receta) == [
            (papas.id, Decimal("0.250"), "kg"),
            (salsa_bbq.id, Decimal("0.030"), "litro"),
        ]

    def test_empty_list_clears_lines(self, receta_boneless):
        actualizar_receta(receta_boneless.id, nombre="Boneless", ingredientes=[])

        assert not RecetaInsumo.objects.filter(receta=receta_boneless).exists()

    def test_unknown_ingredient_keeps_previous_lines(self, receta_boneless, pollo, papas):
        antes = _lineas(receta_boneless)

        with pytest.raises(NotFoundError):
            actualizar_receta(
                receta_boneless.id,
                nombre="Cambiada",
                ingredientes=[
                    {'insumo_id': papas.id, 'cantidad_necesaria': "1"},
                    {'insumo_id': 9999, 'cantidad_necesaria': "1"},
                ],
            )

        receta_boneless.refresh_from_db()
        assert receta_boneless.nombre == "Boneless"
        assert _lineas(receta_boneless) == antes

    def test_database_failure_keeps_previous_lines(self, receta_boneless, papas):
        antes = _lineas(receta_boneless)

        with mock.patch.object(RecetaInsumo.objects, 'bulk_create', side_effect=DatabaseError("timeout")):
            with pytest.raises(TransactionFailure):
                actualizar_receta(
                    receta_boneless.id,
                    nombre="Cambiada",
                    ingredientes=[{'insumo_id': papas.id, 'cantidad_necesaria': "1"}],
                )

        receta_boneless.refresh_from_db()
        assert receta_boneless.nombre == "Boneless"
        assert _lineas(receta_boneless) == antes

    def test_binds_recipe_to_sale_product(self, receta_boneless, boneless, refresco, pollo):
        actualizar_receta(
            receta_boneless.id,
            nombre="Boneless",
            ingredientes=[{'insumo_id': pollo.id, 'cantidad_necesaria': "2"}],
            producto_venta_id=refresco.id,
        )

        boneless.refresh_from_db()
        refresco.refresh_from_db()
        assert refresco.receta_id == receta_boneless.id
        assert boneless.receta_id is None

    def test_default_unit(self, receta_boneless, pollo):
        receta = actualizar_receta(
            receta_boneless.id,
            nombre="Boneless",
            ingredientes=[{'insumo_id': pollo.id, 'cantidad_necesaria': "3"}],
        )

        assert _lineas(receta) == [(pollo.id, Decimal("3.000"), "unidad")]

    @pytest.mark.parametrize("nombre, ingredientes", [
        ("", []),
        ("Boneless", None),
    ])
    def test_missing_data(self, receta_boneless, nombre, ingredientes):
        with pytest.raises(ValidationError):
            actualizar_receta(receta_boneless.id, nombre=nombre, ingredientes=ingredientes)

    @pytest.mark.parametrize("cantidad", ["0", "-1", "mucho"])
    def test_invalid_quantity(self, receta_boneless, pollo, cantidad):
        with pytest.raises(ValidationError):
            actualizar_receta(
                receta_boneless.id,
                nombre="Boneless",
                ingredientes=[{'insumo_id': pollo.id, 'cantidad_necesaria': cantidad}],
            )

    def test_unknown_recipe(self, pollo):
        with pytest.raises(NotFoundError):
            actualizar_receta(404, nombre="X", ingredientes=[])

    def test_unknown_product_keeps_binding(self, receta_boneless, boneless):
        with pytest.raises(NotFoundError):
            actualizar_receta(receta_boneless.id, nombre="X", ingredientes=[], producto_venta_id=404)

        assert ProductoMenu.objects.get(pk=boneless.pk).receta_id == receta_boneless.id

    def test_ingredient_without_id_is_rejected(self, receta_boneless, papas):
        antes = _lineas(receta_boneless)

        with pytest.raises(ValidationError) as excinfo:
            actualizar_receta(
                receta_boneless.id,
                nombre="Boneless",
                ingredientes=[
                    {'insumo_id': papas.id, 'cantidad_necesaria': "1"},
                    {'cantidad_necesaria': "1"},
                ],
            )

        assert excinfo.value.status_code == 400
        assert _lineas(receta_boneless) == antes

    @pytest.mark.parametrize("ingredientes", ["x", ["x"], [1], {'insumo_id': 1}])
    def test_ingredients_must_be_a_list_of_objects(self, receta_boneless, ingredientes):
        with pytest.raises(ValidationError):
            actualizar_receta(receta_boneless.id, nombre="Boneless", ingredientes=ingredientes)

    @pytest.mark.parametrize("cambios", [
        {'nombre': ["Boneless"]},
        {'producto_venta_id': "uno"},
        {'producto_venta_id': 1.5},
    ])
    def test_rejects_badly_typed_header(self, receta_boneless, cambios):
        kwargs = {'nombre': "Boneless", 'ingredientes': [], **cambios}

        with pytest.raises(ValidationError):
            actualizar_receta(receta_boneless.id, **kwargs)

    def test_ids_as_text(self, receta_boneless, refresco, papas):
        receta = actualizar_receta(
            receta_boneless.id,
            nombre="Boneless",
            ingredientes=[{'insumo_id': str(papas.id), 'cantidad_necesaria': "0.5"}],
            producto_venta_id=str(refresco.id),
        )

        refresco.refresh_from_db()
        assert _lineas(receta) == [(papas.id, Decimal("0.500"), "unidad")]
        assert refresco.receta_id == receta_boneless.id
