from django.db import models
from django.db import transaction


class Receta(models.Model):
    nombre = models.CharField(max_length=100)
    descripcion = models.TextField(blank=True)
    pasos = models.TextField(blank=True)

    class Meta:
        ordering = ['nombre']

    def __str__(self):
        return self.nombre

    @transaction.atomic
    def reemplazar_insumos(self, ingredientes, producto=None):
        """
        Sustituye todas las líneas de la receta. Las anteriores se borran antes
        de insertar las nuevas, dentro de la misma transacción.

        ``ingredientes`` es una lista de (insumo_id, cantidad_necesaria, unidad).
        Si se indica ``producto`` la receta queda ligada sólo a ese producto.
        """
        self.insumos.all().delete()
        RecetaInsumo.objects.bulk_create([
            RecetaInsumo(
                receta=self,
                insumo_id=insumo_id,
                cantidad_necesaria=cantidad,
                unidad_medida=unidad or "unidad",
            )
            for insumo_id, cantidad, unidad in ingredientes
        ])

        ProductoMenu.objects.filter(receta=self).update(receta=None)
        if producto is not None:
            producto.receta = self
            producto.save(update_fields=['receta'])


class RecetaInsumo(models.Model):
    receta = models.ForeignKey(Receta, on_delete=models.CASCADE, related_name="insumos")
    # PROTECT: un insumo usado en una receta no se puede borrar
    insumo = models.ForeignKey('inventario.Insumo', on_delete=models.PROTECT, related_name="recetas")
    cantidad_necesaria = models.DecimalField(max_digits=10, decimal_places=3)
    unidad_medida = models.CharField(max_length=20, default="unidad")

    class Meta:
        ordering = ['id']

    def __str__(self):
        return f"{self.cantidad_necesaria} {self.unidad_medida} de {self.insumo.nombre} para {self.receta.nombre}"


class ProductoMenu(models.Model):
    nombre_venta = models.CharField(max_length=100)
    precio_base = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    categoria = models.CharField(max_length=50, blank=True)
    descripcion = models.TextField(blank=True)
    receta = models.OneToOneField(
        Receta, on_delete=models.SET_NULL,
        null=True, blank=True, related_name="producto"
    )
    # Grupos de opciones separados por coma, p. ej. "Salsa,Bebida"
    grupos_modificadores = models.CharField(max_length=255, blank=True)

    class Meta:
        ordering = ['categoria', 'nombre_venta']

    def __str__(self):
        return self.nombre_venta

    def grupos(self):
        return [g.strip() for g in self.grupos_modificadores.split(',') if g.strip()]


class OpcionMenuQuerySet(models.QuerySet):
    def por_valor(self, valor):
        """Primera opción cuyo valor coincide sin distinguir mayúsculas."""
        return self.filter(valor__iexact=valor.strip()).order_by('id').first()


class OpcionMenu(models.Model):
    nombre_opcion = models.CharField(max_length=50, default="Salsa")
    valor = models.CharField(max_length=100)
    precio_adicional = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    insumo = models.ForeignKey(
        'inventario.Insumo', on_delete=models.PROTECT,
        null=True, blank=True, related_name="opciones"
    )
    cantidad_insumo = models.DecimalField(max_digits=10, decimal_places=3, null=True, blank=True)
    unidad_insumo = models.CharField(max_length=20, blank=True)

    objects = OpcionMenuQuerySet.as_manager()

    class Meta:
        ordering = ['nombre_opcion', 'valor']

    def __str__(self):
        return f"{self.nombre_opcion}: {self.valor}"

    @property
    def consume_insumo(self):
        return self.insumo_id is not None and bool(self.cantidad_insumo)
