from channels.db import database_sync_to_async
from channels.generic.websocket import AsyncWebsocketConsumer
import json

from inventario.alertas import GRUPO_INVENTARIO, insumo_a_dict, insumos_agotados


class InventarioConsumer(AsyncWebsocketConsumer):
    """Alertas de stock en vivo para cocina y caja."""

    async def connect(self):
        await self.channel_layer.group_add(
            GRUPO_INVENTARIO,
            self.channel_name
        )
        await self.accept()

        # Quien se conecta a media jornada recibe lo que ya está agotado
        pendientes = await self.agotados_actuales()
        if pendientes:
            await self.enviar_alerta({'pedido_id': None, 'insumos': pendientes})

    async def disconnect(self, close_code):
        await self.channel_layer.group_discard(
            GRUPO_INVENTARIO,
            self.channel_name
        )

    @database_sync_to_async
    def agotados_actuales(self):
        return [insumo_a_dict(insumo) for insumo in insumos_agotados()]

    async def alerta_stock(self, event):
        await self.enviar_alerta(event['message'])

    async def enviar_alerta(self, message):
        await self.send(text_data=json.dumps({
            'type': 'alerta_stock',
            'message': message
        }))
