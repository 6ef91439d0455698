"""
Configuración de conexión a MongoDB para la API CRUD
"""

import os
from typing import Any, Callable, Optional
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorCollection, AsyncIOMotorDatabase
import logging

from routes.config import DEFAULT_DATABASE_NAME
from utils.exceptions import DatabaseUnavailable

logger = logging.getLogger(__name__)


def mask_connection_string(connection_string: str) -> str:
    """Oculta credenciales de la URL para poder loguearla"""
    scheme, sep, rest = connection_string.partition("://")
    if not sep or "@" not in rest:
        return connection_string
    return f"{scheme}://***@{rest.rsplit('@', 1)[1]}"


class MongoDBConnection:
    """
    Clase para manejar la conexión asíncrona a MongoDB.

    Se construye una vez por proceso y se inyecta en la aplicación; el
    handle de la base queda fijo desde connect() hasta close().
    """

    def __init__(
        self,
        database_name: str = DEFAULT_DATABASE_NAME,
        connection_string: Optional[str] = None,
        client_factory: Callable[..., Any] = AsyncIOMotorClient,
    ):
        self.database_name = database_name
        self._connection_string = connection_string
        self._client_factory = client_factory
        self._client: Optional[AsyncIOMotorClient] = None
        self._database: Optional[AsyncIOMotorDatabase] = None

    def get_connection_string(self) -> str:
        """Obtiene la cadena de conexión a MongoDB desde variables de entorno"""
        mongodb_url = (
            self._connection_string
            or os.getenv("MONGODB_URI", "")
            or os.getenv("MONGODB_URL", "")
        ).strip()

        if not mongodb_url:
            error_msg = "❌ MONGODB_URI no configurada. Debe establecerse como variable de entorno."
            logger.error(error_msg)
            raise ValueError(error_msg)

        # Validar que la URL tenga el formato correcto
        if not mongodb_url.startswith(("mongodb://", "mongodb+srv://")):
            logger.error(f"❌ URL de MongoDB inválida: {mask_connection_string(mongodb_url)}")
            raise ValueError("URL de MongoDB debe comenzar con 'mongodb://' o 'mongodb+srv://'")

        logger.info(f"🔗 URL de conexión MongoDB: {mask_connection_string(mongodb_url)}")
        return mongodb_url

    @property
    def is_connected(self) -> bool:
        return self._database is not None

    async def connect(self) -> AsyncIOMotorDatabase:
        """Establece la conexión y verifica el servidor con un ping"""
        if self._database is not None:
            return self._database

        client = self._client_factory(
            self.get_connection_string(),
            serverSelectionTimeoutMS=5000,  # 5 segundos máximo para seleccionar servidor
            connectTimeoutMS=5000,
            socketTimeoutMS=30000
        )
        try:
            await client.admin.command("ping")
        except Exception:
            client.close()
            raise

        self._client = client
        self._database = client[self.database_name]
        logger.info(f"Conectado a MongoDB, la base activa es: {self.database_name}")
        return self._database

    async def ping(self) -> bool:
        """Verifica que el servidor responde; requiere conexión previa"""
        if self._client is None:
            raise DatabaseUnavailable()
        await self._client.admin.command("ping")
        return True

    def get_collection(self, collection_name: str) -> AsyncIOMotorCollection:
        """Obtiene una colección específica"""
        if self._database is None:
            raise DatabaseUnavailable()
        return self._database[collection_name]

    def close(self):
        """Cierra la conexión"""
        if self._client:
            self._client.close()
            self._client = None
            self._database = None
            logger.info("Conexión a MongoDB cerrada")
