"""
Dependencias compartidas por las rutas CRUD
"""

import logging
from typing import Callable

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorCollection

from database.mongodb_connection import MongoDBConnection
from utils.exceptions import InvalidIdentifier

logger = logging.getLogger(__name__)


def use_collection(
    collection_name: str, connection: MongoDBConnection
) -> Callable[[], AsyncIOMotorCollection]:
    """
    Crea una dependencia que entrega la colección del recurso.

    Si la conexión aún no está establecida, get_collection lanza
    DatabaseUnavailable y la request termina en el manejador global.
    """

    def dependency() -> AsyncIOMotorCollection:
        return connection.get_collection(collection_name)

    dependency.__name__ = f"use_collection_{collection_name}"
    return dependency


def validate_object_id(id: str) -> ObjectId:
    """Valida el parámetro de ruta `id` antes de tocar la base"""
    if not ObjectId.is_valid(id):
        logger.warning(f"ID inválido recibido: {id!r}")
        raise InvalidIdentifier()
    return ObjectId(id)
