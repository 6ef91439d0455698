"""
Fábrica de rutas CRUD reutilizable: un router por recurso/colección
"""

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List

from bson import ObjectId
from bson.errors import BSONError
from fastapi import APIRouter, Body, Depends, status
from fastapi.encoders import jsonable_encoder
from motor.motor_asyncio import AsyncIOMotorCollection
from pymongo.errors import PyMongoError

from database.mongodb_connection import MongoDBConnection
from models.response_models import (
    CreateResponse,
    DeleteResponse,
    ErrorResponse,
    ListResponse,
    NotFoundResponse,
    UpdateResponse,
)
from routes.config import DEFAULT_RESPONSES, ResourceDefinition
from routes.dependencies import use_collection, validate_object_id
from utils.exceptions import ResourceNotFound, StorageOperationFailed

logger = logging.getLogger(__name__)


def serialize_documents(documents: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Convierte ObjectId y fechas a tipos JSON"""
    return jsonable_encoder(documents, custom_encoder={ObjectId: str})


@contextmanager
def storage_errors(label: str, operation: str) -> Iterator[None]:
    """Traduce errores del driver a StorageOperationFailed"""
    try:
        yield
    except (PyMongoError, BSONError) as e:
        logger.error(f"Error de MongoDB en {operation} de {label}: {e}")
        raise StorageOperationFailed(str(e)) from e


def create_crud_router(resource: ResourceDefinition, connection: MongoDBConnection) -> APIRouter:
    """
    Construye el router CRUD de un recurso.

    Expone listar, crear, actualizar (merge parcial con $set) y eliminar
    sobre la colección del recurso. Los errores no se manejan aquí: se
    propagan al manejador global.
    """
    label = resource.label
    router = APIRouter(
        prefix=resource.url_prefix,
        tags=[resource.collection],
        responses={500: {"model": ErrorResponse, **DEFAULT_RESPONSES[500]}},
    )
    get_collection = use_collection(resource.collection, connection)
    id_responses = {
        400: {"model": ErrorResponse, **DEFAULT_RESPONSES[400]},
        404: {"model": NotFoundResponse, **DEFAULT_RESPONSES[404]},
    }

    @router.get("", response_model=ListResponse, summary=f"Listar {resource.collection}")
    async def list_documents(
        collection: AsyncIOMotorCollection = Depends(get_collection),
    ) -> ListResponse:
        with storage_errors(label, "listado"):
            documents = await collection.find({}).to_list(length=None)
        return ListResponse(recurso=label, total=len(documents), data=serialize_documents(documents))

    @router.post(
        "",
        response_model=CreateResponse,
        status_code=status.HTTP_201_CREATED,
        responses={400: id_responses[400]},
        summary=f"Crear {label}",
    )
    async def create_document(
        document: Dict[str, Any] = Body(...),
        collection: AsyncIOMotorCollection = Depends(get_collection),
    ) -> CreateResponse:
        with storage_errors(label, "creación"):
            result = await collection.insert_one(document)
        logger.info(f"{label} creado: {result.inserted_id}")
        return CreateResponse(message=f"{label} creado", inserted_id=str(result.inserted_id))

    @router.put("/{id}", response_model=UpdateResponse, responses=id_responses, summary=f"Actualizar {label}")
    async def update_document(
        document_id: ObjectId = Depends(validate_object_id),
        changes: Dict[str, Any] = Body(...),
        collection: AsyncIOMotorCollection = Depends(get_collection),
    ) -> UpdateResponse:
        with storage_errors(label, "actualización"):
            result = await collection.update_one({"_id": document_id}, {"$set": changes})

        if result.matched_count == 0:
            raise ResourceNotFound(f"{label} no encontrado")

        logger.info(f"{label} actualizado: {document_id} (modificados={result.modified_count})")
        return UpdateResponse(message=f"{label} actualizado", modified_count=result.modified_count)

    @router.delete("/{id}", response_model=DeleteResponse, responses=id_responses, summary=f"Eliminar {label}")
    async def delete_document(
        document_id: ObjectId = Depends(validate_object_id),
        collection: AsyncIOMotorCollection = Depends(get_collection),
    ) -> DeleteResponse:
        with storage_errors(label, "eliminación"):
            result = await collection.delete_one({"_id": document_id})

        if result.deleted_count == 0:
            raise ResourceNotFound(f"{label} no encontrado")

        logger.info(f"{label} eliminado: {document_id}")
        return DeleteResponse(message=f"{label} eliminado", deleted_count=result.deleted_count)

    return router
