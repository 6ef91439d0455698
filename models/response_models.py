"""
Modelos de respuesta (sobres JSON) de la API CRUD
"""

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field


class EnvelopeBase(BaseModel):
    """Todas las respuestas llevan 'success'"""
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True


class ListResponse(EnvelopeBase):
    """Respuesta de listado de una colección"""
    recurso: str = Field(..., description="Etiqueta del recurso")
    total: int = Field(..., ge=0)
    data: List[Dict[str, Any]] = Field(default_factory=list)


class CreateResponse(EnvelopeBase):
    message: str
    inserted_id: str = Field(..., alias="insertedId")


class UpdateResponse(EnvelopeBase):
    message: str
    modified_count: int = Field(..., alias="modifiedCount")


class DeleteResponse(EnvelopeBase):
    message: str
    deleted_count: int = Field(..., alias="deletedCount")


class NotFoundResponse(BaseModel):
    success: bool = False
    message: str


class ErrorResponse(BaseModel):
    success: bool = False
    error: Optional[str] = None
