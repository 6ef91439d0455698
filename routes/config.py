"""
Configuración de la API CRUD (variables de entorno y recursos expuestos)
"""

import os
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


DEFAULT_DATABASE_NAME = "TiendadeRopa"
DEFAULT_PORT = 3001
DEFAULT_RESOURCES = "Categoria:categorias,Producto:productos"

# Configuración de respuestas
DEFAULT_RESPONSES = {
    400: {"description": "ID inválido o cuerpo mal formado"},
    404: {"description": "Recurso no encontrado"},
    500: {"description": "Error interno del servidor"}
}

# Tags para documentación
HEALTH_TAGS = ["health"]


class ResourceDefinition(BaseModel):
    """Par (etiqueta, colección) que define un recurso CRUD"""
    model_config = ConfigDict(frozen=True)

    label: str = Field(..., min_length=1, description="Nombre legible, ej. 'Producto'")
    collection: str = Field(..., min_length=1, description="Colección de MongoDB")
    prefix: Optional[str] = Field(default=None, description="Prefijo URL; por defecto '/<collection>'")

    @field_validator("prefix")
    @classmethod
    def normalize_prefix(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        value = "/" + value.strip().strip("/")
        if value == "/":
            raise ValueError("El prefijo no puede ser la raíz '/'")
        return value

    @property
    def url_prefix(self) -> str:
        return self.prefix or f"/{self.collection}"


class Settings(BaseModel):
    """Configuración del proceso"""
    database_name: str = DEFAULT_DATABASE_NAME
    host: str = "0.0.0.0"
    port: int = DEFAULT_PORT
    resources: List[ResourceDefinition] = Field(default_factory=lambda: parse_resources(DEFAULT_RESOURCES))
    cors_origins: List[str] = Field(default_factory=lambda: ["*"])
    log_dir: Optional[str] = None

    @field_validator("resources")
    @classmethod
    def unique_prefixes(cls, value: List[ResourceDefinition]) -> List[ResourceDefinition]:
        prefixes = [resource.url_prefix for resource in value]
        if len(set(prefixes)) != len(prefixes):
            raise ValueError(f"Prefijos de recursos duplicados: {prefixes}")
        return value


def parse_resources(raw: str) -> List[ResourceDefinition]:
    """
    Parsea 'Etiqueta:coleccion[:/prefijo]' separados por coma.

    >>> [r.collection for r in parse_resources("Categoria:categorias,Producto:productos")]
    ['categorias', 'productos']
    """
    resources = []
    for entry in raw.split(","):
        entry = entry.strip()
        if not entry:
            continue
        parts = [part.strip() for part in entry.split(":")]
        if len(parts) not in (2, 3) or not all(parts):
            raise ValueError(f"Recurso mal definido: '{entry}' (formato Etiqueta:coleccion[:/prefijo])")
        label, collection = parts[0], parts[1]
        prefix = parts[2] if len(parts) == 3 else None
        resources.append(ResourceDefinition(label=label, collection=collection, prefix=prefix))
    if not resources:
        raise ValueError("CRUD_RESOURCES no define ningún recurso")
    return resources


def load_settings() -> Settings:
    """Construye Settings desde variables de entorno"""
    cors = os.getenv("CORS_ORIGINS", "*").strip()
    return Settings(
        database_name=os.getenv("MONGODB_DATABASE", DEFAULT_DATABASE_NAME).strip(),
        host=os.getenv("HOST", "0.0.0.0").strip(),
        port=int(os.getenv("PORT", str(DEFAULT_PORT))),
        resources=parse_resources(os.getenv("CRUD_RESOURCES", DEFAULT_RESOURCES)),
        cors_origins=[origin.strip() for origin in cors.split(",") if origin.strip()],
        log_dir=os.getenv("LOG_DIR") or None,
    )
