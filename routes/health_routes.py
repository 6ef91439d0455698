"""
Rutas de salud y monitoreo
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List

from fastapi import APIRouter

from database.mongodb_connection import MongoDBConnection
from routes.config import HEALTH_TAGS, ResourceDefinition

logger = logging.getLogger(__name__)

API_NAME = "API CRUD Tienda de Ropa"
API_VERSION = "1.0.0"


def create_health_router(connection: MongoDBConnection, resources: List[ResourceDefinition]) -> APIRouter:
    """Router de salud; nunca falla aunque MongoDB esté caído"""
    router = APIRouter(tags=HEALTH_TAGS)

    @router.get("/health")
    async def health_check() -> Dict[str, Any]:
        """Endpoint de salud de la API"""
        db_status = "unknown"
        db_error = None
        if connection.is_connected:
            try:
                await connection.ping()
                db_status = "healthy"
            except Exception as e:
                db_status = "unhealthy"
                db_error = str(e)
                logger.warning(f"Error de conexión a MongoDB (no crítico): {e}")

        response = {
            "status": "healthy",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "version": API_VERSION,
            "database": db_status,
        }
        if db_error:
            response["database_error"] = db_error
        return response

    @router.get("/")
    async def root() -> Dict[str, Any]:
        """Endpoint raíz con los recursos montados"""
        return {
            "message": API_NAME,
            "version": API_VERSION,
            "docs": "/docs",
            "health": "/health",
            "endpoints": [f"GET|POST|PUT|DELETE {resource.url_prefix}" for resource in resources],
        }

    return router
