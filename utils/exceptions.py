"""
Excepciones de la API CRUD.

Las rutas no las capturan: el manejador global de errores
(utils.error_handlers) las traduce al sobre JSON y al código HTTP.
No dependen de FastAPI.
"""

from typing import Any, Dict, Optional


class ApiError(Exception):
    """Base para errores que conocen su código HTTP."""

    status_code: int = 500
    envelope_key: str = "error"

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(message)

    def to_envelope(self) -> Dict[str, Any]:
        return {"success": False, self.envelope_key: self.message}


class InvalidIdentifier(ApiError):
    """El id de la ruta no es un ObjectId válido."""

    status_code = 400

    def __init__(self, message: str = "ID inválido") -> None:
        super().__init__(message)


class ResourceNotFound(ApiError):
    """Ningún documento coincidió con el id (update/delete)."""

    status_code = 404
    envelope_key = "message"


class DatabaseUnavailable(ApiError):
    """La conexión a MongoDB no está establecida."""

    status_code = 500

    def __init__(self, message: str = "La base de datos no está inicializada") -> None:
        super().__init__(message)


class StorageOperationFailed(ApiError):
    """Error del driver de MongoDB durante una operación."""

    status_code = 500
