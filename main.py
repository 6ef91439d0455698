"""
API CRUD Tienda de Ropa - FastAPI
Fachada REST genérica sobre MongoDB (categorias, productos)

Modos de ejecución:
- Local / contenedor: python main.py (uvicorn con manejo de señales propio)
- uvicorn main:app (la app del módulo se construye con variables de entorno)
"""

import os
import signal
import sys
import logging
from contextlib import asynccontextmanager
from enum import Enum
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from dotenv import load_dotenv

# Cargar variables de entorno desde .env solo si existe (para desarrollo local)
ENV_FILE_FOUND = os.path.exists(".env")
if ENV_FILE_FOUND:
    load_dotenv()

from routes.config import DEFAULT_RESOURCES, Settings, load_settings, parse_resources
from utils.logging_utils import configure_logging, current_request_id, request_logging_context, resource_from_path

# Configurar logging antes de importar el resto de módulos
configure_logging(
    os.getenv("LOG_DIR") or None,
    collections=[resource.collection for resource in parse_resources(os.getenv("CRUD_RESOURCES", DEFAULT_RESOURCES))],
)

logger = logging.getLogger(__name__)

from database.mongodb_connection import MongoDBConnection
from routes.crud_routes import create_crud_router
from routes.health_routes import API_NAME, API_VERSION, create_health_router
from utils.error_handlers import register_error_handlers


class LifecycleState(str, Enum):
    """Estados del proceso"""
    STARTING = "STARTING"
    READY = "READY"
    SHUTTING_DOWN = "SHUTTING_DOWN"
    STOPPED = "STOPPED"
    FAILED = "FAILED"


class AppLifecycle:
    """Estado del ciclo de vida y código de salida del proceso"""

    def __init__(self):
        self.state: Optional[LifecycleState] = None
        self.signal_name: Optional[str] = None
        self.exit_code = 1

    def transition(self, state: LifecycleState) -> None:
        logger.info(f"Ciclo de vida: {self.state.value if self.state else '-'} -> {state.value}")
        self.state = state


def build_lifespan(connection: MongoDBConnection, lifecycle: AppLifecycle, settings: Settings):
    """Conecta a MongoDB al iniciar y cierra la conexión al terminar"""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        lifecycle.transition(LifecycleState.STARTING)
        try:
            await connection.connect()
        except Exception as e:
            # Sin reintentos: el operador debe reiniciar el proceso
            logger.error(f"❌ No se pudo iniciar el servidor: {e}")
            lifecycle.exit_code = 1
            lifecycle.transition(LifecycleState.FAILED)
            raise

        lifecycle.transition(LifecycleState.READY)
        logger.info(f"🚀 Servidor CRUD corriendo en http://{settings.host}:{settings.port}")
        logger.info("📍 Endpoints disponibles:")
        for resource in settings.resources:
            logger.info(f"   GET|POST|PUT|DELETE {resource.url_prefix}")

        try:
            yield
        finally:
            lifecycle.transition(LifecycleState.SHUTTING_DOWN)
            try:
                connection.close()
                logger.info(f"Conexión cerrada por señal {lifecycle.signal_name or 'desconocida'}")
                lifecycle.exit_code = 0
            except Exception as e:
                logger.error(f"Error cerrando MongoDB: {e}")
                lifecycle.exit_code = 1
            lifecycle.transition(LifecycleState.STOPPED)

    return lifespan


def create_app(settings: Optional[Settings] = None, connection: Optional[MongoDBConnection] = None) -> FastAPI:
    """Ensambla la aplicación: un router CRUD por recurso y el manejador global al final"""
    settings = settings or load_settings()
    connection = connection or MongoDBConnection(settings.database_name)
    lifecycle = AppLifecycle()

    app = FastAPI(
        title=API_NAME,
        description="CRUD genérico sobre MongoDB para categorias y productos",
        version=API_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=build_lifespan(connection, lifecycle, settings),
    )
    app.state.settings = settings
    app.state.connection = connection
    app.state.lifecycle = lifecycle

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials="*" not in settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    collections_by_prefix = {resource.url_prefix: resource.collection for resource in settings.resources}

    @app.middleware("http")
    async def request_context_middleware(request: Request, call_next):
        """Asocia los logs de la request con su recurso y un id de request"""
        with request_logging_context(
            resource=resource_from_path(request.url.path, collections_by_prefix),
            method=request.method,
            request_id=request.headers.get("x-request-id"),
        ):
            response = await call_next(request)
            response.headers["X-Request-ID"] = current_request_id()
            return response

    app.include_router(create_health_router(connection, settings.resources))
    for resource in settings.resources:
        app.include_router(create_crud_router(resource, connection))
        logger.info(f"✅ Router de {resource.label} registrado en {resource.url_prefix}")

    register_error_handlers(app)
    return app


class CrudServer(uvicorn.Server):
    """
    Servidor uvicorn que recuerda la señal que pidió el apagado.

    uvicorn vuelve a lanzar la señal capturada al terminar serve(); aquí se
    descarta para que el proceso salga con el código del ciclo de vida.
    """

    def __init__(self, config: uvicorn.Config, lifecycle: AppLifecycle):
        super().__init__(config)
        self.lifecycle = lifecycle

    def handle_exit(self, sig, frame) -> None:
        try:
            self.lifecycle.signal_name = signal.Signals(sig).name
        except ValueError:
            self.lifecycle.signal_name = str(sig)
        super().handle_exit(sig, frame)
        self._captured_signals.clear()


def main() -> None:
    if ENV_FILE_FOUND:
        logger.info("📄 Archivo .env encontrado, variables locales cargadas")

    settings = load_settings()
    application = create_app(settings)
    lifecycle: AppLifecycle = application.state.lifecycle

    config = uvicorn.Config(
        application,
        host=settings.host,
        port=settings.port,
        lifespan="on",
        log_level="info",
    )
    try:
        CrudServer(config, lifecycle).run()
    except SystemExit:
        # uvicorn sale con su propio código si falla el startup
        if lifecycle.state is not LifecycleState.FAILED:
            raise

    if lifecycle.state is LifecycleState.FAILED:
        logger.error("❌ El servidor no pudo iniciar, saliendo con estado 1")
    sys.exit(lifecycle.exit_code)


app = create_app()


if __name__ == "__main__":
    main()
