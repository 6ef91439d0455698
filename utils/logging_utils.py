import logging
import os
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from logging.handlers import RotatingFileHandler
from threading import RLock
from typing import Dict, Iterable, Optional


FALLBACK_LOG_KEY = "general"

_request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)
_resource_var: ContextVar[str] = ContextVar("resource", default=FALLBACK_LOG_KEY)
_method_var: ContextVar[Optional[str]] = ContextVar("method", default=None)


def _sanitize_filename(value: str) -> str:
    sanitized = "".join(ch if ch.isalnum() or ch in ("-", "_") else "_" for ch in value.lower().strip())
    return sanitized or FALLBACK_LOG_KEY


def resource_from_path(path: str, collections_by_prefix: Optional[Dict[str, str]] = None) -> str:
    """
    Recurso al que pertenece la ruta.

    Con el mapa prefijo -> colección se devuelve la colección montada
    ('/api/clientes/1' -> 'clientes'); si no, el primer segmento.
    """
    for prefix, collection in (collections_by_prefix or {}).items():
        if path == prefix or path.startswith(prefix + "/"):
            return collection
    segment = path.strip("/").split("/", 1)[0]
    return segment or FALLBACK_LOG_KEY


class ContextFilter(logging.Filter):
    """Inyecta el contexto de la request en cada registro de log."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = _request_id_var.get()
        record.resource = _resource_var.get()
        record.method = _method_var.get()
        return True


class ResourceFileHandler(logging.Handler):
    """
    Un archivo rotativo por colección CRUD: <base_dir>/<coleccion>.log.

    Si se indican las colecciones montadas, todo lo demás (health, docs,
    rutas inexistentes, arranque) va a <base_dir>/<fallback>.log.
    """

    def __init__(
        self,
        base_dir: str,
        collections: Optional[Iterable[str]] = None,
        fallback: str = FALLBACK_LOG_KEY,
        max_bytes: int = 5 * 1024 * 1024,
        backup_count: int = 5,
    ) -> None:
        super().__init__()
        self.base_dir = base_dir
        self.collections = None if collections is None else {_sanitize_filename(c) for c in collections}
        self.fallback = _sanitize_filename(fallback)
        self.max_bytes = max_bytes
        self.backup_count = backup_count
        self._handlers: Dict[str, RotatingFileHandler] = {}
        self._lock = RLock()
        os.makedirs(self.base_dir, exist_ok=True)

    def log_path(self, key: str) -> str:
        return os.path.join(self.base_dir, f"{key}.log")

    def key_for(self, record: logging.LogRecord) -> str:
        resource = getattr(record, "resource", None)
        key = _sanitize_filename(str(resource)) if resource else self.fallback
        if self.collections is not None and key not in self.collections:
            return self.fallback
        return key

    def setFormatter(self, fmt: logging.Formatter) -> None:
        super().setFormatter(fmt)
        for handler in self._handlers.values():
            handler.setFormatter(fmt)

    def emit(self, record: logging.LogRecord) -> None:
        key = self.key_for(record)

        with self._lock:
            handler = self._handlers.get(key)
            if handler is None:
                handler = RotatingFileHandler(
                    self.log_path(key),
                    maxBytes=self.max_bytes,
                    backupCount=self.backup_count,
                    encoding="utf-8",
                )
                if self.formatter:
                    handler.setFormatter(self.formatter)
                self._handlers[key] = handler

        handler.emit(record)

    def close(self) -> None:
        with self._lock:
            for handler in self._handlers.values():
                handler.close()
            self._handlers.clear()
        super().close()


def configure_logging(log_dir: Optional[str] = None, collections: Optional[Iterable[str]] = None) -> None:
    """
    Configura logging global con contexto por request.

    Si se indica log_dir, además escribe un archivo rotativo por colección.
    """
    formatter = logging.Formatter(
        "%(asctime)s [%(levelname)s] [req=%(request_id)s] [resource=%(resource)s] "
        "[method=%(method)s] %(name)s - %(message)s"
    )

    context_filter = ContextFilter()

    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(formatter)
    console_handler.addFilter(context_filter)
    handlers = [console_handler]

    if log_dir:
        resource_handler = ResourceFileHandler(base_dir=log_dir, collections=collections)
        resource_handler.setLevel(logging.INFO)
        resource_handler.setFormatter(formatter)
        resource_handler.addFilter(context_filter)
        handlers.append(resource_handler)

    logging.basicConfig(level=logging.INFO, handlers=handlers)


@contextmanager
def request_logging_context(
    resource: Optional[str] = None,
    method: Optional[str] = None,
    request_id: Optional[str] = None,
):
    """
    Context manager para asociar los logs de una request con su recurso.
    """
    tokens = [
        (_request_id_var, _request_id_var.set(request_id or uuid.uuid4().hex[:12])),
        (_resource_var, _resource_var.set(resource or FALLBACK_LOG_KEY)),
    ]
    if method is not None:
        tokens.append((_method_var, _method_var.set(method)))

    try:
        yield
    finally:
        for var, token in reversed(tokens):
            var.reset(token)


def current_request_id() -> Optional[str]:
    return _request_id_var.get()
