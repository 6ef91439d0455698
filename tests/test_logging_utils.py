import logging

from utils.logging_utils import (
    ContextFilter,
    ResourceFileHandler,
    current_request_id,
    request_logging_context,
    resource_from_path,
)


def _record(message="hola"):
    return logging.LogRecord("test", logging.INFO, __file__, 1, message, None, None)


def test_resource_from_path():
    assert resource_from_path("/productos/65f1c2aa9b1e8a3d4c5b6a70") == "productos"
    assert resource_from_path("/") == "general"


def test_context_is_injected_and_reset():
    context_filter = ContextFilter()

    with request_logging_context(resource="productos", method="PUT", request_id="req-1"):
        record = _record()
        context_filter.filter(record)
        assert (record.request_id, record.resource, record.method) == ("req-1", "productos", "PUT")

    record = _record()
    context_filter.filter(record)
    assert record.request_id is None
    assert record.resource == "general"
    assert current_request_id() is None


def test_request_id_generated_when_missing():
    with request_logging_context(resource="categorias"):
        assert current_request_id()


def test_resource_file_handler_segments_by_resource(tmp_path):
    handler = ResourceFileHandler(base_dir=str(tmp_path))
    handler.setFormatter(logging.Formatter("%(resource)s %(message)s"))
    handler.addFilter(ContextFilter())

    with request_logging_context(resource="productos"):
        handler.handle(_record("creado"))
    with request_logging_context(resource="Categorias/Extra"):
        handler.handle(_record("eliminado"))
    handler.close()

    assert (tmp_path / "productos.log").read_text(encoding="utf-8").strip() == "productos creado"
    assert (tmp_path / "categorias_extra.log").exists()


def test_resource_from_path_uses_mounted_prefixes():
    prefixes = {"/api/clientes": "clientes", "/productos": "productos"}
    assert resource_from_path("/api/clientes/65f1c2aa9b1e8a3d4c5b6a70", prefixes) == "clientes"
    assert resource_from_path("/productos", prefixes) == "productos"
    assert resource_from_path("/productos-viejos", prefixes) == "productos-viejos"
    assert resource_from_path("/health", prefixes) == "health"


def test_resource_file_handler_routes_unknown_resources_to_fallback(tmp_path):
    handler = ResourceFileHandler(base_dir=str(tmp_path), collections=["productos", "categorias"], fallback="otros")
    handler.setFormatter(logging.Formatter("%(message)s"))
    handler.addFilter(ContextFilter())

    with request_logging_context(resource="productos"):
        handler.handle(_record("producto creado"))
    with request_logging_context(resource="health"):
        handler.handle(_record("health ok"))
    handler.handle(_record("arranque"))
    handler.close()

    assert handler.log_path("otros") == str(tmp_path / "otros.log")
    assert (tmp_path / "productos.log").read_text(encoding="utf-8").strip() == "producto creado"
    assert (tmp_path / "otros.log").read_text(encoding="utf-8").splitlines() == ["health ok", "arranque"]
    assert not (tmp_path / "health.log").exists()
    assert not (tmp_path / "categorias.log").exists()
