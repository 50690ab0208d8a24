"""Entrypoint do servidor IoT Hub.

Monta o Holder no startup da aplicação ASGI (FastAPI) e o libera no
shutdown.

Uso (produção):
    uvicorn app.app:app --host 0.0.0.0 --port 8080

Variáveis de ambiente:
    CONFIG_DIR: diretório com os arquivos ``.properties``
    RESTORE_FROM_DB: restaura usuários do banco em vez de arquivos
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI

from api.routes import create_api_router
from app.bootstrap import RestoreMode, build_holder, initialize_app, shutdown_holder, validate_runtime_settings
from app.workers import WorkerScheduler
from config.logging import get_logger
from config.settings import get_base_settings, load_bundles
from utils.errors import ShutdownError

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

# Inicializar logging ANTES de qualquer import que use logger
initialize_app()

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Gerencia ciclo de vida da aplicação.

    Startup:
    - Valida settings e carrega os bundles ``.properties``
    - Monta o Holder (falha aborta o startup)
    - Agenda os workers periódicos no loop de rede

    Shutdown:
    - Para os workers
    - Libera os subsistemas na ordem fixa
    """
    settings = get_base_settings()
    logger.info("app_starting", extra={"environment": settings.environment})
    validate_runtime_settings()

    bundles = load_bundles(settings.config_dir)
    restore_mode = RestoreMode.FROM_DATABASE if settings.restore_from_db else RestoreMode.FROM_FILE
    app.state.holder = await asyncio.to_thread(
        build_holder,
        bundles.server,
        bundles.mail,
        bundles.sms,
        bundles.push,
        restore_mode,
        redis_props=bundles.redis,
    )

    holder = app.state.holder
    scheduler = WorkerScheduler(holder.transport_holder, holder.timer_worker, holder.reading_widgets_worker)
    scheduler.start()
    app.state.worker_scheduler = scheduler

    yield

    logger.info("app_shutting_down")
    scheduler.stop()
    try:
        await asyncio.to_thread(shutdown_holder, app.state.holder)
    except ShutdownError as exc:
        logger.error(
            "app_shutdown_incomplete",
            extra={"failed_components": [name for name, _ in exc.failures]},
        )


def create_app() -> FastAPI:
    """Cria e configura a aplicação FastAPI.

    Returns:
        Aplicação FastAPI configurada.
    """
    fastapi_app = FastAPI(
        title="IoT Hub",
        description="Servidor de dispositivos e apps IoT",
        version="1.0.0",
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
    )
    fastapi_app.state.holder = None
    fastapi_app.state.worker_scheduler = None

    fastapi_app.include_router(create_api_router())

    logger.info("app_configured")

    return fastapi_app


# Aplicação ASGI exposta para uvicorn
app = create_app()


def main() -> None:
    """Entrypoint para execução direta."""
    import uvicorn

    logger.info("server_starting")
    uvicorn.run(
        "app.app:app",
        host="0.0.0.0",
        port=8080,
    )


if __name__ == "__main__":
    main()
