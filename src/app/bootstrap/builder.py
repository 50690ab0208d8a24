"""Montagem do Holder em ordem estrita de dependência.

Cada etapa recebe explicitamente o que as anteriores produziram. Donos de
recursos são registrados para rollback logo após a construção; se uma
etapa posterior falhar, eles são liberados (ordem inversa, best-effort)
antes de ``BootstrapError`` propagar. Nenhum Holder parcial é exposto.

Uso:
    bundles = load_bundles(settings.config_dir)
    holder = build_holder(
        bundles.server, bundles.mail, bundles.sms, bundles.push,
        RestoreMode.FROM_FILE, redis_props=bundles.redis,
    )
    ...
    holder.close()
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable, Mapping, MutableMapping
from dataclasses import dataclass, field, replace
from functools import partial
from typing import TYPE_CHECKING, Any, Protocol, TypeVar

from app.bootstrap.clients import create_http_client, create_redis_client
from app.bootstrap.holder import Holder, ReleaseStep, RestoreMode, release_all
from app.infra.blocking import BlockingIOProcessor
from app.infra.db import DBManager
from app.infra.files import FileManager, get_reporting_folder
from app.infra.notifications import GCMWrapper, MailWrapper, SMSWrapper, TwitterWrapper
from app.infra.reporting import ReportingDao
from app.infra.tls import SslContextHolder
from app.infra.transport import TransportHolder
from app.observability import GlobalStats, reset_correlation_id, set_correlation_id
from app.services import EventorProcessor, Limits, TokenManager
from app.sessions import SessionDao
from app.users import UserDao
from app.workers import ReadingWidgetsWorker, TimerWorker
from config.logging import log_lifecycle_step
from config.settings import ServerProperties, apply_environment_guard
from utils.errors import BootstrapError

if TYPE_CHECKING:
    from app.domain.user import User, UserKey
    from app.infra.cache import RedisClient
    from app.infra.http import AsyncHttpClient

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Closeable(Protocol):
    def close(self) -> None: ...


C = TypeVar("C", bound=Closeable)

DEFAULT_REGION = "local"
DEFAULT_RESTORE_TIMEOUT_SECONDS = 60.0
TEST_CONTACT_EMAIL = "test@iot-hub.local"


# ──────────────────────────────────────────────────────────────────────────────
# Perfis e providers
# ──────────────────────────────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class BootstrapProfile:
    """Diferenças entre a montagem de produção e a de testes.

    Attributes:
        name: Nome do perfil (logs).
        pool_size_default: Threads do pool bloqueante sem configuração.
        queue_limit_default: Fila do pool bloqueante sem configuração.
        keep_alive: Keep-alive do cliente HTTP compartilhado.
        forced_region: Região fixa (ignora ``region`` das propriedades).
        contact_email: E-mail de contato fixo para o TLS.
        file_restore_only: Restaura sempre de arquivos.
    """

    name: str
    pool_size_default: int
    queue_limit_default: int
    keep_alive: bool
    forced_region: str | None = None
    contact_email: str | None = None
    file_restore_only: bool = False


PRODUCTION = BootstrapProfile(
    name="production",
    pool_size_default=6,
    queue_limit_default=5000,
    keep_alive=True,
)

TEST = BootstrapProfile(
    name="test",
    pool_size_default=5,
    queue_limit_default=10000,
    keep_alive=False,
    forced_region=DEFAULT_REGION,
    contact_email=TEST_CONTACT_EMAIL,
    file_restore_only=True,
)


@dataclass(frozen=True, slots=True)
class NotificationWrappers:
    """Os quatro canais de notificação."""

    twitter: TwitterWrapper
    mail: MailWrapper
    push: GCMWrapper
    sms: SMSWrapper


class UserSource(Protocol):
    def __call__(
        self,
        mode: RestoreMode,
        *,
        file_manager: FileManager,
        db_manager: DBManager,
        blocking_io_processor: BlockingIOProcessor,
        region: str,
        timeout_seconds: float,
    ) -> Mapping[UserKey, User] | Iterable[User]: ...


def create_notification_wrappers(
    *,
    mail_props: ServerProperties,
    sms_props: ServerProperties,
    push_props: ServerProperties,
    http_client: AsyncHttpClient,
) -> NotificationWrappers:
    """Wrappers reais, cada um com seu próprio bundle."""
    return NotificationWrappers(
        twitter=TwitterWrapper(),
        mail=MailWrapper(mail_props),
        push=GCMWrapper(push_props, http_client),
        sms=SMSWrapper(sms_props, http_client),
    )


def restore_users(
    mode: RestoreMode,
    *,
    file_manager: FileManager,
    db_manager: DBManager,
    blocking_io_processor: BlockingIOProcessor,
    region: str,
    timeout_seconds: float,
) -> Mapping[UserKey, User] | Iterable[User]:
    """Carrega o estado inicial de usuários.

    FROM_DATABASE roda a consulta no pool bloqueante e espera no máximo
    ``timeout_seconds``. Qualquer falha é fatal; não há fallback entre
    as duas origens.

    Raises:
        BootstrapError: Timeout na consulta ao banco.
    """
    if mode is RestoreMode.FROM_DATABASE:
        future = blocking_io_processor.execute(db_manager.user_db_dao.get_all_users, region)
        try:
            users: Mapping[UserKey, User] | Iterable[User] = future.result(timeout=timeout_seconds)
        except TimeoutError as exc:
            future.cancel()
            raise BootstrapError(
                f"Timeout ({timeout_seconds}s) ao restaurar usuários do banco",
                step="restore_users",
            ) from exc
    else:
        users = file_manager.deserialize_users()
    logger.info("users_restored", extra={"source": mode.value, "region": region})
    return users


@dataclass(frozen=True, slots=True)
class BootstrapProviders:
    """Pontos de extensão da montagem (substituídos em testes).

    Attributes:
        redis_client_factory: Cria o cliente de cache a partir do bundle redis.
        db_manager_factory: ``(blocking_io_processor, enabled) -> DBManager``.
        notifications_factory: Cria os wrappers de notificação.
        user_source: Origem do estado inicial de usuários.
        environ: Ambiente onde a guarda de vazamento atua (default: processo).
    """

    redis_client_factory: Callable[[ServerProperties], RedisClient] = create_redis_client
    db_manager_factory: Callable[[BlockingIOProcessor, bool], DBManager] = DBManager
    notifications_factory: Callable[..., NotificationWrappers] = create_notification_wrappers
    user_source: UserSource = restore_users
    environ: MutableMapping[str, str] | None = field(default=None, compare=False)


# ──────────────────────────────────────────────────────────────────────────────
# Sequenciador
# ──────────────────────────────────────────────────────────────────────────────


class _Sequencer:
    """Executa etapas nomeadas e guarda os donos de recursos para rollback."""

    def __init__(self) -> None:
        self.current = ""
        self._owned: list[ReleaseStep] = []

    def run(self, name: str, fn: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        self.current = name
        started = time.perf_counter()
        result = fn(*args, **kwargs)
        log_lifecycle_step(logger, name, "build", elapsed_ms=(time.perf_counter() - started) * 1000)
        return result

    def own(
        self,
        name: str,
        fn: Callable[..., C],
        *args: Any,
        on_rollback: Callable[[C], None] | None = None,
        **kwargs: Any,
    ) -> C:
        resource = self.run(name, fn, *args, **kwargs)
        release = partial(on_rollback, resource) if on_rollback else resource.close
        self._owned.append((name, release))
        return resource

    def rollback(self) -> None:
        if not self._owned:
            return
        logger.warning(
            "bootstrap_rollback_started",
            extra={"failed_step": self.current, "owners_count": len(self._owned)},
        )
        release_all(reversed(self._owned), action="rollback")
        self._owned.clear()


def _abandon_pool(pool: BlockingIOProcessor) -> None:
    # Uma restauração travada no banco não pode segurar o rollback.
    pool.close(wait=False)


def _resolve_contact_email(
    props: ServerProperties,
    mail_props: ServerProperties,
    profile: BootstrapProfile,
) -> str:
    if profile.contact_email:
        return profile.contact_email
    return props.get("contact.email", "") or mail_props.get("mail.smtp.username", "")


def build_csv_download_url(host: str, port: str | None) -> str:
    """URL base dos CSVs de reporting; porta omitida quando ausente."""
    if port:
        return f"http://{host}:{port}/"
    return f"http://{host}/"


def _require_data_folder(props: ServerProperties) -> str:
    data_folder = props.get("data.folder", "").strip()
    if not data_folder:
        raise BootstrapError("data.folder não configurado", step="file_manager")
    return data_folder


def build_holder(
    props: ServerProperties,
    mail_props: ServerProperties,
    sms_props: ServerProperties,
    push_props: ServerProperties,
    restore_mode: RestoreMode,
    *,
    redis_props: ServerProperties | None = None,
    providers: BootstrapProviders | None = None,
    profile: BootstrapProfile = PRODUCTION,
) -> Holder:
    """Monta todos os subsistemas na ordem de dependência.

    Args:
        props: Bundle principal (``server.properties``).
        mail_props: Bundle de e-mail.
        sms_props: Bundle de SMS.
        push_props: Bundle de push (GCM).
        restore_mode: Origem do estado inicial de usuários.
        redis_props: Bundle dedicado do Redis (vazio = defaults).
        providers: Pontos de extensão; default usa implementações reais.
        profile: PRODUCTION ou TEST.

    Returns:
        Holder completo.

    Raises:
        BootstrapError: Qualquer etapa falhou; recursos já criados foram
            liberados.
    """
    providers = providers or BootstrapProviders()
    if profile.file_restore_only and restore_mode is not RestoreMode.FROM_FILE:
        logger.info("restore_mode_overridden", extra={"profile": profile.name, "restore_mode": "file"})
        restore_mode = RestoreMode.FROM_FILE

    token = set_correlation_id()
    started = time.perf_counter()
    seq = _Sequencer()
    try:
        logger.info(
            "holder_build_started",
            extra={"profile": profile.name, "restore_mode": restore_mode.value},
        )
        holder = _build(
            seq,
            props=props,
            mail_props=mail_props,
            sms_props=sms_props,
            push_props=push_props,
            redis_props=redis_props or ServerProperties(source="<defaults>"),
            restore_mode=restore_mode,
            providers=providers,
            profile=profile,
        )
    except BootstrapError as exc:
        seq.rollback()
        logger.error("holder_build_failed", extra={"step": exc.step or seq.current, "error_type": "BootstrapError"})
        raise
    except Exception as exc:
        seq.rollback()
        logger.error("holder_build_failed", extra={"step": seq.current, "error_type": type(exc).__name__})
        raise BootstrapError(f"Falha ao montar o servidor na etapa '{seq.current}'", step=seq.current) from exc
    finally:
        reset_correlation_id(token)

    logger.info(
        "holder_built",
        extra={
            "profile": profile.name,
            "region": holder.region,
            "restore_mode": restore_mode.value,
            "users_count": len(holder.user_dao),
            "elapsed_ms": round((time.perf_counter() - started) * 1000, 2),
        },
    )
    return holder


def _build(
    seq: _Sequencer,
    *,
    props: ServerProperties,
    mail_props: ServerProperties,
    sms_props: ServerProperties,
    push_props: ServerProperties,
    redis_props: ServerProperties,
    restore_mode: RestoreMode,
    providers: BootstrapProviders,
    profile: BootstrapProfile,
) -> Holder:
    seq.run("environment_guard", apply_environment_guard, providers.environ)

    seq.current = "scalars"
    region = profile.forced_region or props.get("region", DEFAULT_REGION) or DEFAULT_REGION
    host = props.get_server_host()

    redis_client = seq.own("redis_client", providers.redis_client_factory, redis_props)

    seq.current = "file_manager"
    data_folder = _require_data_folder(props)
    file_manager = seq.run("file_manager", FileManager, data_folder)

    session_dao = seq.run("session_dao", SessionDao)

    blocking_io_processor = seq.own(
        "blocking_io_processor",
        BlockingIOProcessor,
        pool_size=props.get_int("blocking.processor.thread.pool.limit", profile.pool_size_default),
        queue_limit=props.get_int("notifications.queue.limit", profile.queue_limit_default),
        on_rollback=_abandon_pool,
    )

    db_manager = seq.own(
        "db_manager",
        providers.db_manager_factory,
        blocking_io_processor,
        props.get_bool("enable.db"),
    )

    users = seq.run(
        "restore_users",
        providers.user_source,
        restore_mode,
        file_manager=file_manager,
        db_manager=db_manager,
        blocking_io_processor=blocking_io_processor,
        region=region,
        timeout_seconds=props.get_float("db.restore.timeout.seconds", DEFAULT_RESTORE_TIMEOUT_SECONDS),
    )

    user_dao = seq.run("user_dao", UserDao, users, region)

    token_manager = seq.run(
        "token_manager",
        TokenManager,
        user_dao.users,
        blocking_io_processor=blocking_io_processor,
        redis_client=redis_client,
        host=host,
    )

    stats = seq.run("stats", GlobalStats)

    reporting_dao = seq.own("reporting_dao", ReportingDao, get_reporting_folder(data_folder), props)

    transport_holder = seq.own("transport_holder", TransportHolder, props, providers.environ)

    http_client = seq.run("http_client", create_http_client, transport_holder, keep_alive=profile.keep_alive)

    notifications = seq.run(
        "notifications",
        providers.notifications_factory,
        mail_props=mail_props,
        sms_props=sms_props,
        push_props=push_props,
        http_client=http_client,
    )

    eventor_processor = seq.run(
        "eventor_processor",
        EventorProcessor,
        notifications.push,
        notifications.mail,
        notifications.twitter,
        blocking_io_processor,
        stats,
    )

    timer_worker = seq.run("timer_worker", TimerWorker, user_dao, session_dao, notifications.push)
    reading_widgets_worker = seq.run("reading_widgets_worker", ReadingWidgetsWorker, session_dao, user_dao)

    limits = seq.run("limits", Limits.from_properties, props)

    csv_download_url = build_csv_download_url(host, props.get("http.port"))

    ssl_context_holder = seq.run(
        "ssl_context_holder",
        SslContextHolder,
        props,
        _resolve_contact_email(props, mail_props, profile),
    )

    seq.current = "holder"
    return Holder(
        props=props,
        region=region,
        host=host,
        redis_client=redis_client,
        file_manager=file_manager,
        session_dao=session_dao,
        blocking_io_processor=blocking_io_processor,
        db_manager=db_manager,
        user_dao=user_dao,
        token_manager=token_manager,
        stats=stats,
        reporting_dao=reporting_dao,
        transport_holder=transport_holder,
        http_client=http_client,
        twitter_wrapper=notifications.twitter,
        mail_wrapper=notifications.mail,
        gcm_wrapper=notifications.push,
        sms_wrapper=notifications.sms,
        eventor_processor=eventor_processor,
        timer_worker=timer_worker,
        reading_widgets_worker=reading_widgets_worker,
        limits=limits,
        csv_download_url=csv_download_url,
        ssl_context_holder=ssl_context_holder,
    )


def build_test_holder(
    props: ServerProperties,
    notifications: NotificationWrappers,
    *,
    redis_props: ServerProperties | None = None,
    providers: BootstrapProviders | None = None,
) -> Holder:
    """Montagem para fixtures: região ``local``, restauração por arquivo,
    HTTP sem keep-alive e wrappers fornecidos pelo chamador.
    """
    providers = replace(
        providers or BootstrapProviders(),
        notifications_factory=lambda **_: notifications,
    )
    empty = ServerProperties(source="<test>")
    return build_holder(
        props,
        empty,
        empty,
        empty,
        RestoreMode.FROM_FILE,
        redis_props=redis_props,
        providers=providers,
        profile=TEST,
    )
