"""Exceções de infraestrutura e de ciclo de vida do servidor."""

from __future__ import annotations


class InfrastructureError(RuntimeError):
    """Base para falhas de infraestrutura."""


class RedisConnectionError(InfrastructureError):
    """Falha de conexão/timeout ao acessar Redis."""


class QueueFullError(InfrastructureError):
    """Fila do pool de I/O bloqueante atingiu o limite configurado."""


class BootstrapError(InfrastructureError):
    """Falha fatal na montagem do Holder.

    Nenhum Holder parcial é exposto quando esta exceção é levantada.
    """

    def __init__(self, message: str, step: str | None = None) -> None:
        super().__init__(message)
        self.step = step


class ShutdownError(InfrastructureError):
    """Uma ou mais etapas de liberação falharam durante o shutdown.

    Todas as etapas são executadas antes de levantar; ``failures`` guarda
    cada par (nome do subsistema, exceção) na ordem em que ocorreram.
    """

    def __init__(self, failures: list[tuple[str, BaseException]]) -> None:
        names = ", ".join(name for name, _ in failures)
        super().__init__(f"Falha ao liberar: {names}")
        self.failures = failures
