"""Limits: quotas de taxa e tamanho lidas do bundle principal."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from config.settings import ServerProperties


@dataclass(frozen=True, slots=True)
class Limits:
    """Quotas aplicadas por usuário.

    Attributes:
        user_message_quota: Mensagens/s por usuário
        notification_period_ms: Intervalo mínimo entre notificações
        widget_size_limit_bytes: Tamanho máximo de um widget
        profile_size_limit_bytes: Tamanho máximo do perfil
        webhook_period_ms: Intervalo mínimo entre webhooks
        webhook_response_size_limit_bytes: Tamanho máximo da resposta de webhook
        dashboards_limit: Máximo de dashboards por usuário
    """

    user_message_quota: int = 100
    notification_period_ms: int = 5_000
    widget_size_limit_bytes: int = 20 * 1024
    profile_size_limit_bytes: int = 128 * 1024
    webhook_period_ms: int = 1_000
    webhook_response_size_limit_bytes: int = 72 * 1024
    dashboards_limit: int = 100

    @classmethod
    def from_properties(cls, props: ServerProperties) -> Limits:
        defaults = cls()
        return cls(
            user_message_quota=props.get_int("user.message.quota.limit", defaults.user_message_quota),
            notification_period_ms=props.get_int(
                "notifications.frequency.user.quota.limit", defaults.notification_period_ms // 1000
            )
            * 1000,
            widget_size_limit_bytes=props.get_int(
                "user.widget.max.size.limit", defaults.widget_size_limit_bytes // 1024
            )
            * 1024,
            profile_size_limit_bytes=props.get_int(
                "user.profile.max.size", defaults.profile_size_limit_bytes // 1024
            )
            * 1024,
            webhook_period_ms=props.get_int(
                "webhooks.frequency.user.quota.limit", defaults.webhook_period_ms
            ),
            webhook_response_size_limit_bytes=props.get_int(
                "webhooks.response.size.limit", defaults.webhook_response_size_limit_bytes // 1024
            )
            * 1024,
            dashboards_limit=props.get_int("user.dashboard.max.limit", defaults.dashboards_limit),
        )

    def is_notification_allowed(self, last_sent_ms: int, now_ms: int) -> bool:
        return now_ms - last_sent_ms >= self.notification_period_ms
