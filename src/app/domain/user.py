"""User: conta do app com seus dashboards, dispositivos e regras.

Serializado em JSON tanto nos arquivos ``.user`` quanto no Firestore.
Evita PII em logs; e-mail fica apenas no modelo persistido.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Literal, NamedTuple

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_APP_NAME = "iot_hub"

PinType = Literal["digital", "analog", "virtual"]
RuleCondition = Literal[">", "<", ">=", "<=", "==", "!="]
RuleAction = Literal["notify", "mail", "twitter"]


def _now_ms() -> int:
    return int(datetime.now(UTC).timestamp() * 1000)


class UserKey(NamedTuple):
    """Chave única de usuário: (email, app_name)."""

    email: str
    app_name: str


class Device(BaseModel):
    """Hardware ligado a um dashboard, identificado pelo token."""

    model_config = ConfigDict(extra="ignore")

    id: int
    name: str = ""
    token: str | None = None


class Widget(BaseModel):
    """Widget de leitura; ``frequency_ms > 0`` ativa leitura periódica."""

    model_config = ConfigDict(extra="ignore")

    id: int
    device_id: int = 0
    pin: int
    pin_type: PinType = "virtual"
    frequency_ms: int = Field(default=0, ge=0)


class Timer(BaseModel):
    """Timer de dashboard disparado em um segundo do dia (UTC)."""

    model_config = ConfigDict(extra="ignore")

    id: int
    device_id: int = 0
    pin: int
    pin_type: PinType = "virtual"
    start_time: int = Field(default=-1, ge=-1, lt=86400)
    start_value: str = ""
    notify: bool = False

    @property
    def is_enabled(self) -> bool:
        return self.start_time >= 0


class EventorRule(BaseModel):
    """Regra ``se pin <cond> limiar então ação``."""

    model_config = ConfigDict(extra="ignore")

    device_id: int = 0
    pin: int
    condition: RuleCondition
    threshold: float
    action: RuleAction
    message: str = Field(default="", max_length=255)

    def matches(self, value: float) -> bool:
        """Avalia a condição da regra contra o valor recebido."""
        if self.condition == ">":
            return value > self.threshold
        if self.condition == "<":
            return value < self.threshold
        if self.condition == ">=":
            return value >= self.threshold
        if self.condition == "<=":
            return value <= self.threshold
        if self.condition == "==":
            return value == self.threshold
        return value != self.threshold


class Dashboard(BaseModel):
    """Dashboard do app com seus dispositivos e automações."""

    model_config = ConfigDict(extra="ignore")

    id: int
    name: str = ""
    is_active: bool = False
    devices: list[Device] = Field(default_factory=list)
    widgets: list[Widget] = Field(default_factory=list)
    timers: list[Timer] = Field(default_factory=list)
    rules: list[EventorRule] = Field(default_factory=list)

    def get_device(self, device_id: int) -> Device | None:
        return next((d for d in self.devices if d.id == device_id), None)


class Profile(BaseModel):
    """Conjunto de dashboards do usuário."""

    model_config = ConfigDict(extra="ignore")

    dashboards: list[Dashboard] = Field(default_factory=list)

    def get_dashboard(self, dash_id: int) -> Dashboard | None:
        return next((d for d in self.dashboards if d.id == dash_id), None)


class User(BaseModel):
    """Conta de usuário persistida."""

    model_config = ConfigDict(extra="ignore")

    email: str = Field(..., min_length=3)
    app_name: str = DEFAULT_APP_NAME
    region: str = "local"
    name: str = ""
    last_modified_ts: int = Field(default_factory=_now_ms)
    profile: Profile = Field(default_factory=Profile)
    push_tokens: list[str] = Field(default_factory=list)
    twitter_token: str | None = None

    @property
    def key(self) -> UserKey:
        return UserKey(self.email, self.app_name)

    def touch(self) -> None:
        """Atualiza ``last_modified_ts`` após mutação do perfil."""
        self.last_modified_ts = _now_ms()
