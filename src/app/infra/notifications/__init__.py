"""Wrappers dos canais de notificação (push, SMS, e-mail, Twitter)."""

from app.infra.notifications.gcm import GCMWrapper
from app.infra.notifications.mail import MailWrapper
from app.infra.notifications.sms import SMSWrapper
from app.infra.notifications.twitter import TwitterWrapper

__all__ = ["GCMWrapper", "MailWrapper", "SMSWrapper", "TwitterWrapper"]
