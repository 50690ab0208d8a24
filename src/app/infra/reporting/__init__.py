"""Armazenamento de histórico de pinos (reporting)."""

from app.infra.reporting.reporting_dao import AggregationKey, ReportingDao

__all__ = ["AggregationKey", "ReportingDao"]
