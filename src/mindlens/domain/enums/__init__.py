"""Domain enums package."""

from mindlens.domain.enums.alert_severity import AlertSeverity, DispatchAction, ScoreBand

__all__ = ["AlertSeverity", "DispatchAction", "ScoreBand"]
