"""Settings port definition (DTO)."""

from dataclasses import dataclass

__all__ = ["SettingsPort"]


@dataclass(frozen=True)
class SettingsPort:
    """Runtime settings for the reconciliation loop.

    Decouples core from concrete configuration sources, enabling
    easy testing and implementation swapping.

    Attributes:
        target_rule: Rule that must sit at the bottom of the user rules.
        period_in_sec: Seconds between reconciliation cycles.
        health_port: Port the liveness surface listens on.
    """

    target_rule: str
    period_in_sec: float
    health_port: int = 8080
