"""Thermostat allow-list configuration.

Parses the configured list of thermostat name substrings into targets
with stable display labels, independent of the provider's raw names.
"""

from pydantic import BaseModel, Field

from src.shared.config.settings import Settings, get_settings


class ThermostatTarget(BaseModel):
    """A single allow-list entry.

    The provider device name matches when it contains ``match``
    (case-insensitive); the snapshot is then labelled ``label``.
    """

    match: str = Field(..., min_length=1, description="Device name substring")
    label: str = Field(..., min_length=1, description="Stable display label")

    def matches(self, device_name: str) -> bool:
        """Check whether a provider device name matches this entry."""
        return self.match.lower() in device_name.lower()


def parse_targets(raw: str) -> list[ThermostatTarget]:
    """Parse ``"Downstairs:Home,809 Sailors Cove:Lake"`` style allow-lists.

    Entries without a label use the match text as label. Blank entries
    are skipped.

    Args:
        raw: Comma-separated allow-list

    Returns:
        Targets in configured order
    """
    targets: list[ThermostatTarget] = []
    for entry in raw.split(","):
        entry = entry.strip()
        if not entry:
            continue
        match, _, label = entry.partition(":")
        match = match.strip()
        label = label.strip() or match
        if match:
            targets.append(ThermostatTarget(match=match, label=label))
    return targets


class ThermostatTargetLoader:
    """Resolves provider device names against the configured allow-list."""

    def __init__(
        self,
        targets: list[ThermostatTarget] | None = None,
        settings: Settings | None = None,
    ) -> None:
        """Initialize loader.

        Args:
            targets: Explicit targets. If None, parsed from settings.
            settings: Settings (defaults to process settings)
        """
        if targets is None:
            targets = parse_targets((settings or get_settings()).target_thermostat_names)
        self._targets = targets

    @property
    def targets(self) -> list[ThermostatTarget]:
        """Get configured targets."""
        return list(self._targets)

    def match(self, device_name: str) -> ThermostatTarget | None:
        """Get the first target matching a device name.

        Args:
            device_name: Raw provider device name

        Returns:
            Matching target or None if the device is not allow-listed
        """
        for target in self._targets:
            if target.matches(device_name):
                return target
        return None
