"""Beestat thermostat adapter.

Reads all registered devices once per refresh, keeps the allow-listed
ones, and resolves each into a canonical thermostat snapshot with an
inferred mode and target temperature.
"""

from datetime import datetime, timezone

from src.analytics.thermostat_mode import ThermostatInputs, resolve_mode
from src.shared.api.beestat import BeestatClient
from src.shared.api.errors import UpstreamFormatError
from src.shared.api.response_models import BeestatProgram, BeestatThermostat
from src.shared.config.logging import get_logger
from src.shared.config.settings import Settings
from src.shared.config.thermostats import ThermostatTarget, ThermostatTargetLoader
from src.shared.constants import (
    BEESTAT_TENTHS_DIVISOR,
    BEESTAT_THERMOSTAT_ID_PREFIX,
    OCCUPIED_CLIMATE_REFS,
)
from src.shared.db.repositories.thermostat import ThermostatRepository
from src.shared.models.thermostat import ThermostatSnapshotData

logger = get_logger(__name__)


def thermostat_id_for(device: BeestatThermostat) -> str:
    """Canonical id, e.g. ``beestat-311234567890``."""
    return f"{BEESTAT_THERMOSTAT_ID_PREFIX}-{device.ecobee_thermostat_id}"


def current_temperature(device: BeestatThermostat) -> float | None:
    """First reported instantaneous temperature."""
    for value in (device.actual_temperature, device.indoor_temperature, device.temperature):
        if value is not None:
            return value
    return None


def setpoints(device: BeestatThermostat) -> tuple[float | None, float | None]:
    """Heat and cool setpoints, falling back to the active climate (tenths)."""
    heat, cool = device.setpoint_heat, device.setpoint_cool
    climate = device.program.current_climate if device.program else None
    if climate is not None:
        if heat is None and climate.heat_temp is not None:
            heat = climate.heat_temp / BEESTAT_TENTHS_DIVISOR
        if cool is None and climate.cool_temp is not None:
            cool = climate.cool_temp / BEESTAT_TENTHS_DIVISOR
    return heat, cool


def explicit_mode(device: BeestatThermostat) -> str | None:
    """Provider mode from settings, else the top-level field."""
    if device.settings and device.settings.hvac_mode:
        return device.settings.hvac_mode
    return device.hvac_mode


def is_occupied(program: BeestatProgram | None) -> bool:
    """Best-effort occupancy from the active comfort profile.

    No program data means not occupied.
    """
    if program is None:
        return False
    climate = program.current_climate
    if climate is not None and climate.is_occupied is not None:
        return climate.is_occupied
    return (program.current_climate_ref or "").lower() in OCCUPIED_CLIMATE_REFS


def hvac_state(device: BeestatThermostat) -> str:
    """Running equipment as a comma string, ``idle`` when nothing runs."""
    running = [token for token in device.running_equipment if token]
    return ",".join(running) if running else "idle"


class ThermostatAdapter:
    """Normalizes Beestat devices into canonical thermostat snapshots."""

    def __init__(
        self,
        client: BeestatClient | None = None,
        targets: ThermostatTargetLoader | None = None,
        repository: ThermostatRepository | None = None,
        settings: Settings | None = None,
    ) -> None:
        """Initialize thermostat adapter.

        Args:
            client: Beestat client (created if not provided)
            targets: Allow-list (loaded from settings if not provided)
            repository: Where raw payloads are logged, if given
            settings: Settings for a created client or allow-list
        """
        self.client = client if client is not None else BeestatClient(settings=settings)
        self.targets = targets if targets is not None else ThermostatTargetLoader(settings=settings)
        self.repository = repository

    @property
    def is_enabled(self) -> bool:
        """The adapter is disabled when no API key is configured."""
        return self.client.is_configured

    def request_sync(self) -> bool:
        """Ask the provider to pull fresh thermostat data.

        Returns:
            True if accepted; False when disabled or rejected
        """
        if not self.is_enabled:
            logger.debug("beestat_sync_skipped_no_key")
            return False
        return self.client.request_sync()

    def fetch_all(self, now: datetime | None = None) -> list[ThermostatSnapshotData]:
        """Fetch and resolve every allow-listed thermostat.

        Args:
            now: Snapshot instant (defaults to now)

        Returns:
            Snapshots in allow-list order; empty when no API key is set

        Raises:
            UpstreamFetchError: If the provider call fails
            UpstreamFormatError: If the payload or a matched device is malformed
        """
        if not self.is_enabled:
            logger.info("beestat_disabled_no_api_key")
            return []

        now = now or datetime.now(timezone.utc)
        response = self.client.read_thermostats()

        matched: list[tuple[int, ThermostatSnapshotData]] = []
        for key, device in response.data.items():
            target = self.targets.match(device.display_name)
            if target is None:
                logger.debug("thermostat_skipped", name=device.display_name)
                continue

            snapshot = self.normalize(device, target, now)
            if self.repository is not None:
                self.repository.save_raw_payload(snapshot.thermostat_id, response.raw_device(key))
            matched.append((self.targets.targets.index(target), snapshot))

        matched.sort(key=lambda item: (item[0], item[1].thermostat_id))
        snapshots = [snapshot for _, snapshot in matched]
        logger.info(
            "thermostats_normalized",
            total=len(response.data),
            matched=len(snapshots),
        )
        return snapshots

    def normalize(
        self,
        device: BeestatThermostat,
        target: ThermostatTarget,
        now: datetime,
    ) -> ThermostatSnapshotData:
        """Resolve one device into a canonical snapshot.

        Args:
            device: Parsed provider device
            target: Matching allow-list entry
            now: Snapshot instant

        Returns:
            Snapshot labelled with the allow-list label
        """
        temperature = current_temperature(device)
        if temperature is None:
            raise UpstreamFormatError(
                message=f"Thermostat {device.display_name!r} reports no temperature",
                endpoint="thermostat.read_id",
                details={"ecobee_thermostat_id": device.ecobee_thermostat_id},
            )

        heat, cool = setpoints(device)
        resolved = resolve_mode(
            ThermostatInputs(
                current_temperature=temperature,
                heat_setpoint=heat,
                cool_setpoint=cool,
                explicit_mode=explicit_mode(device),
                running_equipment=tuple(device.running_equipment),
            )
        )

        thermostat_id = thermostat_id_for(device)
        logger.debug(
            "thermostat_mode_resolved",
            thermostat_id=thermostat_id,
            mode=resolved.mode.value,
            target=resolved.target_temperature,
            rule=resolved.rule,
        )

        return ThermostatSnapshotData(
            thermostat_id=thermostat_id,
            name=target.label,
            temperature=temperature,
            target_temperature=resolved.target_temperature,
            humidity=device.humidity,
            mode=resolved.mode,
            hvac_state=hvac_state(device),
            occupied=is_occupied(device.program),
            timestamp=now,
            last_updated=now,
        )
