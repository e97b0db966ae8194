"""Effective HVAC mode and target temperature resolution.

The provider does not reliably report an operating mode, so the effective
mode is inferred by an ordered list of rules. Each rule is a pure function
of the device inputs returning ``(mode, target)`` or None; the first rule
that yields a result wins.

Precedence:
    1. Running equipment (cooling vs heating tokens)
    2. Explicit provider mode with a usable setpoint
    3. Both setpoints, inferred from the current temperature
    4. A single available setpoint
"""

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

from src.shared.config.logging import get_logger
from src.shared.constants import SETPOINT_INFERENCE_DEADBAND_F
from src.shared.models.thermostat import ThermostatMode

logger = get_logger(__name__)

Resolution = tuple[ThermostatMode, float | None]


@dataclass(frozen=True)
class ThermostatInputs:
    """Device facts the mode rules operate on (Fahrenheit).

    Attributes:
        current_temperature: Instantaneous indoor temperature
        heat_setpoint: Heating setpoint, if known
        cool_setpoint: Cooling setpoint, if known
        explicit_mode: Provider-reported HVAC mode, if any
        running_equipment: Equipment tokens currently running
    """

    current_temperature: float
    heat_setpoint: float | None = None
    cool_setpoint: float | None = None
    explicit_mode: str | None = None
    running_equipment: tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class ResolvedMode:
    """Outcome of mode resolution and the rule that produced it."""

    mode: ThermostatMode
    target_temperature: float | None
    rule: str


def rule_running_equipment(inputs: ThermostatInputs) -> Resolution | None:
    """Classify running equipment as cooling or heating.

    Ambiguous equipment (both kinds) or a missing setpoint defers to the
    next rule.
    """
    tokens = [token.lower() for token in inputs.running_equipment if token]
    if not tokens:
        return None

    cooling = any("cool" in token for token in tokens)
    heating = any("heat" in token or "aux" in token for token in tokens)

    if cooling and not heating and inputs.cool_setpoint is not None:
        return ThermostatMode.COOL, inputs.cool_setpoint
    if heating and not cooling and inputs.heat_setpoint is not None:
        return ThermostatMode.HEAT, inputs.heat_setpoint
    return None


def rule_explicit_mode(inputs: ThermostatInputs) -> Resolution | None:
    """Use the provider's mode when its setpoint is available."""
    if not inputs.explicit_mode:
        return None

    mode = inputs.explicit_mode.strip().lower()
    heat, cool = inputs.heat_setpoint, inputs.cool_setpoint

    if mode in ("heat", "auxheatonly") and heat is not None:
        return ThermostatMode.HEAT, heat
    if mode == "cool" and cool is not None:
        return ThermostatMode.COOL, cool
    if mode == "auto" and heat is not None and cool is not None:
        current = inputs.current_temperature
        # Ties go to the cool setpoint
        if abs(current - heat) < abs(current - cool):
            return ThermostatMode.AUTO, heat
        return ThermostatMode.AUTO, cool
    if mode == "off":
        return ThermostatMode.OFF, None
    return None


def rule_both_setpoints(inputs: ThermostatInputs) -> Resolution | None:
    """Infer the mode from where the temperature sits between setpoints."""
    heat, cool = inputs.heat_setpoint, inputs.cool_setpoint
    if heat is None or cool is None:
        return None

    current = inputs.current_temperature
    if heat == cool:
        return ThermostatMode.AUTO, cool
    if current < heat - SETPOINT_INFERENCE_DEADBAND_F:
        return ThermostatMode.HEAT, heat
    if current > cool + SETPOINT_INFERENCE_DEADBAND_F:
        return ThermostatMode.COOL, cool
    # Auto displays the upper bound being maintained
    return ThermostatMode.AUTO, cool


def rule_single_setpoint(inputs: ThermostatInputs) -> Resolution | None:
    """Only one setpoint known: that mode governs."""
    if inputs.heat_setpoint is not None and inputs.cool_setpoint is None:
        return ThermostatMode.HEAT, inputs.heat_setpoint
    if inputs.cool_setpoint is not None and inputs.heat_setpoint is None:
        return ThermostatMode.COOL, inputs.cool_setpoint
    return None


MODE_RULES: Sequence[Callable[[ThermostatInputs], Resolution | None]] = (
    rule_running_equipment,
    rule_explicit_mode,
    rule_both_setpoints,
    rule_single_setpoint,
)


def resolve_mode(
    inputs: ThermostatInputs,
    rules: Sequence[Callable[[ThermostatInputs], Resolution | None]] = MODE_RULES,
) -> ResolvedMode:
    """Resolve the effective mode and target temperature.

    Args:
        inputs: Device facts
        rules: Rules in priority order

    Returns:
        Resolved mode; ``off`` with no target when no rule applies
    """
    for rule in rules:
        result = rule(inputs)
        if result is not None:
            mode, target = result
            return ResolvedMode(mode=mode, target_temperature=target, rule=rule.__name__)

    logger.debug("thermostat_mode_unresolved", inputs=inputs)
    return ResolvedMode(mode=ThermostatMode.OFF, target_temperature=None, rule="none")
