"""derived property rules, run after a gateway write"""

from logs import get_logger

logger = get_logger(__name__)

HEATING_COOLING = {
    "heat": "heating",
    "cool": "cooling",
    "off": "off",
}


def _set_paired(device, name, value):
    paired = device.properties.get(name)
    if paired is None:
        return
    paired.set_value(value)


def _stream_active(prop):
    supervisor = prop.device.supervisor
    if supervisor is None:
        logger.debug("no_stream_supervisor", device_id=prop.device.id)
        return
    if prop.value:
        supervisor.start()
    else:
        supervisor.stop()


def _thermostat_mode(prop):
    state = HEATING_COOLING.get(prop.value)
    if state is not None:
        _set_paired(prop.device, "heatingCooling", state)


def _color(prop):
    _set_paired(prop.device, "colorMode", "color")


def _color_temperature(prop):
    _set_paired(prop.device, "colorMode", "temperature")


RULES = {
    "streamActive": _stream_active,
    "thermostatMode": _thermostat_mode,
    "color": _color,
    "colorTemperature": _color_temperature,
}


def apply_rules(prop):
    # paired properties are updated with set_value, which never comes back here
    rule = RULES.get(prop.name)
    if rule is not None:
        rule(prop)
