"""built-in virtual thing templates"""

import config


def _media(name):
    return f"{config.MEDIA_URL_PREFIX}/{name}"


# ============================================================================
# Property builders
# ============================================================================

def bool_sensor():
    return {
        "name": "on",
        "value": False,
        "metadata": {
            "title": "On/Off",
            "type": "boolean",
            "@type": "BooleanProperty",
            "readOnly": True,
        },
    }


def on():
    return {
        "name": "on",
        "value": False,
        "metadata": {
            "title": "On/Off",
            "type": "boolean",
            "@type": "OnOffProperty",
        },
    }


def color():
    return {
        "name": "color",
        "value": "#ffffff",
        "metadata": {
            "title": "Color",
            "type": "string",
            "@type": "ColorProperty",
        },
    }


def color_temperature():
    return {
        "name": "colorTemperature",
        "value": 2500,
        "metadata": {
            "title": "Color Temperature",
            "type": "integer",
            "@type": "ColorTemperatureProperty",
            "unit": "kelvin",
            "minimum": 2500,
            "maximum": 9000,
        },
    }


def color_mode(value):
    return {
        "name": "colorMode",
        "value": value,
        "metadata": {
            "title": "Color Mode",
            "type": "string",
            "@type": "ColorModeProperty",
            "enum": ["color", "temperature"],
            "readOnly": True,
        },
    }


def brightness():
    return {
        "name": "level",
        "value": 0,
        "metadata": {
            "title": "Brightness",
            "type": "integer",
            "@type": "BrightnessProperty",
            "unit": "percent",
            "minimum": 0,
            "maximum": 100,
        },
    }


def level(read_only):
    return {
        "name": "level",
        "value": 0,
        "metadata": {
            "title": "Level",
            "type": "number",
            "@type": "LevelProperty",
            "unit": "percent",
            "minimum": 0,
            "maximum": 100,
            "readOnly": read_only,
        },
    }


def sensor(name, title, semantic_type, value_type, value, unit=None, minimum=None, maximum=None):
    md = {
        "title": title,
        "type": value_type,
        "@type": semantic_type,
        "readOnly": True,
    }
    if unit is not None:
        md["unit"] = unit
    if minimum is not None:
        md["minimum"] = minimum
    if maximum is not None:
        md["maximum"] = maximum
    return {"name": name, "value": value, "metadata": md}


def _thing(title, types, properties, actions=None, events=None, **extra):
    t = {
        "@context": config.THING_CONTEXT,
        "@type": list(types),
        "title": title,
        "properties": properties,
        "actions": actions or [],
        "events": events or [],
    }
    t.update(extra)
    return t


# ============================================================================
# Things
# ============================================================================

def on_off_color_light():
    return _thing("Virtual On/Off Color Light", ["OnOffSwitch", "Light", "ColorControl"],
                  [on(), color(), color_temperature(), color_mode("color")])


def multi_level_switch():
    return _thing("Virtual Multi-level Switch", ["OnOffSwitch", "MultiLevelSwitch"],
                  [level(False), on()])


def dimmable_color_light():
    return _thing("Virtual Dimmable Color Light", ["OnOffSwitch", "Light", "ColorControl"],
                  [color(), brightness(), on()])


def on_off_switch():
    return _thing("Virtual On/Off Switch", ["OnOffSwitch"], [on()])


def binary_sensor():
    return _thing("Virtual Binary Sensor", ["BinarySensor"], [bool_sensor()])


def multi_level_sensor():
    return _thing("Virtual Multi-level Sensor", ["MultiLevelSensor"], [bool_sensor(), level(True)])


def smart_plug():
    return _thing("Virtual Smart Plug", ["OnOffSwitch", "EnergyMonitor", "SmartPlug", "MultiLevelSwitch"], [
        on(),
        level(False),
        sensor("instantaneousPower", "Power", "InstantaneousPowerProperty", "number", 0, "watt", 0, 3000),
        sensor("voltage", "Voltage", "VoltageProperty", "number", 0, "volt", 0, 240),
        sensor("current", "Current", "CurrentProperty", "number", 0, "ampere", 0, 13),
        sensor("frequency", "Frequency", "FrequencyProperty", "number", 0, "hertz", 0, 60),
    ])


def on_off_light():
    return _thing("Virtual On/Off Light", ["OnOffSwitch", "Light"], [on()])


def dimmable_light():
    return _thing("Virtual Dimmable Light", ["OnOffSwitch", "Light"], [on(), brightness()])


def generic_thing():
    return _thing("Virtual Thing", [], [
        {"name": "boolProperty", "value": True,
         "metadata": {"title": "Boolean", "type": "boolean"}},
        {"name": "stringProperty", "value": "blah",
         "metadata": {"title": "String", "type": "string"}},
        {"name": "numberProperty", "value": 12,
         "metadata": {"title": "Number", "type": "number"}},
        {"name": "numberUnitProperty", "value": 34,
         "metadata": {"title": "Number With Unit", "type": "number", "unit": "metres"}},
        {"name": "numberUnitMinMaxProperty", "value": 56,
         "metadata": {"title": "Number With Unit, Min, Max", "type": "number",
                      "unit": "metres", "minimum": 0, "maximum": 100}},
        {"name": "integerProperty", "value": 7,
         "metadata": {"title": "Integer", "type": "integer", "minimum": 0,
                      "maximum": 10, "multipleOf": 1}},
        {"name": "numberEnumProperty", "value": 0,
         "metadata": {"title": "Number Enum", "type": "number", "enum": [0, 10, 20, 30]}},
        {"name": "stringEnumProperty", "value": "string1",
         "metadata": {"title": "String Enum", "type": "string",
                      "enum": ["string1", "string2", "string3", "string4"]}},
        {"name": "readOnlyProperty", "value": True,
         "metadata": {"title": "Read-only", "type": "boolean", "readOnly": True}},
    ])


def actions_events_thing():
    return _thing(
        "Virtual Actions & Events Thing", [], [],
        actions=[
            {"name": "basic", "metadata": {"title": "No Input", "description": "An action with no inputs, fires an event"}},
            {"name": "single", "metadata": {"title": "Single Input", "input": {"type": "number"}}},
            {"name": "multiple", "metadata": {
                "title": "Multiple Inputs",
                "input": {
                    "type": "object",
                    "properties": {
                        "stringInput": {"type": "string"},
                        "booleanInput": {"type": "boolean"},
                    },
                },
            }},
            {"name": "advanced", "metadata": {
                "title": "Advanced Inputs",
                "input": {
                    "type": "object",
                    "required": ["numberInput"],
                    "properties": {
                        "numberInput": {"type": "number", "minimum": 0, "maximum": 100, "unit": "percent"},
                        "integerInput": {"type": "integer", "unit": "meters"},
                        "stringInput": {"type": "string"},
                        "booleanInput": {"type": "boolean"},
                        "enumInput": {"type": "string", "enum": ["enum string1", "enum string2", "enum string3"]},
                    },
                },
            }},
        ],
        events=[
            {"name": "virtualEvent", "metadata": {"description": "An event from a virtual thing", "type": "number"}},
        ],
    )


def on_off_switch_with_pin():
    return _thing("Virtual On/Off Switch (with PIN)", ["OnOffSwitch"], [on()],
                  pin={"required": True, "pattern": r"^\d{4}$"})


def on_off_color_temperature_light():
    return _thing("Virtual On/Off Color Temperature Light", ["OnOffSwitch", "Light", "ColorControl"],
                  [on(), color_temperature()])


def door_sensor():
    return _thing("Virtual Door Sensor", ["DoorSensor"],
                  [sensor("open", "Open", "OpenProperty", "boolean", False)])


def motion_sensor():
    return _thing("Virtual Motion Sensor", ["MotionSensor"],
                  [sensor("motion", "Motion", "MotionProperty", "boolean", False)])


def push_button():
    return _thing("Virtual Push Button", ["PushButton"],
                  [sensor("pushed", "Pushed", "PushedProperty", "boolean", False)],
                  events=[
                      {"name": "pressed", "metadata": {"@type": "PressedEvent", "description": "Button pressed"}},
                      {"name": "released", "metadata": {"@type": "ReleasedEvent", "description": "Button released"}},
                  ])


def leak_sensor():
    return _thing("Virtual Leak Sensor", ["LeakSensor"],
                  [sensor("leak", "Leak", "LeakProperty", "boolean", False)])


def temperature_sensor():
    return _thing("Virtual Temperature Sensor", ["TemperatureSensor"],
                  [sensor("temperature", "Temperature", "TemperatureProperty", "number", 20,
                          "degree celsius", -20, 50)])


def on_off_switch_with_credentials():
    return _thing("Virtual On/Off Switch (with credentials)", ["OnOffSwitch"], [on()],
                  credentialsRequired=True)


def camera():
    return _thing("Virtual Camera", ["Camera"], [{
        "name": "image",
        "value": None,
        "metadata": {
            "title": "Image",
            "@type": "ImageProperty",
            "readOnly": True,
            "links": [{"rel": "alternate", "href": _media(config.IMAGE_NAME), "mediaType": "image/png"}],
        },
    }])


def video_camera(ffmpeg_version=None):
    links = [{"rel": "alternate", "href": _media(config.DASH_MANIFEST), "mediaType": "application/dash+xml"}]
    if ffmpeg_version is not None and ffmpeg_version[0] >= 4:
        links.append({"rel": "alternate", "href": _media(config.HLS_PLAYLIST),
                      "mediaType": "application/vnd.apple.mpegurl"})
    return _thing("Virtual Video Camera", ["VideoCamera"], [
        {
            "name": "video",
            "value": None,
            "metadata": {
                "title": "Video",
                "@type": "VideoProperty",
                "readOnly": True,
                "links": links,
            },
        },
        {
            "name": "streamActive",
            "value": True,
            "metadata": {"title": "Streaming", "type": "boolean"},
        },
    ])


def alarm():
    return _thing("Virtual Alarm", ["Alarm"],
                  [sensor("alarm", "Alarm", "AlarmProperty", "boolean", False)],
                  actions=[
                      {"name": "trigger", "metadata": {"title": "Trigger", "description": "Trigger the alarm"}},
                      {"name": "silence", "metadata": {"title": "Silence", "description": "Silence the alarm"}},
                  ],
                  events=[
                      {"name": "alarmEvent", "metadata": {"@type": "AlarmEvent", "description": "Alarm state changed",
                                                          "type": "string"}},
                  ])


def thermostat():
    return _thing("Virtual Thermostat", ["Thermostat", "TemperatureSensor"], [
        sensor("temperature", "Temperature", "TemperatureProperty", "number", 20, "degree celsius", -20, 50),
        {"name": "heatingTargetTemperature", "value": 19,
         "metadata": {"title": "Heating Target", "type": "number", "@type": "TargetTemperatureProperty",
                      "unit": "degree celsius", "minimum": 10, "maximum": 38, "multipleOf": 0.1}},
        {"name": "coolingTargetTemperature", "value": 25,
         "metadata": {"title": "Cooling Target", "type": "number", "@type": "TargetTemperatureProperty",
                      "unit": "degree celsius", "minimum": 10, "maximum": 38, "multipleOf": 0.1}},
        {"name": "heatingCooling", "value": "off",
         "metadata": {"title": "Heating/Cooling", "type": "string", "@type": "HeatingCoolingProperty",
                      "enum": ["off", "heating", "cooling"], "readOnly": True}},
        {"name": "thermostatMode", "value": "off",
         "metadata": {"title": "Mode", "type": "string", "@type": "ThermostatModeProperty",
                      "enum": ["off", "heat", "cool", "auto"]}},
    ])


def lock():
    return _thing("Virtual Lock", ["Lock"], [
        {"name": "locked", "value": "locked",
         "metadata": {"title": "Current Lock State", "type": "string", "@type": "LockedProperty",
                      "enum": ["locked", "unlocked", "jammed", "unknown"], "readOnly": True}},
    ], actions=[
        {"name": "lock", "metadata": {"title": "Lock", "@type": "LockAction"}},
        {"name": "unlock", "metadata": {"title": "Unlock", "@type": "UnlockAction"}},
    ])


def humidity_sensor():
    return _thing("Virtual Humidity Sensor", ["HumiditySensor"],
                  [sensor("humidity", "Humidity", "HumidityProperty", "number", 45, "percent", 0, 100)])


def smoke_sensor():
    return _thing("Virtual Smoke Sensor", ["SmokeSensor"],
                  [sensor("smoke", "Smoke", "SmokeProperty", "boolean", False)])


def energy_monitor():
    return _thing("Virtual Energy Monitor", ["EnergyMonitor"], [
        sensor("instantaneousPower", "Power", "InstantaneousPowerProperty", "number", 0, "watt", 0, 10000),
        sensor("voltage", "Voltage", "VoltageProperty", "number", 230, "volt", 200, 250),
    ])


def barometric_pressure_sensor():
    return _thing("Virtual Barometric Pressure Sensor", ["BarometricPressureSensor"],
                  [sensor("pressure", "Pressure", "BarometricPressureProperty", "number", 1013,
                          "hectopascal", 950, 1050)])


def air_quality_sensor():
    return _thing("Virtual Air Quality Sensor", ["AirQualitySensor"],
                  [sensor("concentration", "CO2", "ConcentrationProperty", "integer", 400, "ppm", 300, 2000),
                   sensor("density", "PM2.5", "DensityProperty", "number", 5, "micrograms per cubic metre", 0, 100)])


def color_sensor():
    return _thing("Virtual Color Sensor", ["ColorSensor"],
                  [sensor("color", "Color", "ColorProperty", "string", "#ffffff")])


def virtual_things(ffmpeg_version=None):
    """
    The built-in catalog, freshly built on every call. Order matters: a
    template's index is part of its device id.
    """
    return [
        on_off_color_light(),
        multi_level_switch(),
        dimmable_color_light(),
        on_off_switch(),
        binary_sensor(),
        multi_level_sensor(),
        smart_plug(),
        on_off_light(),
        dimmable_light(),
        generic_thing(),
        actions_events_thing(),
        on_off_switch_with_pin(),
        on_off_color_temperature_light(),
        door_sensor(),
        motion_sensor(),
        push_button(),
        leak_sensor(),
        temperature_sensor(),
        on_off_switch_with_credentials(),
        camera(),
        video_camera(ffmpeg_version),
        alarm(),
        thermostat(),
        lock(),
        humidity_sensor(),
        smoke_sensor(),
        energy_monitor(),
        barometric_pressure_sensor(),
        air_quality_sensor(),
        color_sensor(),
    ]
