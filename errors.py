"""errors surfaced to the gateway"""


class VirtualThingsError(Exception):
    pass


class ReadOnlyViolation(VirtualThingsError):
    def __init__(self, device_id, name):
        super().__init__(f"Read-only property: {device_id}/{name}")
        self.device_id = device_id
        self.name = name


class InvalidPin(VirtualThingsError):
    def __init__(self, device_id):
        super().__init__(f"Invalid PIN for {device_id}")
        self.device_id = device_id


class InvalidCredentials(VirtualThingsError):
    def __init__(self, device_id):
        super().__init__(f"Invalid credentials for {device_id}")
        self.device_id = device_id


class UnknownDevice(VirtualThingsError, KeyError):
    def __str__(self):
        return f"Unknown device: {self.args[0]}"


class UnknownProperty(VirtualThingsError, KeyError):
    def __str__(self):
        return f"Unknown property: {self.args[0]}"


class UnknownAction(VirtualThingsError, KeyError):
    def __str__(self):
        return f"Unknown action: {self.args[0]}"
