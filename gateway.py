"""hooks the host gateway implements"""

from logs import get_logger

logger = get_logger(__name__)


class Gateway:
    """
    Everything the simulation pushes to its host.

    The default implementation does nothing; a host overrides the calls it
    cares about.
    """

    def handle_device_added(self, device):
        pass

    def property_changed(self, prop):
        pass

    def event_notify(self, event):
        pass

    def action_notify(self, action):
        pass


class LoggingGateway(Gateway):
    """gateway stand-in that just logs what it is told"""

    def handle_device_added(self, device):
        logger.info("device_added", device_id=device.id, title=device.title)

    def property_changed(self, prop):
        logger.info("property_changed", device_id=prop.device.id, property=prop.name, value=prop.value)

    def event_notify(self, event):
        logger.info("event", device_id=event.device.id, event=event.name, data=event.data)

    def action_notify(self, action):
        logger.info("action", device_id=action.device.id, action=action.name, status=action.status)
