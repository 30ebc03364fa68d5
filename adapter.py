"""the adapter: device registry, pairing checks, teardown"""

import random
import shutil

import config
from actions import ActionExecutor
from config import AdapterConfig, load_settings
from custom_things import normalize_thing
from devices import VirtualDevice
from errors import InvalidCredentials, InvalidPin, UnknownDevice
from gateway import Gateway
from logs import get_logger
from storage import JsonFileStorage
from stream import StreamSupervisor
from templates import virtual_things

logger = get_logger(__name__)


class VirtualThingsAdapter:
    """
    Owns every simulated thing.

    Devices are keyed by id in discovery order; adding an id that is
    already present does nothing. unload() must be called on shutdown so no
    drift timer, pending action or ffmpeg process outlives the adapter.
    """

    def __init__(self, gateway=None, adapter_config=None, storage=None, settings=None,
                 supervisor=None, executor=None, rng=None):
        self.gateway = gateway or Gateway()
        if adapter_config is None or isinstance(adapter_config, dict):
            adapter_config = AdapterConfig.from_gateway(adapter_config)
        self.config = adapter_config
        self.settings = settings or load_settings()
        self.rng = rng or random.Random()
        self.executor = executor or ActionExecutor(rng=self.rng)

        self._own_storage = False
        self.storage = None
        if self.config.persist_property_values:
            if storage is None:
                storage = JsonFileStorage(self.settings.data_dir)
                storage.start()
                self._own_storage = True
            self.storage = storage

        if supervisor is None:
            supervisor = StreamSupervisor(
                self.settings.media_dir,
                source=self.settings.stream_source,
                executable=self.settings.ffmpeg,
                debug=self.settings.transcode_debug,
            )
        self.supervisor = supervisor

        self.devices = {}
        self._started = False
        self._unloaded = False

    @property
    def name(self):
        return config.ADAPTER_ID

    def start(self):
        """Prepare media, create every thing, bring the stream up if wanted."""
        if self._started:
            return
        self._started = True
        self._prepare_media()
        self.add_all_things()

    def _prepare_media(self):
        media_dir = self.settings.media_dir
        image = media_dir / config.IMAGE_NAME
        source = self.settings.image_source
        try:
            media_dir.mkdir(parents=True, exist_ok=True)
            if not image.exists() and source.exists():
                shutil.copyfile(source, image)
        except OSError as e:
            logger.error("media_setup_failed", media_dir=str(media_dir), error=str(e))

    def handle_device_added(self, device):
        self.devices[device.id] = device
        logger.debug("device_added", device_id=device.id, title=device.title)
        self.gateway.handle_device_added(device)

    def add_thing(self, device_id, template):
        existing = self.devices.get(device_id)
        if existing is not None:
            return existing
        device = VirtualDevice(
            device_id, template,
            gateway=self.gateway,
            storage=self.storage,
            randomize=self.config.randomize_property_values,
            executor=self.executor,
            supervisor=self.supervisor,
            rng=self.rng,
        )
        self.handle_device_added(device)
        prop = device.properties.get("streamActive")
        if self._started and prop is not None and prop.value:
            self.supervisor.start()
        return device

    def add_all_things(self):
        if self._unloaded:
            return
        version = self.supervisor.version if self.supervisor is not None else None
        for i, template in enumerate(virtual_things(version)):
            self.add_thing(f"{config.BUILTIN_ID_PREFIX}{i}", template)

        for raw in self.config.custom_things:
            try:
                device_id, template = normalize_thing(raw)
            except Exception:
                logger.exception("custom_thing_skipped", thing=raw)
                continue
            if device_id in self.devices:
                continue
            self.add_thing(device_id, template)

    def start_pairing(self, timeout=None):
        logger.info("pairing_started", timeout=timeout)
        self.add_all_things()

    def cancel_pairing(self):
        logger.info("pairing_cancelled")

    def get_device(self, device_id):
        return self.devices.get(device_id)

    def require_device(self, device_id):
        device = self.devices.get(device_id)
        if device is None:
            raise UnknownDevice(device_id)
        return device

    def remove_thing(self, device_id):
        device = self.devices.pop(device_id, None)
        if device is None:
            return False
        device.close()
        if "streamActive" in device.properties:
            self.supervisor.stop()
        logger.info("device_removed", device_id=device_id)
        return True

    def set_pin(self, device_id, pin):
        device = self.get_device(device_id)
        if device is None or not device.pin_required or pin != config.PIN:
            raise InvalidPin(device_id)

    def set_credentials(self, device_id, username, password):
        device = self.get_device(device_id)
        if (device is None or not device.credentials_required
                or username != config.USERNAME or password != config.PASSWORD):
            raise InvalidCredentials(device_id)

    def unload(self):
        if self._unloaded:
            return
        self._unloaded = True
        for device in self.devices.values():
            device.close()
        self.supervisor.shutdown()
        if self._own_storage:
            self.storage.stop()
        self.devices.clear()
        logger.info("adapter_unloaded")
