#!/usr/bin/env python3
"""virtual things main"""

import argparse
import asyncio
import signal

from adapter import VirtualThingsAdapter
from config import AdapterConfig, load_settings
from gateway import LoggingGateway
from logs import configure_logging, get_logger

logger = get_logger(__name__)


async def main(duration=30, randomize=False, persist=False):
    settings = load_settings()
    adapter = VirtualThingsAdapter(
        gateway=LoggingGateway(),
        adapter_config=AdapterConfig(
            randomize_property_values=randomize,
            persist_property_values=persist,
        ),
        settings=settings,
    )

    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop.set)
        except NotImplementedError:
            pass

    adapter.start()
    logger.info("simulating", things=len(adapter.devices), duration=duration)

    try:
        if duration:
            try:
                await asyncio.wait_for(stop.wait(), timeout=duration)
            except asyncio.TimeoutError:
                pass
        else:
            await stop.wait()
    finally:
        adapter.unload()


def run():
    parser = argparse.ArgumentParser(description="Virtual things simulator")
    parser.add_argument("-d", "--duration", type=float, default=30, help="seconds to run, 0 runs until interrupted")
    parser.add_argument("-r", "--randomize", action="store_true", help="randomize property values every 30s")
    parser.add_argument("-p", "--persist", action="store_true", help="persist property values across restarts")
    parser.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING, ...")
    args = parser.parse_args()

    settings = load_settings()
    configure_logging(args.log_level or settings.log_level, json_output=settings.log_json)

    try:
        asyncio.run(main(args.duration, args.randomize, args.persist))
    except KeyboardInterrupt:
        logger.info("interrupted")


if __name__ == "__main__":
    run()
