"""Run picbot against a console channel (stdin in, stdout out)."""

import argparse
import asyncio
import sys
from pathlib import Path

from loguru import logger

from picbot.bot import build_bot
from picbot.bus.events import InboundMessage
from picbot.bus.queue import MessageBus
from picbot.config.loader import load_config


async def _read_console(bus: MessageBus) -> None:
    loop = asyncio.get_running_loop()
    while True:
        line = await loop.run_in_executor(None, sys.stdin.readline)
        if not line:
            return
        await bus.publish_inbound(
            InboundMessage(channel="cli", sender_id="user", chat_id="direct", content=line.rstrip("\n"))
        )


async def _write_console(bus: MessageBus) -> None:
    while True:
        msg = await bus.consume_outbound()
        print(msg.content, flush=True)
        bus.outbound_done()


async def _serve(config_path: Path | None) -> None:
    config = load_config(config_path)
    bus = MessageBus()
    bot = build_bot(config, bus)

    writer = asyncio.create_task(_write_console(bus))
    runner = asyncio.create_task(bot.run())
    try:
        await _read_console(bus)
        # Let queued commands and their replies finish before exiting on EOF.
        await bus.join_inbound()
        await bus.join_outbound()
    finally:
        bot.stop()
        await runner
        writer.cancel()


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--config", type=Path, default=None)
    parser.add_argument("--log-level", default="INFO")
    args = parser.parse_args()

    logger.remove()
    logger.add(sys.stderr, level=args.log_level.upper())

    try:
        asyncio.run(_serve(args.config))
    except ValueError as e:
        logger.error("Invalid configuration: {}", e)
        return 1
    except KeyboardInterrupt:
        pass
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
