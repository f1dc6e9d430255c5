"""
Play a URL on a player, then stop it.

Set KODI_ADDRESS (e.g. "192.168.0.20" or "192.168.0.20:9090") in the
environment or in a .env file.

    python -m kodilink.examples.play_url http://example.com/stream.mp3
"""

import asyncio
import logging
import sys

from dotenv import load_dotenv

from kodilink.client.config import EnvironmentAddressStore
from kodilink.client.session import PlayerClient
from kodilink.protocol.gui import NotificationImage
from kodilink.shared.request_tracker import Signal


async def on_unsupported(message: str) -> None:
    print(f"Error: {message}", file=sys.stderr)


async def main(url: str) -> int:
    client = PlayerClient(EnvironmentAddressStore())
    client.callbacks.unsupported_handler = on_unsupported

    # Actions issued before the connection is up are dropped, so wait for it.
    signal = await client.call(client.connect, timeout=10)
    if signal != Signal.CONNECTED:
        logging.error(f"Could not connect: {signal.value}")
        return 1

    try:
        signal = await client.call(client.send_media, url, timeout=30)
        logging.info(f"Play: {signal.value}, player {client.player_id}")

        await client.call(
            client.send_message,
            "kodilink",
            f"Now playing {url}",
            NotificationImage.INFO,
            3000,
            timeout=10,
        )

        await asyncio.sleep(10)

        signal = await client.call(client.send_stop, timeout=30)
        logging.info(f"Stop: {signal.value}")
    finally:
        await client.disconnect()
    return 0


if __name__ == "__main__":
    load_dotenv()
    logging.basicConfig(level=logging.INFO)
    if len(sys.argv) != 2:
        print(__doc__, file=sys.stderr)
        sys.exit(2)
    sys.exit(asyncio.run(main(sys.argv[1])))
