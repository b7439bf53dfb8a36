"""Monitor Nest structures over the event stream.

This example demonstrates:
- Subscribing to structure changes
- Handling connection errors reported to the callback
- Custom reconnect delays
- Stopping the stream cleanly
"""

import asyncio
import logging
from datetime import datetime

from pynestrest import NestClient, ReconnectBackoff


def on_structures(structures, error) -> None:
    """Print every structure update or connection error."""
    timestamp = datetime.now().strftime("%H:%M:%S")

    if error is not None:
        print(f"[{timestamp}] Connection failed: {error.kind}: {error.description}")
        return

    for structure in structures.values():
        print(f"[{timestamp}] {structure.name}: {structure.away}")


async def main() -> None:
    """Stream structure updates for ten minutes."""
    logging.basicConfig(level=logging.INFO)

    async with NestClient(token="c.your-access-token") as client:
        stream = client.structures_stream(
            on_structures,
            backoff=ReconnectBackoff(base_delay=2.0, max_delay=120.0),
        )
        stream.start()

        try:
            await asyncio.sleep(600)
        finally:
            # Streams are also stopped when the client exits
            await stream.stop()

        print(f"Stream state: {stream.state.value}")


if __name__ == "__main__":
    asyncio.run(main())
