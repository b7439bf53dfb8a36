"""Basic usage example for pynestrest library."""

import asyncio
from datetime import UTC, datetime, timedelta

from pynestrest import AwayMode, HvacMode, NestClient


async def main() -> None:
    """Demonstrate basic usage of pynestrest."""
    # The access token is obtained through Nest's OAuth flow beforehand
    async with NestClient(token="c.your-access-token") as client:
        print("Connected to Nest API")

        # Get all structures
        structures = await client.get_structures()
        print(f"Found {len(structures)} structure(s)")

        for structure in structures.values():
            print(f"\nStructure: {structure.name}")
            print(f"  Structure ID: {structure.structure_id}")
            print(f"  Away: {structure.away}")
            print(f"  Thermostats: {len(structure.thermostats)}")

            print("\nSetting structure to home...")
            await structure.set_away(AwayMode.HOME)

            # Let the home prepare for an arrival in 30-45 minutes
            now = datetime.now(UTC)
            await structure.set_eta(
                "example-trip",
                now + timedelta(minutes=30),
                now + timedelta(minutes=45),
            )

        # Get all thermostats
        thermostats = await client.get_thermostats()
        for thermostat in thermostats.values():
            print(f"\nThermostat: {thermostat}")
            print(f"  Mode: {thermostat.hvac_mode}")
            print(f"  Ambient: {thermostat.ambient_temperature_c} C")
            print(f"  Target: {thermostat.target_temperature_c} C")

            if thermostat.is_online:
                print("Switching to heat at 21.5 C...")
                await thermostat.set_hvac_mode(HvacMode.HEAT)
                await thermostat.set_target_temperature_c(21.5)

        print(f"\nRequests are sent to {client.api.base_url}")


if __name__ == "__main__":
    asyncio.run(main())
