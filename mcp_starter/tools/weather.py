"""Simulated weather tool with structured output."""

import random

from mcp_starter.registry import Annotations, Category, HandlerDescriptor, ParameterSpec

CONDITIONS = ["sunny", "cloudy", "rainy", "windy"]

WEATHER_SCHEMA = {
    "type": "object",
    "properties": {
        "location": {"type": "string", "description": "City the weather is for"},
        "temperature": {"type": "integer", "description": "Temperature in degrees"},
        "unit": {"type": "string", "description": "Temperature unit"},
        "conditions": {"type": "string", "enum": CONDITIONS},
        "humidity": {"type": "integer", "description": "Relative humidity in percent"},
    },
    "required": ["location", "temperature", "unit", "conditions", "humidity"],
}


def get_weather(city: str, rng: random.Random = None) -> dict:
    """
    Generate weather data for a city.

    Args:
        city: City name
        rng: Random source, the module generator when omitted

    Returns:
        Dictionary matching WEATHER_SCHEMA
    """
    rng = rng or random
    return {
        "location": city,
        "temperature": 15 + rng.randrange(20),
        "unit": "celsius",
        "conditions": rng.choice(CONDITIONS),
        "humidity": 40 + rng.randrange(40),
    }


async def _get_weather(ctx, city: str) -> dict:
    return get_weather(city)


GET_WEATHER = HandlerDescriptor(
    identifier="get_weather",
    category=Category.TOOL,
    title="Get Weather",
    description="Get the current weather for a city",
    parameters=(
        ParameterSpec("city", description="City name to get weather for"),
    ),
    output_schema=WEATHER_SCHEMA,
    # Simulated: results vary between calls and nothing external is touched.
    annotations=Annotations(read_only=True, idempotent=False),
    invoke=_get_weather,
)
