"""Calculator tool, only registered once load_bonus_tool has been called."""

import math

from mcp_starter.registry import Annotations, Category, HandlerDescriptor, ParameterSpec

OPERATIONS = ("add", "subtract", "multiply", "divide")


def calculate(a: float, b: float, operation: str) -> float:
    """
    Perform basic arithmetic operations.

    Division by zero yields NaN instead of raising.

    Args:
        a: First number
        b: Second number
        operation: One of OPERATIONS

    Returns:
        The numeric result
    """
    if operation == "add":
        return a + b
    elif operation == "subtract":
        return a - b
    elif operation == "multiply":
        return a * b
    elif operation == "divide":
        return a / b if b != 0 else math.nan
    return math.nan


def format_number(value: float) -> str:
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if value.is_integer():
            return str(int(value))
    return str(value)


async def bonus_calculator(ctx, a: float, b: float, operation: str) -> str:
    result = calculate(a, b, operation)
    return f"{format_number(a)} {operation} {format_number(b)} = {format_number(result)}"


def bonus_calculator_descriptor() -> HandlerDescriptor:
    return HandlerDescriptor(
        identifier="bonus_calculator",
        category=Category.TOOL,
        title="Bonus Calculator",
        description="A calculator that was dynamically loaded",
        parameters=(
            ParameterSpec("a", type="number", description="First number"),
            ParameterSpec("b", type="number", description="Second number"),
            ParameterSpec("operation", type="enum", choices=OPERATIONS,
                          description="Mathematical operation to perform"),
        ),
        annotations=Annotations(read_only=True, idempotent=True),
        invoke=bonus_calculator,
    )
