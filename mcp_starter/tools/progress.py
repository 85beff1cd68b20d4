"""Long-running task tool that reports progress."""

from mcp_starter.errors import InvalidArgument
from mcp_starter.registry import Annotations, Category, HandlerDescriptor, ParameterSpec

MIN_STEPS = 1
MAX_STEPS = 100
STEPS_EXPECTED = f"an integer between {MIN_STEPS} and {MAX_STEPS}"


def build_long_task(step_seconds: float = 1.0) -> HandlerDescriptor:
    """Build the long_task descriptor with the given delay per step."""

    async def long_task(ctx, task_name: str, steps: int) -> str:
        # Bounds are checked before the first delay so nothing runs on bad input.
        if steps < MIN_STEPS:
            raise InvalidArgument("steps", STEPS_EXPECTED, f"steps must be at least {MIN_STEPS}")
        if steps > MAX_STEPS:
            raise InvalidArgument("steps", STEPS_EXPECTED,
                                  f"steps must not exceed {MAX_STEPS} to prevent excessive delays")

        for step in range(1, steps + 1):
            await ctx.sleep(step_seconds)
            await ctx.report_progress(step, steps, f"Step {step}/{steps} of {task_name}")

        return f'Task "{task_name}" completed successfully after {steps} steps!'

    return HandlerDescriptor(
        identifier="long_task",
        category=Category.TOOL,
        title="Long Running Task",
        description="Simulate a long-running task with progress updates",
        parameters=(
            ParameterSpec("task_name", description="Name for this task"),
            ParameterSpec("steps", type="integer", required=False, default=5,
                          description="Number of steps to simulate"),
        ),
        annotations=Annotations(read_only=True, idempotent=True),
        invoke=long_task,
    )
