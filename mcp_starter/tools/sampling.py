"""Tool that asks the caller's model a question through sampling."""

from mcp_starter.errors import InvalidArgument, Unsupported
from mcp_starter.registry import Annotations, Category, HandlerDescriptor, ParameterSpec


async def ask_llm(ctx, prompt: str, max_tokens: int) -> str:
    """Ask the connected LLM a question using sampling."""
    if max_tokens < 1:
        raise InvalidArgument("max_tokens", "a positive integer", "max_tokens must be at least 1")

    try:
        text = await ctx.sample(prompt, max_tokens)
    except Unsupported as e:
        return f"Sampling not supported: {e.message}"

    if text is None:
        text = "[non-text response]"
    return f"LLM Response: {text}"


ASK_LLM = HandlerDescriptor(
    identifier="ask_llm",
    category=Category.TOOL,
    title="Ask LLM",
    description="Ask the connected LLM a question using sampling",
    parameters=(
        ParameterSpec("prompt", description="The question or prompt to send to the LLM"),
        ParameterSpec("max_tokens", type="integer", required=False, default=100,
                      description="Maximum tokens in response"),
    ),
    annotations=Annotations(read_only=True, idempotent=False),
    invoke=ask_llm,
)
