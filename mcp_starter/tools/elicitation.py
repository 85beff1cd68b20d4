"""Tools that ask the user for input mid-call.

Two elicitation modes are shown:

- form: the client renders a small typed form from a JSON schema
- url: the client opens a web page, e.g. a feedback form

The user can accept, decline or cancel. All three are ordinary outcomes
and each gets its own message.
"""

import uuid
from urllib.parse import quote

from mcp_starter.errors import Unsupported
from mcp_starter.registry import Annotations, Category, HandlerDescriptor, ParameterSpec

FEEDBACK_URL = "https://github.com/SamMorrowDrums/mcp-starters/issues/new?template=workshop-feedback.yml"


def confirmation_schema(destructive: bool) -> dict:
    return {
        "type": "object",
        "properties": {
            "confirm": {
                "type": "boolean",
                "title": "Confirm",
                "description": "Confirm this destructive action" if destructive else "Confirm the action",
            },
            "reason": {
                "type": "string",
                "title": "Reason",
                "description": "Optional reason for your choice",
            },
        },
        "required": ["confirm"],
    }


async def confirm_action(ctx, action: str, destructive: bool) -> str:
    """Request user confirmation before proceeding."""
    if destructive:
        message = f"⚠️ DESTRUCTIVE ACTION - Please confirm: {action}"
    else:
        message = f"Please confirm: {action}"

    try:
        response = await ctx.elicit_form(message, confirmation_schema(destructive))
    except Unsupported:
        return "Elicitation not supported by this client."

    content = response.content or {}
    if response.action == "accept":
        if content.get("confirm") is True:
            reason = content.get("reason")
            if not isinstance(reason, str) or not reason:
                reason = "No reason provided"
            return f"Action confirmed: {action}\nReason: {reason}"
        return f"Action declined by user: {action}"
    if response.action == "decline":
        return f"User declined to respond for: {action}"
    return f"User cancelled elicitation for: {action}"


def feedback_url(question: str) -> str:
    if not question:
        return FEEDBACK_URL
    return f"{FEEDBACK_URL}&title={quote(question, safe='')}"


async def get_feedback(ctx, question: str) -> str:
    """Send the user to the feedback form."""
    url = feedback_url(question)

    try:
        response = await ctx.elicit_url(
            "Please provide feedback on MCP Starters by completing the form at the URL below:",
            url,
            f"feedback-{uuid.uuid4().hex}",
        )
    except Unsupported:
        return f"Elicitation not supported by this client.\n\nYou can provide feedback directly at: {url}"

    if response.action == "accept":
        return "Thank you for providing feedback! Your input helps improve MCP Starters."
    if response.action == "decline":
        return f"No problem! Feel free to provide feedback anytime at: {url}"
    return "Feedback request cancelled."


CONFIRM_ACTION = HandlerDescriptor(
    identifier="confirm_action",
    category=Category.TOOL,
    title="Confirm Action",
    description="Request user confirmation before proceeding",
    parameters=(
        ParameterSpec("action", description="Description of the action to confirm"),
        ParameterSpec("destructive", type="boolean", required=False, default=False,
                      description="Whether the action is destructive"),
    ),
    annotations=Annotations(read_only=True, idempotent=False),
    invoke=confirm_action,
)

GET_FEEDBACK = HandlerDescriptor(
    identifier="get_feedback",
    category=Category.TOOL,
    title="Get Feedback",
    description="Request feedback from the user",
    parameters=(
        ParameterSpec("question", description="The question to ask the user"),
    ),
    # Opens an external URL.
    annotations=Annotations(read_only=True, idempotent=False, open_world=True),
    invoke=get_feedback,
)
