"""Prompt templates producing message sequences for a language model."""

from typing import Dict, List, Tuple

from mcp_starter.registry import Category, HandlerDescriptor, ParameterSpec

GREETING_STYLES = {
    "formal": "Please compose a formal, professional greeting for {name}.",
    "casual": "Write a casual, friendly hello to {name}.",
    "enthusiastic": "Create an excited, enthusiastic greeting for {name}!",
}

REVIEW_FOCUS = {
    "security": "Focus on security vulnerabilities and potential exploits.",
    "performance": "Focus on performance optimizations and efficiency issues.",
    "readability": "Focus on code clarity, naming, and maintainability.",
    "all": "Provide a comprehensive review covering security, performance, and readability.",
}

LANGUAGES = ["python", "javascript", "typescript", "go", "rust", "java", "csharp"]

# (prompt, argument) -> values offered for completion
COMPLETIONS: Dict[Tuple[str, str], List[str]] = {
    ("greet", "style"): list(GREETING_STYLES),
    ("code_review", "focus"): list(REVIEW_FOCUS),
    ("code_review", "language"): LANGUAGES,
}


def user_message(text: str) -> dict:
    return {"role": "user", "content": text}


async def greet(ctx, name: str, style: str) -> List[dict]:
    template = GREETING_STYLES.get(style, GREETING_STYLES["casual"])
    return [user_message(template.format(name=name))]


async def code_review(ctx, code: str, language: str, focus: str) -> List[dict]:
    instruction = REVIEW_FOCUS.get(focus, REVIEW_FOCUS["all"])
    text = (
        f"Please review the following {language} code. {instruction}\n"
        "\n"
        f"```{language}\n"
        f"{code}\n"
        "```"
    )
    return [user_message(text)]


def complete_argument(prompt: str, argument: str, value: str) -> List[str]:
    """Values for a prompt argument that start with what was typed so far."""
    candidates = COMPLETIONS.get((prompt, argument), [])
    prefix = (value or "").lower()
    return [c for c in candidates if c.lower().startswith(prefix)]


PROMPTS = [
    HandlerDescriptor(
        identifier="greet",
        category=Category.PROMPT,
        title="Greeting Prompt",
        description="Generate a personalized greeting message with customizable style",
        parameters=(
            ParameterSpec("name", description="Name of the person to greet"),
            ParameterSpec("style", required=False, default="casual",
                          description="The greeting style (formal, casual, enthusiastic)"),
        ),
        invoke=greet,
    ),
    HandlerDescriptor(
        identifier="code_review",
        category=Category.PROMPT,
        title="Code Review",
        description="Request a code review with specific focus areas",
        parameters=(
            ParameterSpec("code", description="The code to review"),
            ParameterSpec("language", description="Programming language"),
            ParameterSpec("focus", required=False, default="all",
                          description="What to focus on (security, performance, readability, all)"),
        ),
        invoke=code_review,
    ),
]
