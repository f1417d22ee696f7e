# prompts.py
from __future__ import annotations

SYSTEM_PROMPT = (
    "You are a professional text style transfer assistant that helps rewrite content "
    "in different styles while preserving the original meaning. "
    "Only respond with the transformed text without any explanations or additional comments."
)

VALIDATION_PROMPT = "Hello, this is a test."


def preservation_guidance(to_style: str, preservation_percentage: int) -> str:
    """
    How much of the original style to keep, as a phrase for the prompt.
    50 → balanced, <50 → lean to target style, >50 → lean to original.
    """
    pct = int(preservation_percentage)
    if pct == 50:
        return "with a balanced mix of original and target styles"
    if pct < 50:
        return (
            f"with a stronger emphasis on the {to_style} style "
            f"({100 - pct}% {to_style}, {pct}% original)"
        )
    return (
        f"while preserving more of the original style "
        f"({pct}% original, {100 - pct}% {to_style})"
    )


def build_prompt(
    original_text: str,
    from_style: str | None,
    to_style: str,
    preservation_percentage: int = 50,
) -> tuple[str, str]:
    """
    Builds (system_prompt, user_prompt) for every provider.

    from_style 가 없으면 "to X style" 형태로만 지시한다.
    """
    guidance = preservation_guidance(to_style, preservation_percentage)
    if from_style:
        head = f"Transform the following text from {from_style} style to {to_style} style {guidance}."
    else:
        head = f"Transform the following text to {to_style} style {guidance}."

    user_prompt = (
        f"{head} Keep the original meaning intact. "
        f"Only respond with the transformed text, nothing else. "
        f'The text is: "{original_text}"'
    )
    return SYSTEM_PROMPT, user_prompt
