"""Prompt form helpers (suggestions and style modifiers)."""


def add_suggestion(suggestion: str, prompt: str) -> str:
    """Append a suggestion to the prompt, comma-separated.

    Args:
        suggestion: Suggested text
        prompt: Current prompt text

    Returns:
        The new prompt text
    """
    if prompt:
        return f"{prompt}, {suggestion}"
    return suggestion


def add_style_modifier(modifier: str, prompt: str) -> str:
    """Append a style modifier unless the prompt already mentions it.

    The check is case-insensitive.

    Args:
        modifier: Style keyword such as ``"watercolor"``
        prompt: Current prompt text

    Returns:
        The new prompt text
    """
    if prompt and modifier.lower() in prompt.lower():
        return prompt
    return add_suggestion(modifier, prompt)
