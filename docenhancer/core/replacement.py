"""
Content replacement: splice a rewrite over the original text.
"""

from docenhancer.models.selection import ReplacementResult
from docenhancer.utils.logger import get_logger

logger = get_logger(__name__)

NOT_FOUND_ERROR = "Could not locate text to replace"


def replace_first(
    content: str,
    original: str,
    replacement: str,
    require_unique: bool = False,
) -> ReplacementResult:
    """
    Replace the first occurrence of ``original`` in ``content``.

    Args:
        content: Text to edit
        original: Exact text to find
        replacement: Text to splice in
        require_unique: Refuse to replace when ``original`` occurs more than once

    Returns:
        ReplacementResult; ``content`` is unchanged when ``replaced`` is False
    """
    occurrences = content.count(original) if original else 0

    if occurrences == 0:
        return ReplacementResult(content=content, replaced=False, error=NOT_FOUND_ERROR)

    if occurrences > 1:
        if require_unique:
            return ReplacementResult(
                content=content,
                replaced=False,
                occurrences=occurrences,
                error=f"Text to replace is ambiguous ({occurrences} occurrences)",
            )
        logger.warning(f"Text to replace occurs {occurrences} times, replacing the first")

    index = content.index(original)
    spliced = content[:index] + replacement + content[index + len(original) :]
    return ReplacementResult(content=spliced, replaced=True, occurrences=occurrences)
