"""
``{{IMAGE_n}}`` placeholder handling for AI-converted PDFs.

The model marks where each extracted image belongs with a zero-based
placeholder. Placeholders without a matching image are dropped.
"""

import html as html_lib
import re
from collections.abc import Sequence

from docenhancer.models.document import DocumentImage
from docenhancer.utils.logger import get_logger

logger = get_logger(__name__)

PLACEHOLDER_PATTERN = re.compile(r"\{\{IMAGE_(\d+)\}\}")

# Placeholder plus the whitespace after it, used when removing unbacked ones
PLACEHOLDER_WITH_TRAILING_WS = re.compile(r"\{\{IMAGE_(\d+)\}\}\s*")


def placeholder(index: int) -> str:
    return f"{{{{IMAGE_{index}}}}}"


def count_placeholders(text: str) -> int:
    return len(PLACEHOLDER_PATTERN.findall(text or ""))


def image_alt(index: int, file_name: str) -> str:
    return f"Image {index + 1} from {file_name}"


def image_tag(image: DocumentImage, alt: str | None = None, with_size: bool = True) -> str:
    alt_text = html_lib.escape(alt if alt is not None else image.alt, quote=True)
    size = f' width="{image.width}" height="{image.height}"' if with_size else ""
    return f'<img src="{html_lib.escape(image.data, quote=True)}" alt="{alt_text}"{size} />'


def reconcile_image_placeholders(text: str, image_count: int) -> str:
    """
    Remove placeholders whose index has no extracted image.

    Valid placeholders (index < image_count) are kept for later
    substitution; invalid ones are removed along with trailing whitespace.
    """
    found = count_placeholders(text)
    if found > image_count:
        logger.warning(
            f"Removing {found - image_count} extra image placeholders "
            f"({found} found, {image_count} images extracted)"
        )

    def _drop_invalid(match: re.Match) -> str:
        return match.group(0) if int(match.group(1)) < image_count else ""

    return PLACEHOLDER_WITH_TRAILING_WS.sub(_drop_invalid, text)


def substitute_image_placeholders(
    html: str,
    images: Sequence[DocumentImage],
    file_name: str | None = None,
    with_size: bool = True,
) -> str:
    """
    Replace ``{{IMAGE_i}}`` with an ``<img>`` tag for image ``i``.

    When ``file_name`` is given the alt text is ``Image {i+1} from {file_name}``,
    otherwise the image's own alt text is used. Placeholders left over after
    substitution are removed.
    """

    def _image_for(match: re.Match) -> str:
        index = int(match.group(1))
        if index >= len(images):
            return ""
        image = images[index]
        alt = image_alt(index, file_name) if file_name else None
        return image_tag(image, alt=alt, with_size=with_size)

    return PLACEHOLDER_PATTERN.sub(_image_for, html or "")
