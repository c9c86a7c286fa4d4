"""Visual-state tag extraction.

Visual states are short shot or appearance notes embedded in text, either
as a numbered list ("1. 特写 2. 远景") or as bracketed tags ("【浑身是伤】").
"""

from .patterns import CHINESE_SCRIPT, PatternTable


def extract_visual_states(text: str, table: PatternTable = CHINESE_SCRIPT) -> list[str]:
    """Extract visual-state tags from text.

    Numbered-list fragments win; bracketed tags are only consulted when the
    text has no numbered list. Order follows the text, duplicates are kept.
    """
    visuals = [m.group(1).strip() for m in table.numbered_visual_re.finditer(text)]

    if not visuals:
        for match in table.bracket_visual_re.finditer(text):
            tag = match.group(1).strip()
            if tag and tag not in table.ignored_bracket_tags:
                visuals.append(tag)

    return visuals


def is_numbered_line(text: str, table: PatternTable = CHINESE_SCRIPT) -> bool:
    """Check if a line is itself a numbered-list item."""
    return table.numbered_line_re.match(text) is not None
