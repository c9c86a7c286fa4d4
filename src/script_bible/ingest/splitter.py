"""Split manuscripts into lines."""

from ..models.lines import RawLine


def split_into_lines(text: str) -> list[RawLine]:
    """
    Split text into stripped, non-empty lines.

    Line indexes count every line of the original text, so blank lines
    leave gaps in the numbering.
    """
    lines: list[RawLine] = []
    # str.strip keeps U+FEFF, which would hide a header on the first line
    text = text.removeprefix("\ufeff")

    for index, raw in enumerate(text.split("\n")):
        stripped = raw.strip()
        if stripped:
            lines.append(RawLine(index=index, text=stripped))

    return lines
