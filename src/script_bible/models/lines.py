"""Line-level models produced by ingestion and classification."""

from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True)
class RawLine:
    """A non-empty, stripped line of the manuscript."""

    index: int  # 0-based line number in the original text
    text: str


class LineKind(str, Enum):
    """What a line contributes to the extraction pass."""

    SCENE_HEADER = "scene_header"
    ENTITY_INTRO = "entity_intro"
    DIALOGUE = "dialogue"
    PROP = "prop"
    LIGHTING = "lighting"
    NARRATIVE = "narrative"


@dataclass(frozen=True)
class ClassifiedLine:
    """A line together with its kind and the value captured by the rule that matched."""

    line: RawLine
    kind: LineKind
    value: str = ""

    @property
    def text(self) -> str:
        return self.line.text
