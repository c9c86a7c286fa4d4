"""Line classification for the local extraction pass.

Rules are checked in strict priority order; the first rule that matches
decides the kind of the line:

1. Scene header
2. Entity introduction ("角色：名字") or dialogue ("名字：台词")
3. Prop / lighting keyword
4. Plain narrative
"""

from ..config import get_settings
from ..models.lines import ClassifiedLine, LineKind, RawLine
from .patterns import CHINESE_SCRIPT, PatternTable


class LineClassifier:
    """Classifies manuscript lines using a pattern table.

    Usage:
        classifier = LineClassifier()
        classified = classifier.classify_all(split_into_lines(text))
    """

    def __init__(
        self,
        table: PatternTable | None = None,
        max_intro_name_length: int | None = None,
        max_dialogue_name_length: int | None = None,
    ):
        """Initialize the classifier.

        Args:
            table: Keyword/pattern table (default: Chinese screenplay table)
            max_intro_name_length: Intro names must be shorter than this
            max_dialogue_name_length: Dialogue speaker names must be shorter than this
        """
        settings = get_settings()
        self.table = table or CHINESE_SCRIPT
        self.max_intro_name_length = max_intro_name_length or settings.max_intro_name_length
        self.max_dialogue_name_length = (
            max_dialogue_name_length or settings.max_dialogue_name_length
        )

    def classify(self, line: RawLine) -> ClassifiedLine:
        """Classify a single line."""
        text = line.text

        scene_name = self.match_scene_header(text)
        if scene_name is not None:
            return ClassifiedLine(line, LineKind.SCENE_HEADER, scene_name)

        name = self.match_intro(text)
        if name is not None:
            return ClassifiedLine(line, LineKind.ENTITY_INTRO, name)

        name = self.match_dialogue(text)
        if name is not None:
            return ClassifiedLine(line, LineKind.DIALOGUE, name)

        if any(kw in text for kw in self.table.prop_keywords):
            return ClassifiedLine(line, LineKind.PROP, self._label_value(text))

        if any(kw in text for kw in self.table.lighting_keywords):
            return ClassifiedLine(line, LineKind.LIGHTING, self._label_value(text))

        return ClassifiedLine(line, LineKind.NARRATIVE)

    def classify_all(self, lines: list[RawLine]) -> list[ClassifiedLine]:
        """Classify lines in manuscript order."""
        return [self.classify(line) for line in lines]

    def match_scene_header(self, text: str) -> str | None:
        """Return the scene name if the line is a scene header."""
        for pattern in self.table.scene_header_res:
            match = pattern.match(text)
            if match:
                captured = match.group(1).strip() if match.groups() and match.group(1) else ""
                return captured or text

        if text.startswith(self.table.bracket_scene_open) and self.table.bracket_scene_marker in text:
            stripped = text
            for char in self.table.bracket_scene_strip:
                stripped = stripped.replace(char, "")
            return stripped.strip() or text

        return None

    def match_intro(self, text: str) -> str | None:
        """Return the introduced name for "角色：名字" style lines."""
        match = self.table.intro_re.match(text)
        if not match:
            return None
        name = match.group(1).strip()
        if not name or len(name) >= self.max_intro_name_length or self.table.is_stop_word(name):
            return None
        return name

    def match_dialogue(self, text: str) -> str | None:
        """Return the speaker name for "名字：台词" style lines."""
        match = self.table.dialogue_re.match(text)
        if not match:
            return None
        name = match.group(1).strip()
        if not name or len(name) >= self.max_dialogue_name_length or self.table.is_stop_word(name):
            return None
        return name

    def _label_value(self, text: str) -> str:
        """Value after the first label separator, or empty."""
        parts = self.table.label_split_re.split(text)
        return parts[1].strip() if len(parts) > 1 else ""
