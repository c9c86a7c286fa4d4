"""Character identity resolution for the local extraction pass.

Identity is exact, case-sensitive equality of the trimmed name. The first
line that introduces a name decides every identity field; later mentions
are evidence only and never enrich the existing record.
"""

from collections.abc import Mapping
from dataclasses import dataclass

from ..config import get_settings
from ..models.entities import Category, Character, Role
from ..models.lines import ClassifiedLine, LineKind
from .patterns import CHINESE_SCRIPT, PatternTable
from .roles import LeadByOrderRoleAssigner, RoleAssigner
from .visual import extract_visual_states


PLACEHOLDER_ID = "placeholder"


@dataclass
class Resolution:
    """A name resolved to a character record (or newly created)."""

    name: str
    character: Character
    is_new: bool = False


def classify_category(name: str, context: str = "", table: PatternTable = CHINESE_SCRIPT) -> Category:
    """Infer a character category from its name, then from context text.

    Keyword sets are checked in order: monster, animal, professional, crowd.
    """
    keyword_sets = [
        (Category.MONSTER, table.monster_keywords),
        (Category.ANIMAL, table.animal_keywords),
        (Category.PROFESSIONAL, table.professional_keywords),
        (Category.CROWD, table.crowd_keywords),
    ]

    for text in (name, context):
        if not text:
            continue
        lowered = text.lower()
        for category, keywords in keyword_sets:
            if any(kw.lower() in lowered for kw in keywords):
                return category

    return Category.HUMAN


class CharacterResolver:
    """Resolves names to character records, creating them on first sight."""

    def __init__(
        self,
        table: PatternTable | None = None,
        role_assigner: RoleAssigner | None = None,
        max_name_length: int | None = None,
    ):
        """Initialize the resolver.

        Args:
            table: Keyword/pattern table
            role_assigner: Role policy (default: first N characters are main)
            max_name_length: Names at least this long are rejected as sentences
        """
        settings = get_settings()
        self.table = table or CHINESE_SCRIPT
        self.role_assigner = role_assigner or LeadByOrderRoleAssigner(settings.main_role_count)
        self.max_name_length = max_name_length or settings.max_intro_name_length

    def normalize(self, name: str) -> str:
        return name.strip()

    def accepts(self, name: str) -> bool:
        """Check that a captured name is plausible as a character name."""
        return bool(name) and len(name) < self.max_name_length and not self.table.is_stop_word(name)

    def resolve(
        self,
        name: str,
        line: ClassifiedLine,
        known: Mapping[str, Character],
    ) -> Resolution | None:
        """Resolve ``name`` against known characters.

        Args:
            name: Captured character name
            line: The line the name was captured from
            known: Characters created so far, keyed by name

        Returns:
            Resolution for a known or new character, or None if the name is rejected
        """
        name = self.normalize(name)
        if not self.accepts(name):
            return None

        if name in known:
            return Resolution(name=name, character=known[name], is_new=False)

        return Resolution(name=name, character=self.create(name, line, len(known)), is_new=True)

    def create(self, name: str, line: ClassifiedLine, index: int) -> Character:
        """Create a character from its introducing line."""
        unknown = self.table.unknown

        if line.kind == LineKind.ENTITY_INTRO:
            # The rest of the intro line describes the character
            context = line.text.split(name, 1)[-1]
            description = line.text
            visual_states = tuple(extract_visual_states(line.text, self.table))
        else:
            # Dialogue content is what the character says, not what they are
            context = ""
            description = self.table.dialogue_description
            visual_states = ()

        category = classify_category(name, context, self.table)

        return Character(
            name=name,
            role=self.role_assigner.assign(index, name, category),
            category=category,
            description=description,
            visual_states=visual_states,
            gender=unknown,
            identity=unknown,
            clothing=unknown,
            hairstyle=unknown,
            hair_color=unknown,
            source_quote=line.text,
        )

    def placeholder(self) -> Character:
        """The record emitted when a pass finds no characters at all."""
        return Character(
            id=PLACEHOLDER_ID,
            name=self.table.placeholder_name,
            role=Role.OTHER,
            category=Category.GENERIC,
            description=self.table.placeholder_description,
            gender="-",
            identity="-",
            clothing="-",
            hairstyle="-",
            hair_color="-",
        )
