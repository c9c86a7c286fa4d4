"""Entity models for the setting bible.

All records are frozen; edits produce new records and new collections.
Field names are snake_case in Python and camelCase on the wire.
"""

import uuid
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def new_id() -> str:
    """Generate an opaque id, stable for the lifetime of one analysis run."""
    return uuid.uuid4().hex[:9]


class Role(str, Enum):
    """Narrative weight of a character."""

    MAIN = "main"
    OTHER = "other"
    CREATURE = "creature"
    CROWD = "crowd"
    MOB = "mob"


class Category(str, Enum):
    """What kind of being a character is."""

    HUMAN = "human"
    MONSTER = "monster"
    ANIMAL = "animal"
    PROFESSIONAL = "professional"
    CROWD = "crowd"
    GENERIC = "generic"


class SceneType(str, Enum):
    """Where a scene takes place."""

    INDOOR = "indoor"
    OUTDOOR = "outdoor"
    OTHER = "other"


class EntityBase(BaseModel):
    """Base class for all extracted records."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    id: str = Field(default_factory=new_id)
    description: str = ""
    source_quote: str | None = None


class Character(EntityBase):
    """A person, creature or group that acts in the manuscript."""

    name: str
    role: Role = Role.OTHER
    category: Category = Category.HUMAN
    visual_states: tuple[str, ...] = ()

    gender: str = ""
    identity: str = ""
    past_background: str = ""
    present_status: str = ""
    personality: str = ""
    clothing: str = ""
    hairstyle: str = ""
    hair_color: str = ""


class Scene(EntityBase):
    """A location/time unit of the manuscript."""

    name: str
    type: SceneType = SceneType.OTHER
    time: str = ""
    episode: str | None = None
    one_sentence: str = ""
    angle: str = ""
    visual_states: tuple[str, ...] = ()


class Prop(EntityBase):
    """A significant item."""

    name: str
    usage: str = ""


class LightingCue(EntityBase):
    """A lighting or atmosphere instruction."""

    type: str
    color: str = ""
    shape: str = ""
    mood: str = ""


class Skill(EntityBase):
    """An ability or signature move.

    ``owner`` is a weak reference by character name.
    """

    name: str
    owner: str = ""
    effect: str = ""


class Relationship(BaseModel):
    """A loosely-typed edge between two character names.

    Names need not resolve to a character in the same result.
    """

    model_config = ConfigDict(frozen=True)

    source: str
    target: str
    type: str
    description: str = ""
