"""Aggregate root of one analysis run."""

from pydantic import BaseModel, ConfigDict

from ..errors import UnknownCollectionError
from .entities import Character, LightingCue, Prop, Relationship, Scene, Skill


# Collection name -> record type, used by whole-collection edits
COLLECTIONS: dict[str, type[BaseModel]] = {
    "characters": Character,
    "scenes": Scene,
    "props": Prop,
    "lighting": LightingCue,
    "skills": Skill,
    "relationships": Relationship,
}


class AnalysisResult(BaseModel):
    """Everything extracted from one manuscript snapshot.

    Collections keep manuscript appearance order. The result is never
    mutated; use ``replace`` to get a copy with one collection swapped.
    """

    model_config = ConfigDict(frozen=True)

    style: str = ""
    characters: tuple[Character, ...] = ()
    scenes: tuple[Scene, ...] = ()
    props: tuple[Prop, ...] = ()
    lighting: tuple[LightingCue, ...] = ()
    skills: tuple[Skill, ...] = ()
    relationships: tuple[Relationship, ...] = ()

    def replace(self, collection: str, items) -> "AnalysisResult":
        """Return a copy with ``collection`` replaced by ``items``."""
        if collection not in COLLECTIONS:
            raise UnknownCollectionError(collection)
        record_type = COLLECTIONS[collection]
        records = tuple(
            item if isinstance(item, record_type) else record_type.model_validate(item)
            for item in items
        )
        return self.model_copy(update={collection: records})

    def is_empty(self) -> bool:
        return not any(getattr(self, name) for name in COLLECTIONS)

    def to_dict(self) -> dict:
        """Convert to a JSON-ready dict with camelCase entity fields."""
        return self.model_dump(mode="json", by_alias=True)
