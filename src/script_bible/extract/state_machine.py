"""The local extraction pass as a left fold over classified lines.

``ExtractionState`` is an immutable snapshot; ``step`` returns a new state
for every line, so a pass can be replayed from any intermediate state.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from functools import reduce
from types import MappingProxyType

from ..models.entities import Character, LightingCue, Prop, Scene, SceneType
from ..models.lines import ClassifiedLine, LineKind
from .patterns import CHINESE_SCRIPT, PatternTable
from .resolver import CharacterResolver
from .visual import extract_visual_states, is_numbered_line


def _frozen(mapping: Mapping) -> Mapping:
    return MappingProxyType(dict(mapping))


@dataclass(frozen=True)
class ExtractionState:
    """Accumulated output of a pass after some number of lines."""

    scenes: tuple[Scene, ...] = ()
    characters: tuple[Character, ...] = ()
    props: tuple[Prop, ...] = ()
    lighting: tuple[LightingCue, ...] = ()

    # Index into ``scenes`` of the open scene
    current_scene: int | None = None
    # Narrative text of the open scene not yet scanned for visual states
    buffer: str = ""
    # name -> index into ``characters``
    known_names: Mapping[str, int] = field(default_factory=lambda: _frozen({}))
    # scene id -> character names mentioned in that scene, first-mention order
    scene_mentions: Mapping[str, tuple[str, ...]] = field(default_factory=lambda: _frozen({}))

    @property
    def open_scene(self) -> Scene | None:
        if self.current_scene is None:
            return None
        return self.scenes[self.current_scene]

    @property
    def known(self) -> dict[str, Character]:
        """Known characters keyed by name."""
        return {name: self.characters[i] for name, i in self.known_names.items()}

    def with_open_scene(self, scene: Scene) -> "ExtractionState":
        """Return a state with the open scene record replaced."""
        scenes = list(self.scenes)
        scenes[self.current_scene] = scene
        return replace(self, scenes=tuple(scenes))


class ExtractionMachine:
    """Single forward pass over classified lines.

    Usage:
        machine = ExtractionMachine()
        state = machine.run(classifier.classify_all(lines))
    """

    def __init__(
        self,
        table: PatternTable | None = None,
        resolver: CharacterResolver | None = None,
    ):
        self.table = table or CHINESE_SCRIPT
        self.resolver = resolver or CharacterResolver(table=self.table)

    def run(
        self,
        lines: Iterable[ClassifiedLine],
        state: ExtractionState | None = None,
    ) -> ExtractionState:
        """Fold every line into the state, then close the pass."""
        folded = reduce(self.step, lines, state or ExtractionState())
        return self.finish(folded)

    def step(self, state: ExtractionState, line: ClassifiedLine) -> ExtractionState:
        """Consume one classified line."""
        if line.kind == LineKind.SCENE_HEADER:
            return self._open_scene(state, line)
        if line.kind in (LineKind.ENTITY_INTRO, LineKind.DIALOGUE):
            return self._mention_character(state, line)
        if line.kind == LineKind.PROP:
            return self._add_prop(state, line)
        if line.kind == LineKind.LIGHTING:
            return self._add_lighting(state, line)
        return self._accumulate(state, line)

    def finish(self, state: ExtractionState) -> ExtractionState:
        """End of input: flush the open scene and guarantee a character."""
        state = self._flush(state)
        if not state.characters:
            state = replace(state, characters=(self.resolver.placeholder(),))
        return state

    def _flush(self, state: ExtractionState) -> ExtractionState:
        """Move visual states found in the buffered narrative into the open scene."""
        scene = state.open_scene
        if scene is None:
            return state

        visuals = extract_visual_states(state.buffer, self.table)
        if visuals:
            scene = scene.model_copy(update={"visual_states": scene.visual_states + tuple(visuals)})
            state = state.with_open_scene(scene)
        return replace(state, buffer="")

    def _open_scene(self, state: ExtractionState, line: ClassifiedLine) -> ExtractionState:
        state = self._flush(state)

        header = line.text.upper()
        is_indoor = any(token.upper() in header for token in self.table.indoor_tokens)
        is_night = any(token.upper() in header for token in self.table.night_tokens)

        scene = Scene(
            name=line.value or line.text,
            type=SceneType.INDOOR if is_indoor else SceneType.OUTDOOR,
            time=self.table.night_label if is_night else self.table.day_label,
            angle=self.table.default_angle,
            source_quote=line.text,
        )
        return replace(
            state,
            scenes=state.scenes + (scene,),
            current_scene=len(state.scenes),
            buffer="",
        )

    def _mention_character(self, state: ExtractionState, line: ClassifiedLine) -> ExtractionState:
        resolution = self.resolver.resolve(line.value, line, state.known)
        if resolution is None:
            return state

        if resolution.is_new:
            known_names = dict(state.known_names)
            known_names[resolution.name] = len(state.characters)
            state = replace(
                state,
                characters=state.characters + (resolution.character,),
                known_names=_frozen(known_names),
            )

        scene = state.open_scene
        if scene is not None:
            mentioned = state.scene_mentions.get(scene.id, ())
            if resolution.name not in mentioned:
                mentions = dict(state.scene_mentions)
                mentions[scene.id] = mentioned + (resolution.name,)
                state = replace(state, scene_mentions=_frozen(mentions))

        return state

    def _add_prop(self, state: ExtractionState, line: ClassifiedLine) -> ExtractionState:
        # Every flagged line is its own record: props are not deduplicated
        prop = Prop(
            name=line.value or self.table.unnamed_prop,
            description=line.text,
            usage=self.table.prop_usage,
            source_quote=line.text,
        )
        return replace(state, props=state.props + (prop,))

    def _add_lighting(self, state: ExtractionState, line: ClassifiedLine) -> ExtractionState:
        cue = LightingCue(
            type=self.table.lighting_type,
            color=self.table.unknown,
            shape=self.table.unknown,
            mood=self.table.unknown,
            description=line.text,
            source_quote=line.text,
        )
        return replace(state, lighting=state.lighting + (cue,))

    def _accumulate(self, state: ExtractionState, line: ClassifiedLine) -> ExtractionState:
        scene = state.open_scene
        if scene is None:
            return state

        if is_numbered_line(line.text, self.table):
            scene = scene.model_copy(update={"visual_states": scene.visual_states + (line.text,)})
            return state.with_open_scene(scene)

        description = f"{scene.description}\n{line.text}" if scene.description else line.text
        state = state.with_open_scene(scene.model_copy(update={"description": description}))
        return replace(state, buffer=state.buffer + line.text + "\n")
