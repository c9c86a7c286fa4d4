"""Smart (LLM-backed) extraction.

The model's answer is untrusted: it is validated once, here, against an
explicit payload schema before it becomes an AnalysisResult.
"""

import json
from typing import Callable, Optional, Protocol

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from .errors import EmptyManuscriptError, ExtractionError
from .models.entities import (
    Category,
    Character,
    LightingCue,
    Prop,
    Relationship,
    Role,
    Scene,
    SceneType,
    Skill,
    new_id,
)
from .models.result import AnalysisResult


FAILURE_MESSAGE = "AI 深度解析失败，请检查网络或稍后重试。"

SCENE_TYPE_LABELS = {
    "室内": SceneType.INDOOR,
    "室外": SceneType.OUTDOOR,
    "其他": SceneType.OTHER,
}


class TextGenerator(Protocol):
    """What the smart extractor needs from an LLM client."""

    def generate(self, prompt: str, temperature: float = ..., max_tokens: int = ..., timeout: float = ...) -> str:
        ...

    def extract_json(self, response: str) -> dict | None:
        ...


class _Payload(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class CharacterPayload(_Payload):
    id: str | None = None
    name: str
    role: Role
    category: Category
    visual_states: list[str]
    source_quote: str
    gender: str = ""
    identity: str = ""
    past_background: str = ""
    present_status: str = ""
    personality: str = ""
    clothing: str = ""
    description: str = ""


class ScenePayload(_Payload):
    id: str | None = None
    name: str
    one_sentence: str
    source_quote: str
    episode: str | None = None
    type: SceneType = SceneType.OTHER
    time: str = ""
    description: str = ""

    @field_validator("type", mode="before")
    @classmethod
    def map_scene_type(cls, value):
        return SCENE_TYPE_LABELS.get(value, value)


class PropPayload(_Payload):
    id: str | None = None
    name: str
    source_quote: str
    description: str = ""
    usage: str = ""


class LightingPayload(_Payload):
    id: str | None = None
    type: str
    source_quote: str
    color: str = ""
    mood: str = ""
    description: str = ""


class SkillPayload(_Payload):
    id: str | None = None
    name: str
    owner: str = ""
    effect: str = ""
    description: str = ""
    source_quote: str | None = None


class RelationshipPayload(_Payload):
    source: str
    target: str
    type: str
    description: str = ""


class AnalysisPayload(_Payload):
    """Shape the model is asked to return."""

    style: str
    characters: list[CharacterPayload]
    scenes: list[ScenePayload]
    props: list[PropPayload]
    lighting: list[LightingPayload]
    relationships: list[RelationshipPayload]
    skills: list[SkillPayload] = Field(default_factory=list)

    def to_result(self) -> AnalysisResult:
        """Convert to the core model, generating ids the model left out.

        Blank ids and ids already used in the same collection are replaced,
        so every id is unique within its collection.
        """

        def build(record_type, items):
            records = []
            seen: set[str] = set()
            for item in items:
                data = item.model_dump(exclude_none=True)
                if not data.get("id", "").strip() or data["id"] in seen:
                    data["id"] = new_id()
                seen.add(data["id"])
                records.append(record_type(**data))
            return tuple(records)

        return AnalysisResult(
            style=self.style,
            characters=build(Character, self.characters),
            scenes=build(Scene, self.scenes),
            props=build(Prop, self.props),
            lighting=build(LightingCue, self.lighting),
            skills=build(Skill, self.skills),
            relationships=tuple(Relationship(**r.model_dump()) for r in self.relationships),
        )


PROMPT_TEMPLATE = """你是一位全能的剧本/小说设定扒皮大师。请深度分析用户提供的长文本（可能达数万字），提取精准的设定包。

【特别识别指令】
1. 必须识别并提取每一个出现的实体：包括职业个体（护工、警察）、龙套（路人们）、怪物、灵异体、动物等。
2. 深度捕捉“状态词”：如原文提到“Q版形态”、“浑身是伤”、“满脸血迹”、“机械义肢”等，必须记录在 visualStates 中。
3. 性格弧光：如果是短剧，请区分角色的“前世/隐藏身份”与“今生/显性状态”。
4. 即使是只出现一次的群体（如：围观的人群），也请记录其动态反应。
5. 每条记录的 sourceQuote 必须是原文中逐字出现的完整句子。

只输出一个符合以下 JSON Schema 的 JSON 对象：
{schema}

文本内容：
{text}"""


class SmartExtractor:
    """Extracts a setting bible with an LLM.

    Usage:
        extractor = SmartExtractor(LLMClient())
        result = extractor.extract(text)
    """

    def __init__(
        self,
        client: TextGenerator,
        progress_callback: Optional[Callable[[str], None]] = None,
    ):
        """Initialize the extractor.

        Args:
            client: LLM client used for generation and JSON recovery
            progress_callback: Optional callback for progress updates
        """
        self.client = client
        self.progress = progress_callback or (lambda x: None)

    def build_prompt(self, text: str) -> str:
        schema = json.dumps(
            AnalysisPayload.model_json_schema(by_alias=True),
            ensure_ascii=False,
        )
        return PROMPT_TEMPLATE.format(schema=schema, text=text)

    def extract(self, text: str) -> AnalysisResult:
        """Extract a setting bible from manuscript text.

        Raises:
            EmptyManuscriptError: if the text is empty or whitespace only
            ExtractionError: if the model call fails or returns an invalid payload
        """
        if not text.strip():
            raise EmptyManuscriptError("Manuscript is empty")

        self.progress(f"Sending {len(text):,} characters to the model...")
        response = self.client.generate(self.build_prompt(text))
        if not response:
            raise ExtractionError(FAILURE_MESSAGE)

        self.progress("Validating model response...")
        data = self.client.extract_json(response)
        if not isinstance(data, dict):
            raise ExtractionError(FAILURE_MESSAGE)

        try:
            payload = AnalysisPayload.model_validate(data)
        except ValidationError as e:
            raise ExtractionError(FAILURE_MESSAGE) from e

        return payload.to_result()
