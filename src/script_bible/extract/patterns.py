"""Keyword and pattern tables for local extraction.

A table is plain data: swapping in a table for another language or genre
changes what the classifier and the extraction pass recognize without
touching either of them.
"""

import re
from dataclasses import dataclass
from functools import cached_property


@dataclass(frozen=True)
class PatternTable:
    """Everything the local engine needs to know about a script dialect."""

    name: str

    # Scene headers. Group 1, when present and non-empty, is the scene name.
    scene_header_patterns: tuple[str, ...]
    # A line opening with this bracket and containing the marker is also a header
    bracket_scene_open: str
    bracket_scene_marker: str
    bracket_scene_strip: str

    # Group 1 is the character name
    intro_pattern: str
    dialogue_pattern: str
    stop_words: frozenset[str]

    prop_keywords: tuple[str, ...]
    lighting_keywords: tuple[str, ...]
    label_separators: str  # characters splitting "label: value" on keyword lines

    indoor_tokens: tuple[str, ...]
    night_tokens: tuple[str, ...]
    day_label: str
    night_label: str

    # Category keyword sets, scanned in this order
    monster_keywords: tuple[str, ...]
    animal_keywords: tuple[str, ...]
    professional_keywords: tuple[str, ...]
    crowd_keywords: tuple[str, ...]

    numbered_visual_pattern: str
    bracket_visual_pattern: str
    numbered_line_pattern: str
    ignored_bracket_tags: frozenset[str]

    # Default field values
    unknown: str
    unnamed_prop: str
    prop_usage: str
    default_angle: str
    lighting_type: str
    dialogue_description: str
    style_label: str
    cooccurrence_type: str
    cooccurrence_description: str
    scene_cooccurrence_template: str  # formatted with count and scenes
    placeholder_name: str
    placeholder_description: str

    @cached_property
    def scene_header_res(self) -> list[re.Pattern]:
        return [re.compile(p, re.IGNORECASE) for p in self.scene_header_patterns]

    @cached_property
    def intro_re(self) -> re.Pattern:
        return re.compile(self.intro_pattern, re.IGNORECASE)

    @cached_property
    def dialogue_re(self) -> re.Pattern:
        return re.compile(self.dialogue_pattern)

    @cached_property
    def numbered_visual_re(self) -> re.Pattern:
        return re.compile(self.numbered_visual_pattern)

    @cached_property
    def bracket_visual_re(self) -> re.Pattern:
        return re.compile(self.bracket_visual_pattern)

    @cached_property
    def numbered_line_re(self) -> re.Pattern:
        return re.compile(self.numbered_line_pattern)

    @cached_property
    def label_split_re(self) -> re.Pattern:
        return re.compile(f"[{re.escape(self.label_separators)}]")

    def is_stop_word(self, name: str) -> bool:
        return name in self.stop_words or name.lower() in self.stop_words


CHINESE_SCRIPT = PatternTable(
    name="chinese_script",
    scene_header_patterns=(
        r"^(?:第[0-9一二三四五六七八九十百零]+场|SCENE\b|EXT\.|INT\.|场景|地点)[：:]?\s*(.*)",
    ),
    bracket_scene_open="【",
    bracket_scene_marker="场",
    bracket_scene_strip="【】",
    intro_pattern=r"^(?:角色|人物|Name)[：:]\s*([^\s：:【\[（(]+)",
    dialogue_pattern=r"^([^\s：:(（\"“【\[]+)[：:]\s*(.*)",
    stop_words=frozenset({
        "时间", "地点", "场景", "角色", "人物", "道具", "物品", "灯光", "光效", "备注",
        "scene", "time", "location", "name", "note",
    }),
    prop_keywords=("道具", "物品"),
    lighting_keywords=("光效", "灯光"),
    label_separators="：:",
    indoor_tokens=("内", "INT", "室", "厅", "房", "屋", "楼", "馆", "店"),
    night_tokens=("夜", "晚", "NIGHT"),
    day_label="日",
    night_label="夜",
    monster_keywords=(
        "怪", "妖", "魔", "鬼", "僵尸", "丧尸", "异形", "邪祟",
        "monster", "demon", "zombie", "ghost",
    ),
    animal_keywords=("狗", "猫", "狼", "虎", "蛇", "鸟", "dog", "cat", "wolf", "horse"),
    professional_keywords=(
        "护工", "护士", "医生", "警察", "保安", "司机", "律师", "老师", "服务员",
        "店员", "保姆", "厨师", "记者", "秘书", "经理", "士兵", "侍卫", "管家",
        "掌柜", "小二", "doctor", "nurse", "police", "officer", "guard",
    ),
    crowd_keywords=("众人", "路人", "人群", "群众", "围观", "们", "crowd"),
    numbered_visual_pattern=r"(?:^|\s)(\d+[.、]\s*[^\d\n]+)",
    bracket_visual_pattern=r"[【\[]([^】\]]+)[】\]]",
    numbered_line_pattern=r"^\d+[.、]",
    ignored_bracket_tags=frozenset({"场景", "时间", "角色"}),
    unknown="未知",
    unnamed_prop="未命名道具",
    prop_usage="剧情使用",
    default_angle="默认",
    lighting_type="环境光",
    dialogue_description="从对话提取",
    style_label="本地分析模式",
    cooccurrence_type="共演",
    cooccurrence_description="出现在同一剧本中",
    scene_cooccurrence_template="同场出现 {count} 次：{scenes}",
    placeholder_name="未识别角色",
    placeholder_description="本地模式依赖“角色：”或对话格式。",
)
