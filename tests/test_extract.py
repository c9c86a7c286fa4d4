"""Tests for the local extraction pass."""

import pytest

from script_bible.extract.classifier import LineClassifier
from script_bible.extract.extractor import LocalExtractor
from script_bible.extract.roles import FixedRoleAssigner
from script_bible.extract.state_machine import ExtractionMachine, ExtractionState
from script_bible.ingest.splitter import split_into_lines
from script_bible.models.entities import Category, Role, SceneType


@pytest.fixture
def extractor():
    return LocalExtractor(relationship_policy="first_pair")


def without_ids(result) -> dict:
    """Result as plain data with generated ids removed."""
    data = result.to_dict()
    for name in ("characters", "scenes", "props", "lighting", "skills"):
        for item in data[name]:
            item.pop("id")
    return data


class TestConcreteScenarios:
    """End-to-end scenarios on small manuscripts."""

    def test_living_room_dialogue(self, extractor):
        """Test the two-speaker living room scene."""
        result = extractor.extract("场景：客厅\n老人：你好。\n护工：您好，需要帮忙吗？")

        assert len(result.scenes) == 1
        scene = result.scenes[0]
        assert scene.name == "客厅"
        assert scene.type == SceneType.INDOOR
        assert scene.time == "日"
        assert scene.source_quote == "场景：客厅"

        assert [c.name for c in result.characters] == ["老人", "护工"]
        assert result.characters[0].category == Category.HUMAN
        assert result.characters[1].category == Category.PROFESSIONAL
        assert all(c.role == Role.MAIN for c in result.characters)

        assert len(result.relationships) == 1
        rel = result.relationships[0]
        assert (rel.source, rel.target) == ("老人", "护工")

    def test_bracketed_visual_state_on_intro(self, extractor):
        """Test that a bracket tag on an intro becomes a visual state."""
        result = extractor.extract("角色：小明【浑身是伤】")

        assert len(result.characters) == 1
        character = result.characters[0]
        assert character.name == "小明"
        assert "浑身是伤" in character.visual_states
        assert character.source_quote == "角色：小明【浑身是伤】"
        assert character.description == "角色：小明【浑身是伤】"

    def test_dialogue_character_defaults(self, extractor):
        """Test the defaults of a character first seen in dialogue."""
        result = extractor.extract("老人：你好。")
        character = result.characters[0]
        assert character.description == "从对话提取"
        assert character.visual_states == ()
        assert character.gender == "未知"


class TestScenes:
    """Scene detection and scene state."""

    def test_one_scene_per_header_in_order(self, extractor):
        """Test one scene per header line, in order."""
        text = "INT. 客厅 - 夜\n他坐下。\nEXT. 街道 - 日\n车来车往。\n第三场 屋顶\n风很大。"
        result = extractor.extract(text)

        assert [s.name for s in result.scenes] == ["客厅 - 夜", "街道 - 日", "屋顶"]
        assert result.scenes[0].type == SceneType.INDOOR
        assert result.scenes[0].time == "夜"
        assert result.scenes[1].type == SceneType.OUTDOOR
        assert result.scenes[1].time == "日"

    def test_narrative_accumulates_into_description(self, extractor):
        """Test that narrative lines build the scene description."""
        result = extractor.extract("场景：客厅\n他坐下。\n窗外下雨。")
        assert result.scenes[0].description == "他坐下。\n窗外下雨。"

    def test_numbered_lines_and_buffered_tags(self, extractor):
        """Test numbered lines and buffered bracket tags."""
        text = "场景：客厅\n1. 特写 老人的手\n2. 远景\n他坐下。【窗外闪电】"
        result = extractor.extract(text)

        assert result.scenes[0].visual_states == ("1. 特写 老人的手", "2. 远景", "窗外闪电")
        assert result.scenes[0].description == "他坐下。【窗外闪电】"

    def test_buffer_flushed_into_closing_scene(self, extractor):
        """Test that buffered tags land in the scene being closed."""
        result = extractor.extract("场景：雨夜街头\n【雨】\n场景：客厅\n安静。")

        assert result.scenes[0].visual_states == ("雨",)
        assert result.scenes[1].visual_states == ()

    def test_ignored_bracket_tags(self, extractor):
        """Test that structural bracket tags are not visual states."""
        result = extractor.extract("场景：客厅\n【时间】【特写】")
        assert result.scenes[0].visual_states == ("特写",)

    def test_narrative_before_first_scene_is_ignored(self, extractor):
        """Test that narrative outside any scene is dropped."""
        result = extractor.extract("序言文字。\n场景：客厅")
        assert result.scenes[0].description == ""


class TestDeduplication:
    """Characters are deduplicated by exact name; props and lighting are not."""

    def test_same_name_twice(self, extractor):
        """Test that a repeated speaker yields one character."""
        result = extractor.extract("老人：你好。\n老人：再见。")
        assert [c.name for c in result.characters] == ["老人"]
        assert result.characters[0].source_quote == "老人：你好。"

    def test_intro_then_dialogue(self, extractor):
        """Test that the intro line decides the record."""
        result = extractor.extract("小明：你好\n角色：小明【黑化】")
        assert len(result.characters) == 1
        # First sighting wins
        assert result.characters[0].description == "从对话提取"
        assert result.characters[0].visual_states == ()

    def test_names_are_case_sensitive(self, extractor):
        """Test that names differing in case are distinct."""
        result = extractor.extract("Name: alice\nName: Alice")
        assert [c.name for c in result.characters] == ["alice", "Alice"]

    def test_props_are_not_deduplicated(self, extractor):
        """Test that every prop line yields its own record."""
        result = extractor.extract("道具：古剑\n道具：古剑")
        assert len(result.props) == 2
        assert result.props[0].id != result.props[1].id
        assert all(p.name == "古剑" for p in result.props)
        assert result.props[0].usage == "剧情使用"

    def test_lighting_is_not_deduplicated(self, extractor):
        """Test that every lighting line yields its own record."""
        result = extractor.extract("灯光：冷色调\n灯光：冷色调")
        assert len(result.lighting) == 2
        assert result.lighting[0].type == "环境光"
        assert result.lighting[0].mood == "未知"

    def test_unnamed_prop(self, extractor):
        """Test the default name of a prop without a label."""
        result = extractor.extract("他拿起桌上的道具")
        assert result.props[0].name == "未命名道具"
        assert result.props[0].source_quote == "他拿起桌上的道具"


class TestRoles:
    """Role assignment policy."""

    def test_first_two_are_main(self, extractor):
        """Test that the first two characters are main roles."""
        result = extractor.extract("甲：一\n乙：二\n丙：三")
        assert [c.role for c in result.characters] == [Role.MAIN, Role.MAIN, Role.OTHER]

    def test_late_monster_is_creature(self, extractor):
        """Test that a late monster becomes a creature."""
        result = extractor.extract("甲：一\n乙：二\n僵尸：吼")
        assert result.characters[2].category == Category.MONSTER
        assert result.characters[2].role == Role.CREATURE

    def test_pluggable_role_assigner(self):
        """Test extraction with a custom role assigner."""
        extractor = LocalExtractor(role_assigner=FixedRoleAssigner(Role.OTHER))
        result = extractor.extract("甲：一\n乙：二")
        assert all(c.role == Role.OTHER for c in result.characters)


class TestDegenerateInput:
    """No characters, empty input."""

    def test_placeholder_when_no_characters(self, extractor):
        """Test the placeholder for manuscripts without character markup."""
        result = extractor.extract("他走进房间。\n窗外下着雨。")

        assert len(result.characters) == 1
        placeholder = result.characters[0]
        assert placeholder.id == "placeholder"
        assert placeholder.name == "未识别角色"
        assert placeholder.source_quote is None
        assert result.relationships == ()

    def test_empty_manuscript(self, extractor):
        """Test that empty input yields an empty result."""
        result = extractor.extract("")
        assert result.style == "本地分析模式"
        assert result.characters == ()
        assert result.scenes == ()
        assert result.relationships == ()

    def test_whitespace_manuscript(self, extractor):
        """Test that whitespace-only input yields an empty result."""
        assert extractor.extract("  \n\t\n").is_empty()


class TestFold:
    """The pass is a replayable fold over classified lines."""

    @pytest.fixture
    def classified(self):
        lines = split_into_lines("场景：客厅\n老人：你好。\n【雨】")
        return LineClassifier().classify_all(lines)

    def test_step_does_not_mutate_state(self, classified):
        """Test that step returns a new state."""
        machine = ExtractionMachine()
        initial = ExtractionState()
        after = machine.step(initial, classified[0])

        assert initial.scenes == ()
        assert initial.current_scene is None
        assert len(after.scenes) == 1
        assert after.current_scene == 0

    def test_replay_from_intermediate_state(self, classified):
        """Test resuming a pass from an intermediate state."""
        machine = ExtractionMachine()
        midway = machine.step(ExtractionState(), classified[0])
        state = machine.run(classified[1:], midway)

        assert [c.name for c in state.characters] == ["老人"]
        assert state.scenes[0].visual_states == ("雨",)
        assert state.scene_mentions[state.scenes[0].id] == ("老人",)

    def test_buffer_is_empty_after_finish(self, classified):
        """Test that finish flushes the narrative buffer."""
        state = ExtractionMachine().run(classified)
        assert state.buffer == ""


class TestIdempotence:
    """Two runs on the same input agree on everything but ids."""

    def test_same_fields_twice(self, extractor):
        """Test that two runs differ only in ids."""
        text = "场景：客厅\n角色：小明【浑身是伤】\n老人：你好。\n道具：古剑\n灯光：暖光"
        assert without_ids(extractor.extract(text)) == without_ids(extractor.extract(text))

    def test_extract_from_file(self, extractor, tmp_path):
        """Test extraction from a manuscript file."""
        path = tmp_path / "script.txt"
        path.write_text("场景：客厅\n老人：你好。", encoding="utf-8")
        result = extractor.extract_from_file(path)
        assert result.scenes[0].name == "客厅"

    def test_progress_messages(self):
        """Test that progress is reported through the callback."""
        messages = []
        LocalExtractor(progress_callback=messages.append).extract("老人：你好。")
        assert messages


class TestStats:
    """Line statistics of the last pass."""

    def test_counts_by_kind(self, extractor):
        """Test that every classified line is counted under its kind."""
        extractor.extract("场景：客厅\n老人：你好。\n护工：您好。\n道具：古剑\n窗外下雨。")
        stats = extractor.last_stats

        assert stats.total_lines == 5
        assert stats.lines_by_kind == {
            "scene_header": 1,
            "dialogue": 2,
            "prop": 1,
            "narrative": 1,
        }

    def test_reset_on_empty_input(self, extractor):
        """Test that an empty manuscript leaves empty statistics."""
        extractor.extract("老人：你好。")
        extractor.extract("")
        assert extractor.last_stats.total_lines == 0
        assert extractor.last_stats.lines_by_kind == {}
