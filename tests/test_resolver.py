"""Tests for character identity resolution."""

import pytest

from script_bible.extract.resolver import CharacterResolver, classify_category
from script_bible.extract.roles import LeadByOrderRoleAssigner
from script_bible.models.entities import Category, Role
from script_bible.models.lines import ClassifiedLine, LineKind, RawLine


def dialogue(name: str, text: str) -> ClassifiedLine:
    return ClassifiedLine(RawLine(0, text), LineKind.DIALOGUE, name)


def intro(name: str, text: str) -> ClassifiedLine:
    return ClassifiedLine(RawLine(0, text), LineKind.ENTITY_INTRO, name)


class TestCategory:
    """Category keyword classification."""

    @pytest.mark.parametrize(
        "name, expected",
        [
            ("护工", Category.PROFESSIONAL),
            ("僵尸王", Category.MONSTER),
            ("小狗", Category.ANIMAL),
            ("路人们", Category.CROWD),
            ("张三", Category.HUMAN),
        ],
    )
    def test_from_name(self, name, expected):
        """Test category keywords found in the name."""
        assert classify_category(name) == expected

    def test_from_context(self):
        """Test category keywords found in the context."""
        assert classify_category("张三", "是一名医生") == Category.PROFESSIONAL

    def test_name_beats_context(self):
        """Test that the name is scanned before the context."""
        assert classify_category("护工", "像个怪物") == Category.PROFESSIONAL


class TestCharacterResolver:
    """Resolution and creation."""

    @pytest.fixture
    def resolver(self):
        return CharacterResolver(role_assigner=LeadByOrderRoleAssigner(2), max_name_length=10)

    def test_creates_new(self, resolver):
        """Test creating a character on first sight."""
        resolution = resolver.resolve("老人", dialogue("老人", "老人：你好。"), {})
        assert resolution.is_new
        assert resolution.character.name == "老人"
        assert resolution.character.role == Role.MAIN
        assert resolution.character.source_quote == "老人：你好。"

    def test_returns_known(self, resolver):
        """Test that a known name resolves to the existing record."""
        first = resolver.resolve("老人", dialogue("老人", "老人：你好。"), {}).character
        again = resolver.resolve(" 老人 ", dialogue("老人", "老人：再见。"), {"老人": first})

        assert not again.is_new
        assert again.character is first

    def test_rejects_stop_words(self, resolver):
        """Test that stop words never become characters."""
        assert resolver.resolve("场景", dialogue("场景", "场景：客厅"), {}) is None

    def test_rejects_sentences(self, resolver):
        """Test that over-long names are rejected."""
        name = "这是一整句话而不是名字对吧"
        assert resolver.resolve(name, dialogue(name, name + "：嗯"), {}) is None

    def test_intro_context_sets_category(self, resolver):
        """Test that intro context decides the category."""
        character = resolver.create("张三", intro("张三", "角色：张三 医生"), 0)
        assert character.category == Category.PROFESSIONAL

    def test_third_character_is_other(self, resolver):
        """Test that the third character is not a main role."""
        character = resolver.create("丙", dialogue("丙", "丙：三"), 2)
        assert character.role == Role.OTHER

    def test_placeholder(self, resolver):
        """Test the placeholder record."""
        placeholder = resolver.placeholder()
        assert placeholder.id == "placeholder"
        assert placeholder.category == Category.GENERIC
        assert placeholder.source_quote is None


class TestRoleAssigner:
    """Default role policy."""

    def test_crowd_after_leads(self):
        """Test that a crowd after the leads gets the crowd role."""
        assigner = LeadByOrderRoleAssigner(main_count=1)
        assert assigner.assign(0, "路人们", Category.CROWD) == Role.MAIN
        assert assigner.assign(1, "路人们", Category.CROWD) == Role.CROWD
        assert assigner.assign(1, "小狗", Category.ANIMAL) == Role.CREATURE
