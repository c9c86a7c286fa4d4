"""Role assignment strategies.

Narrative weight is a policy, not a fact of the text: the default simply
treats the earliest-introduced characters as leads.
"""

from typing import Protocol

from ..models.entities import Category, Role


class RoleAssigner(Protocol):
    """Decides the role of a newly created character."""

    def assign(self, index: int, name: str, category: Category) -> Role:
        """Return the role for the ``index``-th distinct character (0-based)."""
        ...


class LeadByOrderRoleAssigner:
    """First ``main_count`` distinct characters are main roles."""

    def __init__(self, main_count: int = 2):
        self.main_count = main_count

    def assign(self, index: int, name: str, category: Category) -> Role:
        if index < self.main_count:
            return Role.MAIN
        if category in (Category.MONSTER, Category.ANIMAL):
            return Role.CREATURE
        if category == Category.CROWD:
            return Role.CROWD
        return Role.OTHER


class FixedRoleAssigner:
    """Assigns the same role to everyone."""

    def __init__(self, role: Role = Role.OTHER):
        self.role = role

    def assign(self, index: int, name: str, category: Category) -> Role:
        return self.role
