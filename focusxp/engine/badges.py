"""Static badge catalog.

Loaded once at import time and never mutated. Threshold badges carry the
metric they are measured on and the value that unlocks them; event badges
(``metric is None``) are awarded from completion events instead of lifetime
aggregates.
"""

from collections.abc import Mapping
from types import MappingProxyType
from typing import Literal

from pydantic import BaseModel

BadgeCategory = Literal["milestone", "streak", "focus", "achievement", "level", "category"]
BadgeRarity = Literal["common", "uncommon", "rare", "epic"]

# completed_tasks, total_sessions, focus_hours, streak_days, level, or a
# "category:<name>" count of completed tasks in that task category
Metric = str


class Badge(BaseModel):
    id: str
    name: str
    description: str
    icon: str
    category: BadgeCategory
    rarity: BadgeRarity
    metric: Metric | None = None
    threshold: int = 0

    model_config = {"frozen": True}

    @property
    def is_event_badge(self) -> bool:
        return self.metric is None


_BADGES = [
    Badge(id="first-task", name="Getting Started", description="Complete your first task",
          icon="✅", category="milestone", rarity="common",
          metric="completed_tasks", threshold=1),
    Badge(id="first-session", name="Focus Beginner", description="Complete your first focus session",
          icon="🎯", category="milestone", rarity="common",
          metric="total_sessions", threshold=1),
    Badge(id="streak-3", name="Consistency Builder", description="Maintain a 3-day streak",
          icon="🔥", category="streak", rarity="common",
          metric="streak_days", threshold=3),
    Badge(id="streak-7", name="Week Warrior", description="Maintain a 7-day streak",
          icon="⚡", category="streak", rarity="uncommon",
          metric="streak_days", threshold=7),
    Badge(id="streak-30", name="Monthly Master", description="Maintain a 30-day streak",
          icon="💎", category="streak", rarity="rare",
          metric="streak_days", threshold=30),
    Badge(id="tasks-10", name="Task Conqueror", description="Complete 10 tasks",
          icon="🏆", category="milestone", rarity="common",
          metric="completed_tasks", threshold=10),
    Badge(id="tasks-50", name="Productivity Champion", description="Complete 50 tasks",
          icon="👑", category="milestone", rarity="uncommon",
          metric="completed_tasks", threshold=50),
    Badge(id="tasks-100", name="Task Master", description="Complete 100 tasks",
          icon="🌟", category="milestone", rarity="rare",
          metric="completed_tasks", threshold=100),
    Badge(id="focus-time-10", name="Focused Mind", description="Accumulate 10 hours of focus time",
          icon="🧠", category="focus", rarity="common",
          metric="focus_hours", threshold=10),
    Badge(id="focus-time-50", name="Deep Worker", description="Accumulate 50 hours of focus time",
          icon="🎪", category="focus", rarity="uncommon",
          metric="focus_hours", threshold=50),
    Badge(id="focus-time-100", name="Focus Legend", description="Accumulate 100 hours of focus time",
          icon="🦅", category="focus", rarity="epic",
          metric="focus_hours", threshold=100),
    Badge(id="perfect-day", name="Perfect Day", description="Complete all tasks for a day",
          icon="🌞", category="achievement", rarity="uncommon"),
    Badge(id="early-bird", name="Early Bird", description="Start a focus session before 7 AM",
          icon="🌅", category="achievement", rarity="uncommon"),
    Badge(id="night-owl", name="Night Owl", description="Complete a focus session after 10 PM",
          icon="🦉", category="achievement", rarity="uncommon"),
    Badge(id="distraction-free", name="Laser Focus",
          description="Complete a session with zero distractions",
          icon="🎯", category="achievement", rarity="rare"),
    Badge(id="level-5", name="Rising Star", description="Reach level 5",
          icon="⭐", category="level", rarity="common",
          metric="level", threshold=5),
    Badge(id="level-10", name="Expert", description="Reach level 10",
          icon="💫", category="level", rarity="uncommon",
          metric="level", threshold=10),
    Badge(id="level-25", name="Productivity Guru", description="Reach level 25",
          icon="🔮", category="level", rarity="epic",
          metric="level", threshold=25),
    Badge(id="social-butterfly", name="Social Butterfly",
          description="Complete 10 social category tasks",
          icon="🦋", category="category", rarity="uncommon",
          metric="category:social", threshold=10),
    Badge(id="fitness-fanatic", name="Fitness Fanatic", description="Complete 20 fitness tasks",
          icon="💪", category="category", rarity="uncommon",
          metric="category:fitness", threshold=20),
]

BADGE_CATALOG: Mapping[str, Badge] = MappingProxyType({b.id: b for b in _BADGES})

BADGE_CATEGORIES = BadgeCategory.__args__
BADGE_RARITIES = BadgeRarity.__args__


def get_badge(badge_id: str, catalog: Mapping[str, Badge] = BADGE_CATALOG) -> Badge | None:
    return catalog.get(badge_id)


def threshold_badges(catalog: Mapping[str, Badge] = BADGE_CATALOG) -> list[Badge]:
    return [b for b in catalog.values() if not b.is_event_badge]
