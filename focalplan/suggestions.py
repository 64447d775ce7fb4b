"""Icon and color suggestions from a record title.

A keyword lookup table, kept apart from the engine: nothing in
focalplan.engine depends on it, and callers may swap in their own mapper.
"""

from typing import Dict, NamedTuple, Optional

from focalplan.models.constants import DEFAULT_TASK_COLOR, DEFAULT_TASK_ICON


class IconSuggestion(NamedTuple):
    icon: str
    label: str
    color_name: str


def _s(icon: str, label: str, color: str) -> IconSuggestion:
    return IconSuggestion(icon, label, color)


DEFAULT_MAPPINGS: Dict[str, IconSuggestion] = {
    # Fitness
    "gym": _s("🏋️", "Gym", "sage"),
    "workout": _s("🏋️", "Workout", "sage"),
    "exercise": _s("🏃", "Exercise", "sage"),
    "run": _s("🏃", "Run", "sage"),
    "running": _s("🏃", "Running", "sage"),
    "yoga": _s("🧘", "Yoga", "lavender"),
    "meditation": _s("🧘", "Meditation", "lavender"),
    "swim": _s("🏊", "Swim", "sky"),
    "bike": _s("🚴", "Bike", "sage"),
    "walk": _s("🚶", "Walk", "sage"),
    "stretch": _s("🤸", "Stretch", "lavender"),
    # Work
    "meeting": _s("👥", "Meeting", "sky"),
    "call": _s("📞", "Call", "sky"),
    "work": _s("💼", "Work", "sky"),
    "email": _s("📧", "Email", "sky"),
    "presentation": _s("📊", "Presentation", "sky"),
    "project": _s("📁", "Project", "sky"),
    "deadline": _s("⏰", "Deadline", "coral"),
    "interview": _s("🤝", "Interview", "sky"),
    # Food
    "breakfast": _s("🍳", "Breakfast", "amber"),
    "lunch": _s("🍽️", "Lunch", "amber"),
    "dinner": _s("🍽️", "Dinner", "amber"),
    "coffee": _s("☕", "Coffee", "amber"),
    "cook": _s("👨‍🍳", "Cook", "amber"),
    # Study
    "study": _s("📚", "Study", "lavender"),
    "read": _s("📖", "Read", "lavender"),
    "homework": _s("📝", "Homework", "lavender"),
    "class": _s("🎓", "Class", "lavender"),
    "exam": _s("📝", "Exam", "coral"),
    # Sleep and rest
    "sleep": _s("😴", "Sleep", "night"),
    "wake": _s("☀️", "Wake", "coral"),
    "morning": _s("🌅", "Morning", "coral"),
    "bedtime": _s("🌙", "Bedtime", "night"),
    "nap": _s("💤", "Nap", "lavender"),
    # Chores
    "clean": _s("🧹", "Clean", "amber"),
    "laundry": _s("👕", "Laundry", "amber"),
    "dishes": _s("🍽️", "Dishes", "amber"),
    "grocery": _s("🛒", "Grocery", "amber"),
    "groceries": _s("🛒", "Groceries", "amber"),
    "shopping": _s("🛍️", "Shopping", "rose"),
    # Social
    "friends": _s("👯", "Friends", "rose"),
    "party": _s("🎉", "Party", "rose"),
    "family": _s("👨‍👩‍👧‍👦", "Family", "rose"),
    "birthday": _s("🎂", "Birthday", "rose"),
    # Creative
    "write": _s("✍️", "Write", "lavender"),
    "music": _s("🎵", "Music", "lavender"),
    "guitar": _s("🎸", "Guitar", "lavender"),
    "code": _s("💻", "Code", "sky"),
    "design": _s("🎨", "Design", "lavender"),
    # Travel
    "travel": _s("✈️", "Travel", "sky"),
    "flight": _s("✈️", "Flight", "sky"),
    "commute": _s("🚗", "Commute", "slate"),
    "train": _s("🚆", "Train", "sky"),
    # Health
    "doctor": _s("🏥", "Doctor", "coral"),
    "dentist": _s("🦷", "Dentist", "coral"),
    "therapy": _s("💭", "Therapy", "lavender"),
    "medicine": _s("💊", "Medicine", "coral"),
    "appointment": _s("📅", "Appointment", "sky"),
    # Leisure and self-care
    "movie": _s("🎬", "Movie", "rose"),
    "game": _s("🎮", "Game", "rose"),
    "podcast": _s("🎧", "Podcast", "lavender"),
    "shower": _s("🚿", "Shower", "sky"),
    "journal": _s("📓", "Journal", "lavender"),
}


class IconMapper:
    """Keyword to icon lookup.

    Matching order: the whole title, then each word in title order, then the
    longest keyword contained anywhere in the title.
    """

    def __init__(self, mappings: Optional[Dict[str, IconSuggestion]] = None):
        self.mappings = dict(DEFAULT_MAPPINGS if mappings is None else mappings)
        # Longest first so "running" wins over "run"; ties broken alphabetically
        self._by_length = sorted(self.mappings, key=lambda k: (-len(k), k))

    def find_match(self, title: str) -> Optional[IconSuggestion]:
        lower = (title or "").strip().lower()
        if not lower:
            return None
        if lower in self.mappings:
            return self.mappings[lower]
        for word in lower.split():
            if word in self.mappings:
                return self.mappings[word]
        for keyword in self._by_length:
            if keyword in lower:
                return self.mappings[keyword]
        return None

    def suggest_icon(self, title: str) -> str:
        match = self.find_match(title)
        return match.icon if match else DEFAULT_TASK_ICON

    def suggest_color(self, title: str) -> str:
        match = self.find_match(title)
        return match.color_name if match else DEFAULT_TASK_COLOR


default_mapper = IconMapper()


def suggest_icon(title: str) -> IconSuggestion:
    """Icon, label and color for a title, falling back to the defaults."""
    match = default_mapper.find_match(title)
    if match is None:
        return IconSuggestion(DEFAULT_TASK_ICON, "", DEFAULT_TASK_COLOR)
    return match
