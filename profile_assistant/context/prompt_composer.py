"""Prompt assembly for profile-aware chat.

Builds one instruction string from the user's message, the profile subset
selected by relevance search, and recent conversation turns. Section order
is fixed: instructions, personal information, recent conversation, question.
Missing or malformed optional data is skipped, never raised.
"""

from typing import Any, Iterable

MAX_PROJECTS = 5
MAX_EXPERIENCE = 3
DEFAULT_HISTORY_TURNS = 4

PREAMBLE = """You are a helpful AI assistant that answers questions about one specific person, using the personal information provided below. Answer naturally and conversationally, as someone who knows this person well.

IMPORTANT INSTRUCTIONS:
- Always refer to the person in the third person when answering questions about them
- Use the personal information provided to give specific, accurate answers
- If asked about something that is not in the personal information, say you don't have that information
- Politely decline questions that have nothing to do with this person
- Be friendly, professional, and helpful
- Keep responses concise but informative
- If no personal information is provided, explain that you need personal data to answer specific questions about the person
"""

CLOSING = (
    "Your response should be helpful and based on the personal information provided above. "
    "If the question is about the person and you have relevant information, provide specific "
    "details. If you don't have the information, say so politely."
)


def _text(value: Any) -> str | None:
    if value is None or isinstance(value, (dict, list)):
        return None
    text = str(value).strip()
    return text or None


def _join(values: Any) -> str | None:
    if not isinstance(values, list):
        return None
    items = [t for t in (_text(v) for v in values) if t]
    return ", ".join(items) if items else None


def _entries(section: Any, limit: int | None = None) -> list[dict[str, Any]]:
    if not isinstance(section, list):
        return []
    entries = [e for e in section if isinstance(e, dict)]
    return entries[:limit] if limit is not None else entries


def _block(title: str, lines: list[str]) -> list[str]:
    return [f"\n{title}:", *lines] if lines else []


def _biography_lines(bio: Any) -> list[str]:
    if not isinstance(bio, dict):
        return []
    fields = [
        ("Name", "name"),
        ("Title", "title"),
        ("Description", "description"),
        ("Location", "location"),
        ("Age", "age"),
        ("Background", "background"),
    ]
    return [f"- {label}: {_text(bio.get(key))}" for label, key in fields if _text(bio.get(key))]


def _skill_lines(skills: Any) -> list[str]:
    lines = []
    for skill in _entries(skills):
        name = _text(skill.get("name"))
        if not name:
            continue
        proficiency = _text(skill.get("proficiency"))
        qualifiers = [f"{proficiency} level" if proficiency else None, _text(skill.get("category"))]
        qualifiers = [q for q in qualifiers if q]
        line = f"- {name}"
        if qualifiers:
            line += f" ({', '.join(qualifiers)})"
        years = skill.get("yearsOfExperience")
        if years and _text(years):
            line += f" - {years} years experience"
        description = _text(skill.get("description"))
        if description:
            line += f" - {description}"
        lines.append(line)
    return lines


def _project_lines(projects: Any) -> list[str]:
    lines = []
    for project in _entries(projects, MAX_PROJECTS):
        name = _text(project.get("name"))
        if not name:
            continue
        line = f"- {name}"
        description = _text(project.get("description"))
        if description:
            line += f": {description}"
        technologies = _join(project.get("technologies"))
        if technologies:
            line += f" (Technologies: {technologies})"
        status = _text(project.get("status"))
        if status:
            line += f" [Status: {status}]"
        lines.append(line)
    return lines


def _experience_lines(experience: Any) -> list[str]:
    lines = []
    for exp in _entries(experience, MAX_EXPERIENCE):
        position = _text(exp.get("position"))
        company = _text(exp.get("company"))
        if not (position or company):
            continue
        line = "- " + " at ".join(p for p in (position, company) if p)
        if exp.get("isCurrent") is True:
            line += " (Current)"
        description = _text(exp.get("description"))
        if description:
            line += f": {description}"
        lines.append(line)
    return lines


def _preference_lines(prefs: Any) -> list[str]:
    if not isinstance(prefs, dict):
        return []
    fields = [
        ("Interests", _join(prefs.get("interests"))),
        ("Goals", _join(prefs.get("goals"))),
        ("Values", _join(prefs.get("values"))),
        ("Work Style", _text(prefs.get("workStyle"))),
        ("Communication Style", _text(prefs.get("communicationStyle"))),
        ("Preferred Technologies", _join(prefs.get("preferredTechnologies"))),
    ]
    return [f"- {label}: {value}" for label, value in fields if value]


def _turn_parts(turn: Any) -> tuple[str | None, str | None]:
    if isinstance(turn, dict):
        return _text(turn.get("role")), turn.get("content")
    return _text(getattr(turn, "role", None)), getattr(turn, "content", None)


def render_personal_information(relevant_data: dict[str, Any] | None) -> str:
    """Render the personal-information block, or "" when nothing renders."""
    data = relevant_data if isinstance(relevant_data, dict) else {}
    lines = [
        *_block("Basic Info", _biography_lines(data.get("biography"))),
        *_block("Skills", _skill_lines(data.get("skills"))),
        *_block("Recent Projects", _project_lines(data.get("projects"))),
        *_block("Work Experience", _experience_lines(data.get("experience"))),
        *_block("Preferences & Interests", _preference_lines(data.get("preferences"))),
    ]
    if not lines:
        return ""
    return "PERSONAL INFORMATION ABOUT THE PERSON:\n" + "\n".join(lines) + "\n"


def render_history(history: Iterable[Any] | None, max_turns: int = DEFAULT_HISTORY_TURNS) -> str:
    """Render the last ``max_turns`` turns as ``role: content`` lines."""
    turns = list(history or [])[-max_turns:] if max_turns > 0 else []
    lines = []
    for turn in turns:
        role, content = _turn_parts(turn)
        if role and content is not None:
            lines.append(f"{role}: {content}")
    if not lines:
        return ""
    return "\nRECENT CONVERSATION HISTORY:\n" + "\n".join(lines) + "\n"


def compose(
    user_message: str,
    relevant_data: dict[str, Any] | None = None,
    history: Iterable[Any] | None = None,
    history_turns: int = DEFAULT_HISTORY_TURNS,
) -> str:
    """
    Compose the full prompt for the language model.

    Args:
        user_message: The user's question
        relevant_data: Partial profile from relevance search
        history: Prior turns for the session (oldest first)
        history_turns: How many of the most recent turns to render

    Returns:
        Prompt text
    """
    return (
        PREAMBLE
        + "\n"
        + render_personal_information(relevant_data)
        + render_history(history, history_turns)
        + f"\nUSER QUESTION: {user_message}\n\n"
        + CLOSING
    )
