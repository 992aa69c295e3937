"""Pydantic schemas for the personal profile document.

Field names are snake_case in Python and camelCase on the wire/disk
(``years_of_experience`` <-> ``yearsOfExperience``). Unknown fields are
rejected so that typos surface as validation failures instead of being
silently dropped.
"""

import re
from datetime import datetime
from typing import Annotated, Any, Literal

from pydantic import AfterValidator, AnyUrl, BaseModel, ConfigDict, StringConstraints, TypeAdapter
from pydantic.alias_generators import to_camel

PROFILE_SCHEMA_VERSION = "1.0.0"

PROFICIENCY_LEVELS = ("beginner", "intermediate", "advanced", "expert")
PROJECT_STATUSES = ("completed", "in-progress", "planned", "archived")

Proficiency = Literal["beginner", "intermediate", "advanced", "expert"]
ProjectStatus = Literal["completed", "in-progress", "planned", "archived"]

NonEmptyStr = Annotated[str, StringConstraints(min_length=1)]

_URL_ADAPTER = TypeAdapter(AnyUrl)
_DATE_RE = re.compile(r"^\d{4}(-\d{2}(-\d{2})?)?$")


def _check_uri(value: str) -> str:
    # Validate with AnyUrl but keep the caller's spelling (AnyUrl normalizes)
    try:
        _URL_ADAPTER.validate_python(value)
    except ValueError as e:
        raise ValueError("must be a valid uri") from e
    return value


def _check_date(value: str) -> str:
    if _DATE_RE.match(value):
        return value
    try:
        datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError as e:
        raise ValueError("must be a valid ISO-8601 date") from e
    return value


Uri = Annotated[str, AfterValidator(_check_uri)]
IsoDate = Annotated[str, AfterValidator(_check_date)]
Number = int | float


class ProfileModel(BaseModel):
    """Base for every profile entity."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
    )


class Biography(ProfileModel):
    name: NonEmptyStr
    title: NonEmptyStr
    description: NonEmptyStr
    location: NonEmptyStr | None = None
    age: Number | None = None
    background: NonEmptyStr | None = None


class Skill(ProfileModel):
    id: NonEmptyStr | None = None
    name: NonEmptyStr
    category: NonEmptyStr  # e.g. programming, tools, soft-skills
    proficiency: Proficiency
    years_of_experience: Number | None = None
    description: NonEmptyStr | None = None


class Project(ProfileModel):
    id: NonEmptyStr | None = None
    name: NonEmptyStr
    description: NonEmptyStr
    technologies: list[str] | None = None
    status: ProjectStatus
    start_date: IsoDate | None = None
    end_date: IsoDate | None = None
    repository_url: Uri | None = None
    demo_url: Uri | None = None
    role: NonEmptyStr | None = None
    achievements: list[str] | None = None


class Experience(ProfileModel):
    id: NonEmptyStr | None = None
    company: NonEmptyStr
    position: NonEmptyStr
    start_date: IsoDate
    end_date: IsoDate | None = None
    description: NonEmptyStr | None = None
    achievements: list[str] | None = None
    technologies: list[str] | None = None
    is_current: bool = False


class Education(ProfileModel):
    id: NonEmptyStr | None = None
    institution: NonEmptyStr
    degree: NonEmptyStr
    field: NonEmptyStr
    start_date: IsoDate | None = None
    end_date: IsoDate | None = None
    gpa: Number | None = None
    achievements: list[str] | None = None


class Preferences(ProfileModel):
    work_style: NonEmptyStr | None = None
    interests: list[str] | None = None
    goals: list[str] | None = None
    values: list[str] | None = None
    communication_style: NonEmptyStr | None = None
    preferred_technologies: list[str] | None = None


class SocialLink(ProfileModel):
    id: NonEmptyStr | None = None
    platform: NonEmptyStr  # e.g. linkedin, github, twitter
    url: Uri
    username: NonEmptyStr | None = None
    is_public: bool = True


class ProfileMetadata(ProfileModel):
    created_at: datetime | None = None
    updated_at: datetime | None = None
    version: str = PROFILE_SCHEMA_VERSION


class Profile(ProfileModel):
    """The whole document. Every section is optional; absent != empty."""

    id: NonEmptyStr | None = None
    biography: Biography | None = None
    skills: list[Skill] | None = None
    projects: list[Project] | None = None
    experience: list[Experience] | None = None
    education: list[Education] | None = None
    preferences: Preferences | None = None
    social_links: list[SocialLink] | None = None
    metadata: ProfileMetadata | None = None


# Section name (wire spelling) -> schema of its value
SECTION_TYPES: dict[str, Any] = {
    "biography": Biography,
    "skills": list[Skill],
    "projects": list[Project],
    "experience": list[Experience],
    "education": list[Education],
    "preferences": Preferences,
    "socialLinks": list[SocialLink],
    "metadata": ProfileMetadata,
}

SECTION_NAMES = tuple(SECTION_TYPES)

# List sections whose entries carry a stable id
ID_SECTIONS = ("skills", "projects", "experience", "education", "socialLinks")

# metadata is owned by the store
WRITABLE_SECTIONS = tuple(name for name in SECTION_NAMES if name != "metadata")

SECTION_DESCRIPTIONS = {
    "biography": "Basic personal information and background",
    "skills": "Technical and soft skills with proficiency levels",
    "projects": "Personal and professional projects",
    "experience": "Work experience and professional history",
    "education": "Educational background",
    "preferences": "Personal preferences and characteristics",
    "socialLinks": "Social media and professional profile links",
}


def _entity_fields(model: type[ProfileModel]) -> tuple[list[str], list[str]]:
    required, optional = [], []
    for name, info in model.model_fields.items():
        if name == "id":
            continue
        alias = info.alias or name
        (required if info.is_required() else optional).append(alias)
    return required, optional


def build_schema_info() -> dict[str, Any]:
    """Describe each writable section for form builders."""
    sections: dict[str, Any] = {}
    for name in WRITABLE_SECTIONS:
        section_type = SECTION_TYPES[name]
        is_list = getattr(section_type, "__origin__", None) is list
        model = section_type.__args__[0] if is_list else section_type
        required, optional = _entity_fields(model)
        sections[name] = {
            "description": SECTION_DESCRIPTIONS[name],
            "structure": "array" if is_list else "object",
            "required": required,
            "optional": optional,
        }
    return {
        "sections": sections,
        "enums": {
            "proficiency": list(PROFICIENCY_LEVELS),
            "projectStatus": list(PROJECT_STATUSES),
        },
        "version": PROFILE_SCHEMA_VERSION,
    }
