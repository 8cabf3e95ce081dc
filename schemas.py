from typing import Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from vision_prompts import normalize_languages

GoalId = Union[int, float, str]

MAX_BOARD_GOALS = 12


class Goal(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: GoalId
    emoji: str = ""
    title: str = ""
    description: Optional[str] = None

    @field_validator("emoji", "title", mode="before")
    @classmethod
    def none_to_empty(cls, v):
        return "" if v is None else v


class VisionRequest(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    vision_type: str = Field(default="", alias="visionType")
    goals: list[Goal] = Field(default_factory=list)
    user_vision: str = Field(default="", alias="userVision")
    languages: list[str] = Field(default_factory=lambda: ["English"], alias="language")
    timeline: str = ""
    board_size: str = Field(default="desktop", alias="boardSize")

    @field_validator("languages", mode="before")
    @classmethod
    def normalize_language_field(cls, v):
        items = v if isinstance(v, list) else [v]
        if not all(item is None or isinstance(item, str) for item in items):
            raise ValueError("language must be a string or a list of strings")
        return normalize_languages(v)

    @field_validator("user_vision", "vision_type", "timeline", mode="before")
    @classmethod
    def none_to_empty(cls, v):
        return "" if v is None else v


class ImageRequest(BaseModel):
    """Either a ready ``prompt`` or the wallpaper fields to build one from."""
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    prompt: str = ""
    size: Literal["desktop", "mobile"] = "desktop"
    vision_type: str = Field(default="", alias="visionType")
    goal_type: str = Field(default="", alias="goalType")
    user_description: str = Field(default="", alias="userDescription")
    details: str = ""
    timeline: str = ""

    @field_validator("prompt", "vision_type", "goal_type", "user_description", "details", "timeline", mode="before")
    @classmethod
    def none_to_empty(cls, v):
        return "" if v is None else v

    @field_validator("prompt")
    @classmethod
    def strip_prompt(cls, v):
        return v.strip()

    @model_validator(mode="after")
    def prompt_or_wallpaper_fields(self):
        if not (self.prompt or self.vision_type or self.goal_type or self.user_description):
            raise ValueError("Prompt cannot be empty")
        return self


class QuotesRequest(VisionRequest):
    pass


class VisionQuotesRequest(VisionRequest):
    count: Optional[int] = Field(default=None, ge=1, le=12)


class IndividualQuotesRequest(VisionRequest):
    goals: list[Goal] = Field(min_length=1)


class QuestionsRequest(VisionRequest):
    pass


class GoalImagesRequest(VisionRequest):
    goals: list[Goal] = Field(min_length=1)
    quotes: dict[str, str] = Field(default_factory=dict)
    size: Literal["desktop", "mobile"] = "desktop"
    mode: Literal["sequential", "parallel"] = "sequential"


class VisionBoardRequest(VisionRequest):
    vision_type: str = Field(default="", alias="theme")
    custom_vision_text: str = Field(default="", alias="customVisionText")
    quotes: list[str] = Field(default_factory=list)


class ComposeBoardRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    goals: list[Goal] = Field(default_factory=list, max_length=MAX_BOARD_GOALS)
    images: dict[str, Optional[str]] = Field(default_factory=dict)
    quotes: list[str] = Field(default_factory=list)
    size: Literal["desktop", "mobile"] = "desktop"
    title: str = "My Vision Board"
    affirmation: str = ""
