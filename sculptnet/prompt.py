"""
Structured prompt schema used to validate the parameter document.
"""
import copy
import math
from typing import Annotated, Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr, ValidationError, model_validator

from .types import ValidationIssue, ValidationResult

NonEmptyStr = Annotated[StrictStr, Field(min_length=1)]


def _unsupported_extra(key: str, value: Any) -> Optional[str]:
    """Dot path of the first value under `key` that is not a string, finite number or record."""
    stack = [(key, value)]
    while stack:
        path, item = stack.pop()
        if isinstance(item, dict):
            for child_key, child in item.items():
                if not isinstance(child_key, str):
                    return path
                stack.append((f"{path}.{child_key}", child))
        elif isinstance(item, bool) or not isinstance(item, (str, int, float)):
            return path
        elif isinstance(item, float) and not math.isfinite(item):
            return path
    return None


class _Record(BaseModel):
    # Unknown keys are kept; numbers are never coerced into strings
    model_config = ConfigDict(extra="allow")

    @model_validator(mode="after")
    def _check_extra_values(self):
        for key, value in (self.model_extra or {}).items():
            bad_path = _unsupported_extra(key, value)
            if bad_path is not None:
                raise ValueError(f"unsupported value at '{bad_path}', expected a string, number or record")
        return self


class Lighting(_Record):
    conditions: NonEmptyStr
    direction: NonEmptyStr
    shadows: NonEmptyStr


class Aesthetics(_Record):
    composition: NonEmptyStr
    color_scheme: NonEmptyStr
    mood_atmosphere: NonEmptyStr
    preference_score: Optional[StrictStr] = None
    aesthetic_score: Optional[StrictStr] = None


class PhotographicCharacteristics(_Record):
    depth_of_field: NonEmptyStr
    focus: NonEmptyStr
    camera_angle: NonEmptyStr
    lens_focal_length: NonEmptyStr


class SceneObject(_Record):
    description: NonEmptyStr
    location: NonEmptyStr
    relationship: Optional[StrictStr] = None
    relative_size: Optional[StrictStr] = None
    shape_and_color: Optional[StrictStr] = None
    texture: Optional[StrictStr] = None
    appearance_details: Optional[StrictStr] = None
    number_of_objects: Optional[StrictInt] = Field(default=None, gt=0)
    orientation: Optional[StrictStr] = None
    expression: Optional[StrictStr] = None


class TextRender(_Record):
    text: NonEmptyStr
    location: NonEmptyStr
    size: NonEmptyStr
    color: NonEmptyStr
    font: NonEmptyStr
    appearance_details: Optional[StrictStr] = None


class StructuredPrompt(_Record):
    """Full structured image prompt."""
    short_description: NonEmptyStr
    objects: List[SceneObject] = Field(min_length=1)
    background_setting: NonEmptyStr
    lighting: Lighting
    aesthetics: Aesthetics
    photographic_characteristics: PhotographicCharacteristics
    style_medium: NonEmptyStr
    artistic_style: Optional[StrictStr] = None
    text_render: Optional[List[TextRender]] = None
    context: NonEmptyStr


_DEFAULT_PROMPT: Dict[str, Any] = {
    "short_description": "abstract sculpture in a studio setting",
    "objects": [
        {
            "description": "an abstract sculptural form with smooth, flowing curves",
            "location": "center",
            "relationship": "primary subject of the composition",
            "relative_size": "large within frame",
            "shape_and_color": "organic, flowing shape with neutral tones",
            "texture": "smooth, polished surface",
            "appearance_details": "modern, minimalist aesthetic with clean lines",
            "number_of_objects": 1,
            "orientation": "upright",
        }
    ],
    "background_setting": "clean studio environment with neutral backdrop",
    "lighting": {
        "conditions": "soft volumetric god rays from left",
        "direction": "overhead and slightly front-lit",
        "shadows": "soft, diffused shadows",
    },
    "aesthetics": {
        "composition": "rule of thirds",
        "color_scheme": "warm complementary colors",
        "mood_atmosphere": "elegant, sophisticated",
    },
    "photographic_characteristics": {
        "depth_of_field": "shallow, with subject in sharp focus",
        "focus": "sharp focus on subject",
        "camera_angle": "eye level",
        "lens_focal_length": "50mm standard",
    },
    "style_medium": "photograph",
    "artistic_style": "realistic, detailed",
    "context": (
        "This is a professional product photograph for a gallery or portfolio, "
        "showcasing the sculptural form with attention to lighting and composition."
    ),
}


def default_prompt() -> Dict[str, Any]:
    """Fresh copy of the default document."""
    return copy.deepcopy(_DEFAULT_PROMPT)


def validate_prompt(document: Any) -> ValidationResult:
    """
    Validate a document against the structured prompt schema.

    Args:
        document: Parsed document (normally a dict)

    Returns:
        ValidationResult listing every violation by dot path
    """
    try:
        StructuredPrompt.model_validate(document)
    except ValidationError as e:
        issues = [
            ValidationIssue(
                path=".".join(str(part) for part in err["loc"]) or "<root>",
                message=err["msg"],
            )
            for err in e.errors()
        ]
        return ValidationResult(success=False, errors=issues)
    return ValidationResult(success=True)
