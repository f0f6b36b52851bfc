"""
Visual password catalog and matcher.

The catalog is static configuration: three option sets keyed by password
type. A student's stored payload yields exactly one option id, and a guess
is correct only when it equals that id.

    animal       {"animal": "cat"}                    → "cat"
    object       {"object": "ball"}                   → "ball"
    color_shape  {"color": "red", "shape": "circle"}  → "red-circle"
"""
from __future__ import annotations

import hmac
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from app.models.student import VisualPasswordType


@dataclass(frozen=True)
class VisualPasswordOption:
    id: str
    label: str
    glyph: str


@dataclass(frozen=True)
class VisualPasswordSpec:
    type: Optional[VisualPasswordType]
    data: Mapping[str, Any]

    @classmethod
    def from_student(cls, student) -> "VisualPasswordSpec":
        return cls(type=student.visual_password_type, data=student.visual_password_data or {})


# ── Catalog ───────────────────────────────────────────────────────────

ANIMALS: tuple[VisualPasswordOption, ...] = (
    VisualPasswordOption("cat", "Cat", "🐱"),
    VisualPasswordOption("dog", "Dog", "🐶"),
    VisualPasswordOption("rabbit", "Rabbit", "🐰"),
    VisualPasswordOption("bear", "Bear", "🐻"),
    VisualPasswordOption("lion", "Lion", "🦁"),
    VisualPasswordOption("tiger", "Tiger", "🐯"),
    VisualPasswordOption("fox", "Fox", "🦊"),
    VisualPasswordOption("panda", "Panda", "🐼"),
    VisualPasswordOption("koala", "Koala", "🐨"),
    VisualPasswordOption("monkey", "Monkey", "🐵"),
    VisualPasswordOption("elephant", "Elephant", "🐘"),
    VisualPasswordOption("pig", "Pig", "🐷"),
    VisualPasswordOption("frog", "Frog", "🐸"),
)

OBJECTS: tuple[VisualPasswordOption, ...] = (
    VisualPasswordOption("apple", "Apple", "🍎"),
    VisualPasswordOption("banana", "Banana", "🍌"),
    VisualPasswordOption("car", "Car", "🚗"),
    VisualPasswordOption("house", "House", "🏠"),
    VisualPasswordOption("tree", "Tree", "🌳"),
    VisualPasswordOption("flower", "Flower", "🌸"),
    VisualPasswordOption("star", "Star", "⭐"),
    VisualPasswordOption("heart", "Heart", "❤️"),
    VisualPasswordOption("sun", "Sun", "☀️"),
    VisualPasswordOption("moon", "Moon", "🌙"),
    VisualPasswordOption("book", "Book", "📚"),
    VisualPasswordOption("ball", "Ball", "⚽"),
)

# (id, label); the client draws color options as a tinted circle
COLORS: tuple[tuple[str, str], ...] = (
    ("red", "Red"),
    ("blue", "Blue"),
    ("green", "Green"),
    ("yellow", "Yellow"),
    ("purple", "Purple"),
    ("orange", "Orange"),
    ("pink", "Pink"),
    ("brown", "Brown"),
)

# (id, label, glyph)
SHAPES: tuple[tuple[str, str, str], ...] = (
    ("circle", "Circle", "●"),
    ("square", "Square", "■"),
    ("triangle", "Triangle", "▲"),
    ("star", "Star", "★"),
    ("heart", "Heart", "♥"),
    ("diamond", "Diamond", "♦"),
)


def color_shape_id(color: str, shape: str) -> str:
    # Both sides of a comparison must build the id with this function.
    return f"{color}-{shape}"


COLOR_SHAPES: tuple[VisualPasswordOption, ...] = tuple(
    VisualPasswordOption(color_shape_id(color, shape), f"{color_label} {shape_label}", glyph)
    for color, color_label in COLORS
    for shape, shape_label, glyph in SHAPES
)

CATALOG: dict[VisualPasswordType, tuple[VisualPasswordOption, ...]] = {
    VisualPasswordType.ANIMAL: ANIMALS,
    VisualPasswordType.OBJECT: OBJECTS,
    VisualPasswordType.COLOR_SHAPE: COLOR_SHAPES,
}

PROMPTS: dict[VisualPasswordType, str] = {
    VisualPasswordType.ANIMAL: "Which animal is your password?",
    VisualPasswordType.OBJECT: "Which object is your password?",
    VisualPasswordType.COLOR_SHAPE: "Which color and shape is your password?",
}


def options_for(password_type: VisualPasswordType | str | None) -> tuple[VisualPasswordOption, ...]:
    try:
        return CATALOG[VisualPasswordType(password_type)]
    except ValueError:
        return ()


def option_ids(password_type: VisualPasswordType | str | None) -> frozenset[str]:
    return frozenset(o.id for o in options_for(password_type))


def prompt_for(password_type: VisualPasswordType | str | None) -> str:
    try:
        return PROMPTS[VisualPasswordType(password_type)]
    except ValueError:
        return "Pick your picture password."


# ── Matcher ───────────────────────────────────────────────────────────

def correct_answer(spec: VisualPasswordSpec) -> str:
    """The single option id this password accepts; "" when it is unusable."""
    data = spec.data or {}
    if spec.type is VisualPasswordType.ANIMAL:
        return str(data.get("animal") or "")
    if spec.type is VisualPasswordType.OBJECT:
        return str(data.get("object") or "")
    if spec.type is VisualPasswordType.COLOR_SHAPE:
        color, shape = data.get("color"), data.get("shape")
        if not color or not shape:
            return ""
        return color_shape_id(str(color), str(shape))
    return ""


def matches(spec: VisualPasswordSpec, selected_option_id: str | None) -> bool:
    expected = correct_answer(spec)
    if not expected or not selected_option_id:
        return False
    return hmac.compare_digest(expected.encode("utf-8"), selected_option_id.encode("utf-8"))


def is_configured(spec: VisualPasswordSpec) -> bool:
    return bool(correct_answer(spec))


def validate_spec(password_type: VisualPasswordType, data: Mapping[str, Any]) -> dict[str, str]:
    """
    Normalise a teacher-submitted payload and make sure its answer is a
    catalog option, so exactly one displayed option can ever match.

    Raises ValueError with a user-facing message otherwise.
    """
    if password_type is VisualPasswordType.ANIMAL:
        normalised = {"animal": str(data.get("animal") or "").strip().lower()}
    elif password_type is VisualPasswordType.OBJECT:
        normalised = {"object": str(data.get("object") or "").strip().lower()}
    elif password_type is VisualPasswordType.COLOR_SHAPE:
        normalised = {
            "color": str(data.get("color") or "").strip().lower(),
            "shape": str(data.get("shape") or "").strip().lower(),
        }
    else:
        raise ValueError("Unknown visual password type")

    answer = correct_answer(VisualPasswordSpec(password_type, normalised))
    if answer not in option_ids(password_type):
        raise ValueError(f"Not a valid {password_type.value} option")
    return normalised
