"""
Checkbox inference from free lesson text.

The CTE template carries fixed checklists (materials, methods, assessment,
curriculum areas, other areas) that AI-authored lesson content never maps to
one-to-one. Each classifier here is an independent, pure function from
lowercased text to a set of checkbox keys, driven by a table of keyword
regexes. A single text can trigger several keys; text with none of the
keywords yields an empty set.

Matching is on substrings, so "light" also fires on "lighting". The result
is a starting selection for the teacher to edit.
"""
from __future__ import annotations

import re
from typing import Dict, FrozenSet, Iterable, Pattern, Sequence, Set, Tuple

from lessondocs.models.lesson import DayPlan

# ---------------------------------------------------------------------------
# Checkbox vocabularies (key -> label printed in the template)
# ---------------------------------------------------------------------------

MATERIALS_CHECKBOXES: Dict[str, str] = {
    "textbook": "Textbook",
    "lab_manual": "Lab Manual",
    "video_dvd": "Video/DVD",
    "labs": "Labs",
    "posters": "Posters",
    "speaker": "Speaker",
    "projector": "Projector",
    "computer": "Computer",
    "supplemental_materials": "Supplemental Materials",
    "student_journals": "Student Journals",
    "other_equipment": "Other Equipment",
}

METHODS_CHECKBOXES: Dict[str, str] = {
    "discussion": "Discussion",
    "demonstration": "Demonstration",
    "lecture": "Lecture",
    "powerpoint": "Power Point",
    "multimedia": "Multi-Media",
    "guest_speaker": "Guest Speaker",
}

ASSESSMENT_CHECKBOXES: Dict[str, str] = {
    "homework": "Homework",
    "classwork": "Classwork",
    "test": "Test",
    "project_based": "Project-based",
    "teamwork": "Teamwork",
    "observation": "Teacher Observation",
    "performance": "Performance",
    "on_task": "On-Task",
    "other": "Other",
}

CURRICULUM_CHECKBOXES: Dict[str, str] = {
    "math": "Math",
    "science": "Science",
    "reading": "Reading",
    "social_studies": "Social Studies",
    "english": "English",
    "government_economics": "Government/Economics",
    "fine_arts": "Fine Arts",
    "foreign_language": "Foreign Language",
    "technology": "Technology",
}

OTHER_AREAS_CHECKBOXES: Dict[str, str] = {
    "safety": "Safety",
    "management_skills": "Management Skills",
    "teamwork": "Teamwork",
    "live_work": "Live work",
    "higher_order_reasoning": "Higher Order Reasoning",
    "varied_learning": "Varied Learning",
    "work_ethics": "Work Ethics",
    "integrated_academics": "Integrated Academics",
    "ctso": "CTSO",
    "problem_solving": "Problem Solving",
}


Rules = Sequence[Tuple[str, Pattern[str]]]


def _rules(*pairs: Tuple[str, str]) -> Rules:
    return tuple((key, re.compile(pattern)) for key, pattern in pairs)


MATERIAL_RULES = _rules(
    ("projector", r"presentation|present|show|display|screen|projector|slides|powerpoint"),
    ("computer", r"computer|premiere|photoshop|editing|software|digital|laptop"),
    ("video_dvd", r"video|watch|film|movie|clip|youtube|dvd"),
    ("labs", r"lab|studio|hands-on|practice|filming|shoot|record"),
    ("speaker", r"audio|sound|music|listen|speaker|playback"),
    ("supplemental_materials", r"handout|worksheet|guide|reference|template|storyboard|script"),
    ("other_equipment", r"camera|tripod|lighting|light|microphone|mic|equipment|gear"),
    ("student_journals", r"journal|notebook|notes|reflection"),
    ("posters", r"poster|chart|diagram|visual aid"),
    ("textbook", r"textbook|text book|chapter"),
)

METHOD_RULES = _rules(
    ("discussion", r"discussion|discuss|debate|share|q&a"),
    ("demonstration", r"demonstrat|show how|model|walk through|tutorial"),
    ("lecture", r"lecture|direct instruction|teach|explain|present content|introduce"),
    ("powerpoint", r"powerpoint|presentation|slides"),
    ("multimedia", r"video|multimedia|multi-media|youtube|film|audio|digital"),
    ("guest_speaker", r"guest speaker|guest|industry professional|visitor"),
)

# Activity names alone are enough to mark a lecture
_LECTURE_ACTIVITY = re.compile(r"direct instruction|lecture|mini-lecture|instruction")

ASSESSMENT_RULES = _rules(
    ("classwork", r"classwork|class work|activity|practice|exercise|in-class|exit ticket"),
    ("observation", r"observ|monitor|circulate|watch|check in"),
    ("project_based", r"project|final|deliverable|portfolio|create|produce"),
    ("teamwork", r"team|group|partner|collaborat|crew|together|peer"),
    ("performance", r"perform|present|demonstrat|show|pitch"),
    ("on_task", r"participat|engag|on-task|focused|active"),
    ("test", r"test|quiz|exam"),
    ("homework", r"homework|home work|take home|assignment"),
)

CURRICULUM_RULES = _rules(
    ("technology", r"camera|editing|software|premiere|photoshop|computer|digital|video|audio"),
    ("english", r"script|writing|story|narrative|interview|news"),
    ("reading", r"reading|research|article"),
    ("fine_arts", r"composition|visual|design|aesthetic|creative|color|lighting|framing"),
    ("math", r"exposure|ratio|frame rate|aperture|shutter speed|iso"),
    ("science", r"light|sound wave|physics|optics"),
    ("social_studies", r"history|documentary|social|community|news|psa|public service"),
)

OTHER_AREA_RULES = _rules(
    ("safety", r"safety|equipment|handling|protective|hazard"),
    ("management_skills", r"time management|organize|planning|schedule|workflow|deadline"),
    ("teamwork", r"team|group|collaborat|partner|crew|together"),
    ("live_work", r"client|real-world|live production|community partner"),
    ("higher_order_reasoning", r"analyze|evaluat|create|critiqu|compare|design|develop"),
    ("varied_learning", r"visual|hands-on|demonstration|practice"),
    ("work_ethics", r"professional|responsibility|deadline|quality|industry standard"),
    ("ctso", r"skillsusa|ctso|competition|career development|leadership"),
    ("problem_solving", r"problem|solve|troubleshoot|debug|fix|challenge|solution"),
)


# ---------------------------------------------------------------------------
# Text assembly
# ---------------------------------------------------------------------------

def day_text(day: DayPlan, *, materials: bool = False, schedule: bool = True) -> str:
    """
    Concatenate a day's free text into one lowercased string.

    Topic, overview and objectives are always included; the day's material
    list and the schedule's activity names and descriptions are optional.
    """
    parts = [day.topic, day.overview or "", " ".join(day.objectives)]
    if materials:
        parts.append(" ".join(day.day_materials))
    if schedule:
        parts.append(" ".join(f"{item.name} {item.description}" for item in day.schedule))
    return " ".join(parts).lower()


def _match(text: str, rules: Rules) -> Set[str]:
    lowered = (text or "").lower()
    return {key for key, pattern in rules if pattern.search(lowered)}


# ---------------------------------------------------------------------------
# Classifiers
# ---------------------------------------------------------------------------

def infer_materials(text: str) -> Set[str]:
    return _match(text, MATERIAL_RULES)


def infer_methods(text: str, activity_names: Iterable[str] = ()) -> Set[str]:
    methods = _match(text, METHOD_RULES)
    if any(_LECTURE_ACTIVITY.search(name.lower()) for name in activity_names):
        methods.add("lecture")
    return methods


def infer_assessment(text: str) -> Set[str]:
    return _match(text, ASSESSMENT_RULES)


def infer_curriculum_areas(text: str) -> Set[str]:
    return _match(text, CURRICULUM_RULES)


def infer_other_areas(
    text: str,
    curriculum_areas: Iterable[str] = (),
    has_differentiation: bool = False,
) -> Set[str]:
    """
    Other areas addressed.

    Any curriculum area implies integrated academics; differentiated
    instruction implies varied learning.
    """
    areas = _match(text, OTHER_AREA_RULES)
    if has_differentiation:
        areas.add("varied_learning")
    if any(True for _ in curriculum_areas):
        areas.add("integrated_academics")
    return areas


def _explicit(keys, vocabulary: Dict[str, str]) -> FrozenSet[str]:
    """Explicitly supplied keys, restricted to the known vocabulary."""
    return frozenset(key for key in keys or () if key in vocabulary)


def infer_day_checkboxes(day: DayPlan) -> Dict[str, Set[str]]:
    """
    Run every classifier over a day and return selections per checklist.

    Explicit ``materials`` / ``methods`` / ``assessment`` keys on the day are
    merged into the inferred sets.
    """
    text = day_text(day)
    curriculum = infer_curriculum_areas(day_text(day, schedule=False))
    return {
        "materials": infer_materials(day_text(day, materials=True))
        | _explicit(day.materials, MATERIALS_CHECKBOXES),
        "methods": infer_methods(text, (item.name for item in day.schedule))
        | _explicit(day.methods, METHODS_CHECKBOXES),
        "assessment": infer_assessment(text)
        | _explicit(day.assessment, ASSESSMENT_CHECKBOXES),
        "curriculum": curriculum,
        "other_areas": infer_other_areas(
            text,
            curriculum_areas=curriculum,
            has_differentiation=not day.differentiation.is_empty(),
        ),
    }
