"""Tests for the checkbox inference classifiers."""
import pytest

from lessondocs.models.lesson import DayPlan
from lessondocs.services.inference import (
    ASSESSMENT_CHECKBOXES,
    ASSESSMENT_RULES,
    CURRICULUM_CHECKBOXES,
    CURRICULUM_RULES,
    MATERIAL_RULES,
    MATERIALS_CHECKBOXES,
    METHOD_RULES,
    METHODS_CHECKBOXES,
    OTHER_AREA_RULES,
    OTHER_AREAS_CHECKBOXES,
    day_text,
    infer_assessment,
    infer_curriculum_areas,
    infer_day_checkboxes,
    infer_materials,
    infer_methods,
    infer_other_areas,
)


@pytest.mark.parametrize("rules, vocabulary", [
    (MATERIAL_RULES, MATERIALS_CHECKBOXES),
    (METHOD_RULES, METHODS_CHECKBOXES),
    (ASSESSMENT_RULES, ASSESSMENT_CHECKBOXES),
    (CURRICULUM_RULES, CURRICULUM_CHECKBOXES),
    (OTHER_AREA_RULES, OTHER_AREAS_CHECKBOXES),
])
def test_rules_only_produce_known_keys(rules, vocabulary):
    assert {key for key, _ in rules} <= set(vocabulary)


def test_tripod_and_lighting_mark_other_equipment():
    assert "other_equipment" in infer_materials("Set up the tripod and lighting kit")


def test_text_without_keywords_selects_nothing():
    text = "Students brainstorm ideas in silence"
    assert infer_materials(text) == set()
    assert infer_materials("") == set()
    assert infer_other_areas("") == set()


def test_one_text_can_trigger_several_keys():
    selected = infer_materials("Watch a video on the projector, then fill in the worksheet")
    assert {"video_dvd", "projector", "supplemental_materials"} <= selected


def test_matching_is_case_insensitive():
    assert infer_materials("TRIPOD") == infer_materials("tripod")


def test_methods_lecture_from_activity_names():
    methods = infer_methods("we will discuss the clip", ["Direct Instruction"])
    assert methods == {"discussion", "lecture"}


def test_assessment_keywords():
    assert infer_assessment("weekly quiz and homework") == {"test", "homework"}


def test_curriculum_keywords():
    areas = infer_curriculum_areas("write a script about the history of photography")
    assert areas == {"english", "social_studies"}


def test_other_areas_derived_from_curriculum_and_differentiation():
    areas = infer_other_areas(
        "teams troubleshoot",
        curriculum_areas=["english"],
        has_differentiation=True,
    )
    assert areas == {"teamwork", "problem_solving", "integrated_academics", "varied_learning"}


def test_day_text_includes_schedule_only_when_asked():
    day = DayPlan(
        topic="Framing",
        objectives=["Use the rule of thirds"],
        day_materials=["Tripod"],
        schedule=[{"time": "0:00", "name": "Lab", "description": "Shoot stills"}],
    )
    assert "shoot stills" in day_text(day)
    assert "shoot stills" not in day_text(day, schedule=False)
    assert "tripod" not in day_text(day)
    assert "tripod" in day_text(day, materials=True)


def test_day_checkboxes_merge_explicit_selections():
    day = DayPlan(
        topic="Quiet study",
        materials=["textbook", "not_a_checkbox"],
        methods=["guest_speaker"],
    )
    selections = infer_day_checkboxes(day)
    assert set(selections) == {"materials", "methods", "assessment", "curriculum", "other_areas"}
    assert "textbook" in selections["materials"]
    assert "not_a_checkbox" not in selections["materials"]
    assert "guest_speaker" in selections["methods"]


def test_day_checkboxes_from_sample(sample_plan):
    selections = infer_day_checkboxes(sample_plan.days[0])
    assert "other_equipment" in selections["materials"]
    assert "lecture" in selections["methods"]
    assert "teamwork" in selections["assessment"]
    assert "varied_learning" in selections["other_areas"]
