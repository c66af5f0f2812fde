"""Backfill mappings used by the numbered migrations."""

import pytest

from stemlearn.db.migrate import CURRENT_VERSION, STEPS
from stemlearn.db.migrations.v005_education_level import education_level_from_grade
from stemlearn.db.migrations.v008_education_level_format import remap_education_level
from stemlearn.store.users import DEFAULT_THEME_COLOR, FEMALE_THEME_COLOR, theme_color_for_gender


class TestStepTable:
    def test_current_version(self):
        assert CURRENT_VERSION == 12

    def test_revisions_strictly_ascending(self):
        revisions = [step.revision for step in STEPS]
        assert revisions == sorted(revisions)
        assert len(set(revisions)) == len(revisions)
        assert revisions[0] == 4

    def test_every_step_documented(self):
        for step in STEPS:
            assert step.description
            assert callable(step.upgrade)


class TestEducationFromGrade:
    @pytest.mark.parametrize("grade", ["1", "4", "7"])
    def test_numeric_grades_kept(self, grade):
        assert education_level_from_grade(grade) == grade

    @pytest.mark.parametrize(
        ("grade", "expected"),
        [("form1", "form1"), ("Form 2", "form2"), ("FORM5", "form5"), ("form 3", "form3")],
    )
    def test_forms_lowercased(self, grade, expected):
        assert education_level_from_grade(grade) == expected

    @pytest.mark.parametrize("grade", [None, "", "8", "form6", "college", "grade 3"])
    def test_anything_else_is_none(self, grade):
        assert education_level_from_grade(grade) == "none"


class TestRemapEducationLevel:
    @pytest.mark.parametrize(
        ("legacy", "expected"),
        [
            ("primary", "1"),
            ("secondary", "form1"),
            ("undergraduate", "none"),
            ("masters", "none"),
            ("phd", "none"),
            (None, "none"),
        ],
    )
    def test_legacy_values(self, legacy, expected):
        assert remap_education_level(legacy) == expected

    def test_current_values_untouched(self):
        assert remap_education_level("form3") == "form3"
        assert remap_education_level("5") == "5"


class TestThemeColor:
    def test_female(self):
        assert theme_color_for_gender("female") == FEMALE_THEME_COLOR == "#FF48E3"

    def test_default(self):
        assert theme_color_for_gender("male") == DEFAULT_THEME_COLOR == "#13a4ec"
        assert theme_color_for_gender(None) == DEFAULT_THEME_COLOR
