from __future__ import annotations

import pytest

from roster_import.models.class_entity import ClassEntity, ImportScope
from roster_import.services.class_matcher import ClassMatcher


@pytest.fixture()
def matcher(classes):
    return ClassMatcher(classes)


@pytest.mark.parametrize("label", ["Class 5", "class 5", "class5", "CLASS-5", "V", "5", "Class V"])
def test_class_label_spellings_resolve_to_same_class(matcher, label):
    assert matcher.match(label).id == "c5"


def test_exact_name_wins_before_token(classes):
    special = ClassEntity(id="x5", name="5", sort_order=99)
    m = ClassMatcher((special, *classes))
    # "Class 5" and "5" share a token; the exact name resolves first
    assert m.match("5").id == "x5"
    assert m.match("Class 5").id == "c5"


def test_preschool_classes(matcher):
    assert matcher.match("nursery").id == "nur"
    assert matcher.match("L.K.G").id == "lkg"


def test_unknown_label_is_none(matcher):
    assert matcher.match("Class 99") is None
    assert matcher.match("Music") is None


def test_sheet_name_used_when_label_missing(matcher):
    assert matcher.match("", "Class 3").id == "c3"
    assert matcher.match(None, "III").id == "c3"


def test_sheet_name_ignored_when_label_present(matcher):
    assert matcher.match("Class 99", "Class 3") is None


def test_csv_falls_back_to_page_scope(classes):
    m = ClassMatcher(classes, ImportScope.for_class("Class 3"))
    assert m.match("", "CSV").id == "c3"
    assert m.match("", None).id == "c3"


def test_named_sheet_does_not_fall_back_to_scope(classes):
    m = ClassMatcher(classes, ImportScope.for_class("Class 3"))
    assert m.match("", "Students") is None


def test_global_scope_has_no_fallback(matcher):
    assert matcher.match("", "CSV") is None


def test_in_scope(classes):
    scoped = ClassMatcher(classes, ImportScope.for_class("class-3"))
    by_id = {c.id: c for c in classes}
    assert scoped.in_scope(by_id["c3"]) is True
    assert scoped.in_scope(by_id["c5"]) is False
    assert ClassMatcher(classes).in_scope(by_id["c5"]) is True


def test_scope_all_means_global():
    assert ImportScope.for_class("all").class_name is None
    assert ImportScope.for_class("  ").class_name is None
    assert ImportScope.for_class(None).class_name is None
    assert ImportScope.for_class(" Class 3 ").class_name == "Class 3"

