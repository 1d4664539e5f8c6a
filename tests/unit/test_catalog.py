"""Unit tests for the entity search presets."""

import pytest

from classroom_search.catalog import PROFILES, build_entity_index, get_profile
from classroom_search.search.index import ConfigurationError


class TestProfiles:
    def test_known_kinds(self):
        assert set(PROFILES) == {"courses", "assignments", "announcements"}

    def test_assignment_fields(self):
        profile = get_profile("assignments")
        assert [spec.path for spec in profile.fields] == ["title", "description"]
        assert profile.response_key == "courseWork"

    def test_unknown_kind_raises(self):
        with pytest.raises(ConfigurationError, match="Unknown entity kind 'grades'"):
            get_profile("grades")


class TestBuildEntityIndex:
    def test_courses_are_keyed_by_id(self, courses):
        results = build_entity_index("courses", courses).search("biology")

        assert [result.key for result in results] == ["c3", "c1"]

    def test_assignments_search_title_and_description(self, assignments):
        results = build_entity_index("assignments", assignments).search("biology")

        assert [result.key for result in results] == ["a2", "a1"]
        assert results[1].best_hit.field == "description"

    def test_announcements(self):
        announcements = [
            {"id": "n1", "text": "Quiz moved to Friday"},
            {"id": "n2", "text": "Field trip forms due"},
        ]
        results = build_entity_index("announcements", announcements).search("quiz")

        assert [result.key for result in results] == ["n1"]

    def test_threshold_override(self, courses):
        index = build_entity_index("courses", courses, threshold=0.1)

        assert index.threshold == 0.1
        assert index.search("biolgy") == []

    def test_missing_id_falls_back_to_position(self):
        results = build_entity_index("courses", [{"name": "Biology"}]).search("biology")

        assert results[0].key == 0
