"""Tests for Join ID generation and normalization."""

from famlink.linking.join_ids import generate_join_id, generate_unique_join_id, normalize_join_id


class TestJoinIds:

    def test_normalize(self):
        assert normalize_join_id("  MARADE ") == "MARADE"
        assert normalize_join_id("   ") is None
        assert normalize_join_id("") is None
        assert normalize_join_id(None) is None

    def test_generate(self):
        assert generate_join_id("Mary", "Adeyemi") == "MARADE"
        assert generate_join_id("Jo", "O'Neil") == "JOONE"
        assert generate_join_id("", "") == "MEMBER"

    def test_unique_suffixes(self):
        taken = {"MARADE", "MARADE01"}
        assert generate_unique_join_id("Mary", "Adeyemi", taken.__contains__) == "MARADE02"

    def test_unique_base_when_free(self):
        assert generate_unique_join_id("Mary", "Adeyemi", lambda _: False) == "MARADE"
