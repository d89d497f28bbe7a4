"""Tests for the relationship inference engine."""

from famlink.family.inference import available_mothers, family_statistics, infer_structure
from famlink.models import Member


class TestInferStructure:
    """Father, mothers, children and mother grouping."""

    def test_polygamous_family(self, bello_members):
        """Children are grouped by their explicit mother_id."""
        structure = infer_structure(bello_members)

        assert structure.father.id == "f"
        assert [m.id for m in structure.mothers] == ["m1", "m2"]
        assert [c.id for c in structure.children] == ["c1", "c2", "c3"]
        assert [c.id for c in structure.children_of("m1")] == ["c1"]
        assert [c.id for c in structure.children_of("m2")] == ["c2", "c3"]
        assert structure.fallback_assigned == []

    def test_union_of_groups_covers_all_children(self, bello_members):
        structure = infer_structure(bello_members)
        grouped = [c.id for group in structure.children_by_mother.values() for c in group]
        assert sorted(grouped) == ["c1", "c2", "c3"]

    def test_mother_without_children_is_present(self):
        """Every mother is a key even with no children."""
        members = [
            Member(id="f", relationship="Father", birth_year="1960"),
            Member(id="m1", relationship="Wife1", birth_year="1965"),
            Member(id="m2", relationship="Wife2", birth_year="1968"),
            Member(id="c1", relationship="Son", birth_year="1990", mother_id="m1"),
        ]
        structure = infer_structure(members)
        assert structure.children_by_mother["m2"] == []
        assert set(structure.children_by_mother) == {"m1", "m2"}

    def test_child_without_mother_id_goes_to_first_mother(self):
        members = [
            Member(id="m1", relationship="Wife1", birth_year="1965"),
            Member(id="m2", relationship="Wife2", birth_year="1968"),
            Member(id="c1", relationship="Daughter", birth_year="1990"),
        ]
        structure = infer_structure(members)
        assert [c.id for c in structure.children_of("m1")] == ["c1"]
        assert structure.fallback_assigned == ["c1"]

    def test_unknown_mother_id_goes_to_first_mother(self):
        members = [
            Member(id="m1", relationship="Mother", birth_year="1965"),
            Member(id="c1", relationship="Son", birth_year="1990", mother_id="ghost"),
        ]
        structure = infer_structure(members)
        assert [c.id for c in structure.children_of("m1")] == ["c1"]

    def test_first_father_wins(self):
        members = [
            Member(id="f1", relationship="Father", birth_year="1950"),
            Member(id="f2", relationship="Father", birth_year="1952"),
        ]
        structure = infer_structure(members)
        assert structure.father.id == "f1"
        assert [m.id for m in structure.others] == ["f2"]

    def test_no_mothers_keeps_children_listed(self):
        members = [
            Member(id="f", relationship="Father", birth_year="1950"),
            Member(id="c1", relationship="Son", birth_year="1980"),
        ]
        structure = infer_structure(members)
        assert structure.children_by_mother == {}
        assert [c.id for c in structure.children] == ["c1"]

    def test_other_labels_are_kept_aside(self):
        structure = infer_structure([Member(id="u", relationship="Uncle", birth_year="1950")])
        assert structure.father is None
        assert [m.id for m in structure.others] == ["u"]

    def test_empty_input(self):
        structure = infer_structure([])
        assert structure.father is None
        assert structure.mothers == []
        assert structure.children_by_mother == {}


class TestFamilySummaries:
    """Statistics and available mothers."""

    def test_available_mothers(self, bello_members):
        mothers = available_mothers(bello_members)
        assert [(m.id, m.spouse_order, m.children_count) for m in mothers] == [
            ("m1", 1, 1),
            ("m2", 2, 2),
        ]
        assert mothers[0].name == "Amina Bello"
        assert mothers[1].branch_name == "Wife 2"
        assert mothers[1].to_dict()["childrenCount"] == 2

    def test_stored_spouse_order_is_used(self):
        members = [Member(id="m", relationship="Wife", birth_year="1970", spouse_order=3)]
        assert available_mothers(members)[0].spouse_order == 3

    def test_statistics(self, bello_members):
        linked = Member(id="x", relationship="Son", birth_year="2000",
                        is_linked_member=True, source_family="Smith Family")
        stats = family_statistics(bello_members + [linked])
        assert stats.total_members == 7
        assert stats.original_members == 6
        assert stats.linked_members == 1
        assert stats.linked_families == 1
        assert stats.total_branches == 2
        assert stats.total_children == 4
