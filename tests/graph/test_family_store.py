"""Tests for FamilyStore persistence."""

import sqlite3

import pytest

from famlink.models import Member, SetupStep


class TestFamilies:

    def test_create_family_with_creator(self, store, make_creator):
        family = store.create_family("The Bello Family", make_creator("Musa", "Bello"))

        assert family.name == "The Bello Family"
        assert family.is_main_family is True
        assert len(family.members) == 1
        creator = family.creator
        assert creator.is_family_creator is True
        assert creator.join_id == "MUSBEL"
        assert family.creator_id == creator.id
        assert family.creator_join_id == "MUSBEL"
        assert family.created_at

    def test_get_missing_family(self, store):
        assert store.get_family("missing") is None
        assert store.get_family_for_member("missing") is None

    def test_get_family_for_member(self, store, two_families):
        johnson, _ = two_families
        assert store.get_family_for_member(johnson.creator_id).id == johnson.id

    def test_rejected_creator_leaves_no_family(self, store, two_families, make_creator):
        """A taken creator Join ID rolls back the family row too."""
        with pytest.raises(ValueError):
            store.create_family("Duplicate", make_creator("Jon", "Doe", "JOHN001"))

        with sqlite3.connect(store.db_path) as conn:
            count = conn.execute("SELECT COUNT(*) FROM families").fetchone()[0]
        assert count == 2

    def test_creation_type_and_step(self, store, make_creator):
        family = store.create_family("Parents", make_creator("Ada", "Obi"),
                                     creation_type="parents_family")
        assert family.creation_type == "parents_family"
        assert family.current_step == SetupStep.INITIALIZED

    def test_setup_parents(self, store, make_creator):
        family = store.create_family("Bello", make_creator("Sani", "Bello"))
        father, mothers = store.setup_parents(
            family.id,
            Member(first_name="Musa", last_name="Bello", birth_year="1960"),
            [
                Member(first_name="Amina", last_name="Bello", birth_year="1965"),
                Member(first_name="Hauwa", last_name="Bello", birth_year="1970", spouse_order=3),
            ],
        )
        assert father.relationship == "Father"
        assert father.parent_type == "father"
        assert [(m.relationship, m.spouse_order) for m in mothers] == [("Wife1", 1), ("Wife3", 3)]

        reloaded = store.get_family(family.id)
        assert [m.first_name for m in reloaded.members] == ["Sani", "Musa", "Amina", "Hauwa"]
        assert reloaded.current_step == SetupStep.CHILDREN_SETUP

    def test_setup_parents_generates_distinct_join_ids(self, store, make_creator):
        """Join IDs generated within one transaction do not collide."""
        family = store.create_family("Twins", make_creator("Sani", "Bello"))
        _, mothers = store.setup_parents(
            family.id,
            Member(first_name="Musa", last_name="Bello", birth_year="1960"),
            [Member(first_name="Amina", last_name="Bello", birth_year="1965"),
             Member(first_name="Amina", last_name="Bello", birth_year="1966")],
        )
        assert [m.join_id for m in mothers] == ["AMIBEL", "AMIBEL01"]

    def test_setup_parents_unknown_family(self, store):
        with pytest.raises(ValueError):
            store.setup_parents("missing", Member(first_name="Musa"), [])


class TestMembers:

    def test_members_keep_insertion_order(self, store, make_creator):
        family = store.create_family("Order", make_creator("A", "Z"))
        for name in ("B", "C", "D"):
            store.add_member(family.id, Member(first_name=name, relationship="Son", birth_year="2000"))
        assert [m.first_name for m in store.get_members(family.id)] == ["A", "B", "C", "D"]

    def test_join_ids_are_unique(self, store, make_creator):
        family = store.create_family("Adeyemi", make_creator("Mary", "Adeyemi"))
        second = store.add_member(family.id, Member(first_name="Mary", last_name="Adeyemi"))
        third = store.add_member(family.id, Member(first_name="Maryam", last_name="Adeniyi"))
        assert second.join_id == "MARADE01"
        assert third.join_id == "MARADE02"

    def test_add_member_to_unknown_family(self, store):
        with pytest.raises(ValueError):
            store.add_member("missing", Member(first_name="X"))

    def test_round_trip_fields(self, store, make_creator):
        family = store.create_family("Fields", make_creator("Musa", "Bello"))
        saved = store.add_member(family.id, Member(
            first_name="Amina", last_name="Bello", relationship="Wife1", birth_year="1965",
            is_deceased=True, death_year="2015", mother_id=None, parent_type="mother",
            spouse_order=1, avatar_url="http://img/a.png",
        ))
        loaded = store.get_member(saved.id)
        assert loaded.family_id == family.id
        assert loaded.is_deceased is True
        assert loaded.death_year == "2015"
        assert loaded.parent_type == "mother"
        assert loaded.spouse_order == 1
        assert loaded.is_linked_member is False

    def test_find_by_join_id_is_exact(self, store, two_families):
        assert store.find_member_by_join_id("JOHN001").first_name == "John"
        assert store.find_member_by_join_id("john001") is None
        assert store.is_join_id_taken("MARY002")

    def test_update_member(self, store, two_families):
        johnson, _ = two_families
        robert = next(m for m in johnson.members if m.first_name == "Robert")
        updated = store.update_member(robert.id, birth_year="1956", join_id="HACKED", family_id="x")
        assert updated.birth_year == "1956"
        assert updated.join_id == robert.join_id
        assert updated.family_id == johnson.id

    def test_delete_member(self, store, two_families):
        johnson, _ = two_families
        robert = next(m for m in johnson.members if m.first_name == "Robert")
        assert store.delete_member(robert.id) is True
        assert store.get_member(robert.id) is None

    def test_creator_cannot_be_deleted(self, store, two_families):
        johnson, _ = two_families
        assert store.delete_member(johnson.creator_id) is False
        assert store.get_member(johnson.creator_id) is not None


class TestLinks:

    def test_links_are_visible_from_both_sides(self, store, two_families):
        johnson, mary = two_families
        store.add_link(johnson.id, mary.id, johnson.creator_id, "MARY002")

        assert store.is_linked(johnson.id, mary.id)
        assert store.is_linked(mary.id, johnson.id)
        assert [lf.name for lf in store.get_linked_families(johnson.id)] == ["Mary's Family"]
        assert [lf.name for lf in store.get_linked_families(mary.id)] == ["The Johnson Family"]

    def test_linked_families_on_family(self, store, two_families):
        johnson, mary = two_families
        link = store.add_link(johnson.id, mary.id, johnson.creator_id, "MARY002")
        family = store.get_family(johnson.id)
        assert family.linked_families[0].id == mary.id
        assert family.linked_families[0].linked_at == link.linked_at

    def test_mark_join_id_used(self, store, two_families):
        _, mary = two_families
        store.mark_join_id_used(mary.creator_id)
        assert store.get_member(mary.creator_id).join_id_used is True
