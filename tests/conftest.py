"""Pytest fixtures for FamLink tests."""

import tempfile

import pytest

from famlink.config import LayoutSettings
from famlink.graph.family_store import FamilyStore
from famlink.linking.protocol import FamilyLinker
from famlink.models import Member


@pytest.fixture
def store():
    """FamilyStore on a throwaway database."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield FamilyStore(db_path=f"{tmpdir}/families.db")


@pytest.fixture
def linker(store):
    """FamilyLinker over the test store."""
    return FamilyLinker(store)


@pytest.fixture
def layout_config():
    """Layout geometry independent of environment variables."""
    return LayoutSettings(
        node_width=100,
        margin=50,
        top_offset=80,
        generation_gap=180,
        min_generation_gap=120,
        min_spacing=140,
        max_spacing=280,
        spread_factor=1.5,
        sibling_spacing=120,
        branch_gap=40,
    )


@pytest.fixture
def bello_members():
    """Polygamous family: father, two wives, children linked by mother_id."""
    return [
        Member(id="f", first_name="Musa", last_name="Bello", relationship="Father", birth_year="1960"),
        Member(id="m1", first_name="Amina", last_name="Bello", relationship="Wife1", birth_year="1965"),
        Member(id="m2", first_name="Hauwa", last_name="Bello", relationship="Wife2", birth_year="1970"),
        Member(id="c1", first_name="Sani", last_name="Bello", relationship="Son",
               birth_year="1990", mother_id="m1"),
        Member(id="c2", first_name="Zainab", last_name="Bello", relationship="Daughter",
               birth_year="1992", mother_id="m2"),
        Member(id="c3", first_name="Umar", last_name="Bello", relationship="Son",
               birth_year="1995", mother_id="m2"),
    ]


@pytest.fixture
def make_creator():
    """Factory for creator records passed to FamilyStore.create_family."""
    def _make(first_name: str, last_name: str, join_id: str = "") -> Member:
        return Member(
            first_name=first_name,
            last_name=last_name,
            relationship="Son",
            birth_year="1985",
            join_id=join_id,
        )
    return _make


@pytest.fixture
def two_families(store, make_creator):
    """Johnson family (creator JOHN001) and Mary's family (creator MARY002)."""
    johnson = store.create_family("The Johnson Family", make_creator("John", "Johnson", "JOHN001"))
    store.add_member(johnson.id, Member(
        first_name="Robert", last_name="Johnson", relationship="Father", birth_year="1955"
    ))
    mary = store.create_family("Mary's Family", make_creator("Mary", "Smith", "MARY002"))
    store.add_member(mary.id, Member(
        first_name="Lisa", last_name="Smith", relationship="Daughter", birth_year="2017"
    ))
    return store.get_family(johnson.id), store.get_family(mary.id)
