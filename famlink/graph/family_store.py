"""
Family Store - sqlite persistence for families, members and family links.

This is a DATA LAYER component:
- Handles database operations for families, members and family_links tables
- NO linking rules (FamilyLinker decides when a link is allowed)
- Used by the linking protocol and the HTTP backend

Members keep their insertion order (discovery order), which the tree
builder relies on for "first father wins" and wife numbering.
"""

import sqlite3
import uuid
from datetime import datetime
from pathlib import Path
from typing import Optional, List, Tuple

from famlink.config import settings
from famlink.linking.join_ids import generate_unique_join_id
from famlink.models import Family, LinkedFamily, Member, SetupStep


MEMBER_COLUMNS = (
    "id", "family_id", "first_name", "last_name", "full_name", "relationship",
    "birth_year", "is_deceased", "death_year", "is_verified", "is_family_creator",
    "join_id", "join_id_used", "avatar_url", "mother_id", "parent_type", "spouse_order",
)

BOOL_COLUMNS = {"is_deceased", "is_verified", "is_family_creator", "join_id_used"}

UPDATABLE_COLUMNS = {
    "first_name", "last_name", "full_name", "relationship", "birth_year",
    "is_deceased", "death_year", "avatar_url", "mother_id", "parent_type",
    "spouse_order", "is_verified",
}


class FamilyStore:
    """Manages families, their members and the links between families."""

    def __init__(self, db_path: str = None):
        self.db_path = db_path or settings.database.family_db_path
        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _init_db(self):
        """Initialize tables."""
        with sqlite3.connect(self.db_path) as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS families (
                    id TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    creator_id TEXT NOT NULL DEFAULT '',
                    creator_join_id TEXT NOT NULL DEFAULT '',
                    is_main_family INTEGER DEFAULT 0,
                    creation_type TEXT NOT NULL DEFAULT 'own_family',
                    current_step TEXT NOT NULL DEFAULT 'initialized',
                    created_at TEXT DEFAULT CURRENT_TIMESTAMP
                )
            """)
            conn.execute("""
                CREATE TABLE IF NOT EXISTS members (
                    seq INTEGER PRIMARY KEY AUTOINCREMENT,
                    id TEXT UNIQUE NOT NULL,
                    family_id TEXT NOT NULL REFERENCES families(id),
                    first_name TEXT DEFAULT '',
                    last_name TEXT DEFAULT '',
                    full_name TEXT,
                    relationship TEXT DEFAULT '',
                    birth_year TEXT DEFAULT '',
                    is_deceased INTEGER DEFAULT 0,
                    death_year TEXT,
                    is_verified INTEGER DEFAULT 0,
                    is_family_creator INTEGER DEFAULT 0,
                    join_id TEXT UNIQUE NOT NULL,
                    join_id_used INTEGER DEFAULT 0,
                    avatar_url TEXT,
                    mother_id TEXT,
                    parent_type TEXT,
                    spouse_order INTEGER
                )
            """)
            conn.execute("""
                CREATE TABLE IF NOT EXISTS family_links (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    family_id TEXT NOT NULL REFERENCES families(id),
                    linked_family_id TEXT NOT NULL REFERENCES families(id),
                    linked_by TEXT NOT NULL DEFAULT '',
                    join_id TEXT NOT NULL DEFAULT '',
                    linked_at TEXT NOT NULL,
                    UNIQUE (family_id, linked_family_id)
                )
            """)
            conn.execute("CREATE INDEX IF NOT EXISTS idx_member_family ON members(family_id)")
            conn.execute("CREATE INDEX IF NOT EXISTS idx_member_join_id ON members(join_id)")

    # ─────────────────────────────────────────
    # Families
    # ─────────────────────────────────────────

    def create_family(self, name: str, creator: Member, is_main_family: bool = True,
                      creation_type: str = "own_family") -> Family:
        """
        Create a family together with its creator.

        The family row and the creator are written in one transaction, so a
        rejected creator leaves no family behind.

        Args:
            name: Family display name (e.g., "The Bello Family")
            creator: Member record of the creator; id and join_id are generated if blank
            is_main_family: Whether this is the creator's main tree
            creation_type: "own_family" or "parents_family"

        Returns:
            Family with the creator as its only member

        Raises:
            ValueError: if the creator's id or Join ID is already in use
        """
        family_id = str(uuid.uuid4())
        with sqlite3.connect(self.db_path) as conn:
            conn.execute(
                "INSERT INTO families (id, name, is_main_family, creation_type) VALUES (?, ?, ?, ?)",
                (family_id, name, int(is_main_family), creation_type)
            )
            saved = self._insert_member(
                conn, family_id, creator.model_copy(update={"is_family_creator": True})
            )
            conn.execute(
                "UPDATE families SET creator_id = ?, creator_join_id = ? WHERE id = ?",
                (saved.id, saved.join_id, family_id)
            )
        return self.get_family(family_id)

    def get_family(self, family_id: str) -> Optional[Family]:
        """Get family with members and linked families."""
        with sqlite3.connect(self.db_path) as conn:
            conn.row_factory = sqlite3.Row
            row = conn.execute("SELECT * FROM families WHERE id = ?", (family_id,)).fetchone()
        if not row:
            return None
        return Family(
            id=row["id"],
            name=row["name"],
            creator_id=row["creator_id"],
            creator_join_id=row["creator_join_id"],
            is_main_family=bool(row["is_main_family"]),
            creation_type=row["creation_type"],
            current_step=row["current_step"],
            created_at=row["created_at"] or "",
            members=self.get_members(family_id),
            linked_families=self.get_linked_families(family_id),
        )

    def get_family_for_member(self, member_id: str) -> Optional[Family]:
        """Get the family a member belongs to."""
        member = self.get_member(member_id)
        return self.get_family(member.family_id) if member else None

    # ─────────────────────────────────────────
    # Members
    # ─────────────────────────────────────────

    def add_member(self, family_id: str, member: Member) -> Member:
        """
        Append a member to a family.

        Raises:
            ValueError: if the family does not exist, or the member's id or
                Join ID is already in use
        """
        with sqlite3.connect(self.db_path) as conn:
            if not self._family_exists(conn, family_id):
                raise ValueError(f"Unknown family: {family_id}")
            return self._insert_member(conn, family_id, member)

    def setup_parents(self, family_id: str, father: Member,
                      mothers: List[Member]) -> Tuple[Member, List[Member]]:
        """
        Add the father and his wives of a family in one transaction.

        Mothers are stored in the given order with their ``spouse_order``
        (list position when missing) and the relationship "Wife<order>".
        The family moves to the children setup step.

        Raises:
            ValueError: if the family does not exist or a Join ID clashes
        """
        with sqlite3.connect(self.db_path) as conn:
            if not self._family_exists(conn, family_id):
                raise ValueError(f"Unknown family: {family_id}")

            saved_father = self._insert_member(conn, family_id, father.model_copy(update={
                "relationship": "Father", "parent_type": "father", "mother_id": None,
            }))
            saved_mothers = []
            for index, mother in enumerate(mothers):
                order = mother.spouse_order or index + 1
                saved_mothers.append(self._insert_member(conn, family_id, mother.model_copy(update={
                    "relationship": f"Wife{order}",
                    "parent_type": "mother",
                    "spouse_order": order,
                    "mother_id": None,
                })))
            conn.execute(
                "UPDATE families SET current_step = ? WHERE id = ?",
                (SetupStep.CHILDREN_SETUP.value, family_id)
            )
        return saved_father, saved_mothers

    def get_member(self, member_id: str) -> Optional[Member]:
        with sqlite3.connect(self.db_path) as conn:
            conn.row_factory = sqlite3.Row
            row = conn.execute("SELECT * FROM members WHERE id = ?", (member_id,)).fetchone()
        return self._row_to_member(row) if row else None

    def get_members(self, family_id: str) -> List[Member]:
        """Get members of one family in insertion order."""
        with sqlite3.connect(self.db_path) as conn:
            conn.row_factory = sqlite3.Row
            rows = conn.execute(
                "SELECT * FROM members WHERE family_id = ? ORDER BY seq",
                (family_id,)
            ).fetchall()
        return [self._row_to_member(row) for row in rows]

    def find_member_by_join_id(self, join_id: str) -> Optional[Member]:
        """Get the member holding a Join ID (exact match)."""
        with sqlite3.connect(self.db_path) as conn:
            conn.row_factory = sqlite3.Row
            row = conn.execute("SELECT * FROM members WHERE join_id = ?", (join_id,)).fetchone()
        return self._row_to_member(row) if row else None

    def is_join_id_taken(self, join_id: str) -> bool:
        return self.find_member_by_join_id(join_id) is not None

    def update_member(self, member_id: str, **fields) -> Optional[Member]:
        """Update editable member fields; unknown keys are ignored."""
        sets = {k: v for k, v in fields.items() if k in UPDATABLE_COLUMNS}
        if sets:
            assignments = ", ".join(f"{k} = ?" for k in sets)
            params = [self._to_db(k, v) for k, v in sets.items()] + [member_id]
            with sqlite3.connect(self.db_path) as conn:
                conn.execute(f"UPDATE members SET {assignments} WHERE id = ?", params)
        return self.get_member(member_id)

    def delete_member(self, member_id: str) -> bool:
        """Delete a member. The family creator cannot be deleted."""
        with sqlite3.connect(self.db_path) as conn:
            cursor = conn.execute(
                "DELETE FROM members WHERE id = ? AND is_family_creator = 0",
                (member_id,)
            )
            return cursor.rowcount > 0

    def mark_join_id_used(self, member_id: str) -> None:
        with sqlite3.connect(self.db_path) as conn:
            conn.execute("UPDATE members SET join_id_used = 1 WHERE id = ?", (member_id,))

    # ─────────────────────────────────────────
    # Links
    # ─────────────────────────────────────────

    def is_linked(self, family_a: str, family_b: str) -> bool:
        """True if the two families are linked in either direction."""
        with sqlite3.connect(self.db_path) as conn:
            row = conn.execute("""
                SELECT 1 FROM family_links
                WHERE (family_id = ? AND linked_family_id = ?)
                   OR (family_id = ? AND linked_family_id = ?)
            """, (family_a, family_b, family_b, family_a)).fetchone()
        return row is not None

    def add_link(self, family_id: str, linked_family_id: str,
                 linked_by: str, join_id: str) -> LinkedFamily:
        """Record that ``family_id`` linked to ``linked_family_id``."""
        linked_at = datetime.now().isoformat()
        with sqlite3.connect(self.db_path) as conn:
            conn.execute("""
                INSERT INTO family_links (family_id, linked_family_id, linked_by, join_id, linked_at)
                VALUES (?, ?, ?, ?, ?)
            """, (family_id, linked_family_id, linked_by, join_id, linked_at))
            name = conn.execute(
                "SELECT name FROM families WHERE id = ?", (linked_family_id,)
            ).fetchone()[0]
        return LinkedFamily(id=linked_family_id, name=name, linked_at=linked_at, linked_by=linked_by)

    def get_linked_families(self, family_id: str) -> List[LinkedFamily]:
        """Families linked with this one, in either direction, oldest first."""
        with sqlite3.connect(self.db_path) as conn:
            conn.row_factory = sqlite3.Row
            rows = conn.execute("""
                SELECT f.id, f.name, l.linked_at, l.linked_by
                FROM family_links l
                JOIN families f
                  ON f.id = CASE WHEN l.family_id = ? THEN l.linked_family_id ELSE l.family_id END
                WHERE l.family_id = ? OR l.linked_family_id = ?
                ORDER BY l.id
            """, (family_id, family_id, family_id)).fetchall()
        return [
            LinkedFamily(id=r["id"], name=r["name"], linked_at=r["linked_at"], linked_by=r["linked_by"])
            for r in rows
        ]

    # ─────────────────────────────────────────
    # Helpers
    # ─────────────────────────────────────────

    def _family_exists(self, conn, family_id: str) -> bool:
        return conn.execute(
            "SELECT 1 FROM families WHERE id = ?", (family_id,)
        ).fetchone() is not None

    def _insert_member(self, conn, family_id: str, member: Member) -> Member:
        """Insert on an open connection; the caller's transaction owns the commit."""
        def join_id_taken(join_id: str) -> bool:
            return conn.execute(
                "SELECT 1 FROM members WHERE join_id = ?", (join_id,)
            ).fetchone() is not None

        member_id = member.id or str(uuid.uuid4())
        join_id = member.join_id or generate_unique_join_id(
            member.first_name, member.last_name, join_id_taken
        )
        saved = member.model_copy(update={
            "id": member_id,
            "family_id": family_id,
            "join_id": join_id,
            "is_linked_member": False,
            "source_family": None,
        })

        values = [self._to_db(col, getattr(saved, col)) for col in MEMBER_COLUMNS]
        placeholders = ", ".join("?" for _ in MEMBER_COLUMNS)
        try:
            conn.execute(
                f"INSERT INTO members ({', '.join(MEMBER_COLUMNS)}) VALUES ({placeholders})",
                values
            )
        except sqlite3.IntegrityError as e:
            raise ValueError(f"Member id or Join ID already in use: {join_id}") from e
        return saved

    def _to_db(self, column: str, value):
        if column in BOOL_COLUMNS:
            return int(bool(value))
        return value

    def _row_to_member(self, row) -> Member:
        """Convert database row to Member object."""
        data = {col: row[col] for col in MEMBER_COLUMNS}
        for col in BOOL_COLUMNS:
            data[col] = bool(data[col])
        return Member(**data)
