"""
inkwell/features/drafts/persistence.py

Author scratch drafts. No publish state; deleting is permanent.
"""

from typing import Optional, List
from sqlalchemy import select, insert, update, delete

from inkwell.core.database import drafts
from inkwell.core.persistence import Persistence
from inkwell.models.draft import Draft, NewDraft, DraftPatch


def _draft_from_row(row) -> Draft:
    return Draft.model_validate(dict(row._mapping))


class DraftPersistence(Persistence):

    def create_draft(self, data: NewDraft) -> Draft:
        now = self._now()
        row_values = data.model_dump(mode="json")
        row_values.update(id=self._new_id(), created_at=now, updated_at=now)
        with self.db.session() as session:
            row = session.execute(
                insert(drafts).values(**row_values).returning(*drafts.c)
            ).one()
            return _draft_from_row(row)

    def get_draft(self, draft_id: str) -> Optional[Draft]:
        with self.db.session() as session:
            row = session.execute(select(drafts).where(drafts.c.id == draft_id)).first()
            return _draft_from_row(row) if row else None

    def get_drafts_by_author(self, author_id: str) -> List[Draft]:
        """Most recently edited first."""
        with self.db.session() as session:
            rows = session.execute(
                select(drafts)
                .where(drafts.c.author_id == author_id)
                .order_by(drafts.c.updated_at.desc())
            ).all()
            return [_draft_from_row(row) for row in rows]

    def update_draft(self, draft_id: str, patch: DraftPatch) -> Optional[Draft]:
        changes = patch.model_dump(mode="json", exclude_unset=True)
        changes["updated_at"] = self._now()
        with self.db.session() as session:
            row = session.execute(
                update(drafts)
                .where(drafts.c.id == draft_id)
                .values(**changes)
                .returning(*drafts.c)
            ).first()
            return _draft_from_row(row) if row else None

    def delete_draft(self, draft_id: str) -> bool:
        with self.db.session() as session:
            result = session.execute(delete(drafts).where(drafts.c.id == draft_id))
            return result.rowcount > 0
