"""
inkwell/features/users/persistence.py

User rows. Profiles are written by an identity upsert on every login and by
explicit profile edits.
"""

from typing import Optional
from sqlalchemy import select, update

from inkwell.core.database import users
from inkwell.core.logging import log_event
from inkwell.core.persistence import Persistence
from inkwell.models.user import User, UserIdentity, UserPatch


class UserPersistence(Persistence):

    def get_user(self, user_id: str) -> Optional[User]:
        with self.db.session() as session:
            row = session.execute(select(users).where(users.c.id == user_id)).first()
            if not row:
                return None
            return User.model_validate(dict(row._mapping))

    def upsert_user(self, identity: UserIdentity) -> User:
        """
        Insert the user, or overwrite the supplied fields if the id exists.

        Fields the identity provider did not send are left untouched on
        conflict. Email or username collisions with another user propagate
        as IntegrityError.
        """
        now = self._now()
        values = identity.model_dump(exclude_unset=True)
        values["id"] = identity.id

        overwrite = {k: v for k, v in values.items() if k != "id"}
        overwrite["updated_at"] = now

        stmt = (
            self._upsert(users)
            .values(**values, created_at=now, updated_at=now)
            .on_conflict_do_update(index_elements=["id"], set_=overwrite)
            .returning(*users.c)
        )
        with self.db.session() as session:
            row = session.execute(stmt).one()
            user = User.model_validate(dict(row._mapping))

        log_event("info", "user.upserted", user_id=user.id, event_type="user.upsert")
        return user

    def update_user(self, user_id: str, patch: UserPatch) -> Optional[User]:
        changes = patch.model_dump(exclude_unset=True)
        changes["updated_at"] = self._now()
        with self.db.session() as session:
            row = session.execute(
                update(users)
                .where(users.c.id == user_id)
                .values(**changes)
                .returning(*users.c)
            ).first()
            if not row:
                return None
            return User.model_validate(dict(row._mapping))
