"""
inkwell/features/stories/persistence.py

Story rows and the public feed read path.

Stories start unpublished and move to published through publish_story;
there is no unpublish. The feed and the liked-stories list join each story
with its author and its like count.
"""

from typing import Optional, List
from sqlalchemy import select, insert, update, and_, func

from inkwell.core.database import stories, users, likes
from inkwell.core.logging import log_event
from inkwell.core.persistence import Persistence, labeled_columns, unlabel
from inkwell.models.story import (
    Story,
    StoryCategory,
    StoryWithAuthor,
    NewStory,
    StoryPatch,
    StorySort,
    ALL_CATEGORIES,
)
from inkwell.models.user import User


# Double underscore keeps users.id clear of stories.author_id
AUTHOR_PREFIX = "author__"


def _story_from_row(row) -> Story:
    return Story.model_validate(dict(row._mapping))


def _story_with_author_from_row(row) -> StoryWithAuthor:
    mapping = row._mapping
    fields = unlabel(mapping, stories)
    fields["author"] = User.model_validate(unlabel(mapping, users, AUTHOR_PREFIX))
    fields["like_count"] = mapping["like_count"] or 0
    return StoryWithAuthor.model_validate(fields)


class StoryPersistence(Persistence):

    @staticmethod
    def _stories_with_authors():
        """
        Base aggregation: every story joined with its author and like count.

        Likes are outer-joined so stories nobody liked still come back with
        a count of 0.
        """
        like_count = func.count(likes.c.id)
        return (
            select(
                *stories.c,
                *labeled_columns(users, AUTHOR_PREFIX),
                like_count.label("like_count"),
            )
            .select_from(
                stories
                .outerjoin(users, stories.c.author_id == users.c.id)
                .outerjoin(likes, stories.c.id == likes.c.story_id)
            )
            .group_by(stories.c.id, users.c.id)
        ), like_count

    def create_story(self, data: NewStory) -> Story:
        now = self._now()
        row_values = data.model_dump(mode="json")
        row_values.update(
            id=self._new_id(),
            published=False,
            published_at=None,
            created_at=now,
            updated_at=now,
        )
        with self.db.session() as session:
            row = session.execute(
                insert(stories).values(**row_values).returning(*stories.c)
            ).one()
            story = _story_from_row(row)

        log_event("info", "story.created", user_id=story.author_id, story_id=story.id, event_type="story.create")
        return story

    def get_story(self, story_id: str) -> Optional[Story]:
        with self.db.session() as session:
            row = session.execute(select(stories).where(stories.c.id == story_id)).first()
            return _story_from_row(row) if row else None

    def get_stories_by_author(self, author_id: str) -> List[Story]:
        """Published stories by one author, most recently published first."""
        with self.db.session() as session:
            rows = session.execute(
                select(stories)
                .where(and_(stories.c.author_id == author_id, stories.c.published.is_(True)))
                .order_by(stories.c.published_at.desc())
            ).all()
            return [_story_from_row(row) for row in rows]

    def get_published_stories(
        self,
        category: Optional[str] = None,
        sort_by: Optional[str] = None,
    ) -> List[StoryWithAuthor]:
        """
        Public feed.

        Args:
            category: Category filter; None or "all" means every category
            sort_by: "recent" orders by publish time. Anything else, including
                None, orders by like count then publish time (trending).

        Returns:
            At most feed_limit rows, each with author profile and like count
        """
        query, like_count = self._stories_with_authors()
        query = query.where(stories.c.published.is_(True))

        if category and category != ALL_CATEGORIES:
            if isinstance(category, StoryCategory):
                category = category.value
            query = query.where(stories.c.category == category)

        if sort_by == StorySort.RECENT.value:
            query = query.order_by(stories.c.published_at.desc())
        else:
            query = query.order_by(like_count.desc(), stories.c.published_at.desc())

        with self.db.session() as session:
            rows = session.execute(query.limit(self.feed_limit)).all()
            return [_story_with_author_from_row(row) for row in rows]

    def get_user_liked_stories(self, user_id: str) -> List[StoryWithAuthor]:
        """Published stories the user has liked, most recently published first."""
        liked_ids = select(likes.c.story_id).where(likes.c.user_id == user_id)
        query, _ = self._stories_with_authors()
        query = (
            query
            .where(and_(stories.c.id.in_(liked_ids), stories.c.published.is_(True)))
            .order_by(stories.c.published_at.desc())
        )
        with self.db.session() as session:
            rows = session.execute(query).all()
            return [_story_with_author_from_row(row) for row in rows]

    def update_story(self, story_id: str, patch: StoryPatch) -> Optional[Story]:
        """Apply the fields set on `patch`; updated_at always moves."""
        changes = patch.model_dump(mode="json", exclude_unset=True)
        changes["updated_at"] = self._now()
        return self._update_story(story_id, changes)

    def publish_story(self, story_id: str) -> Optional[Story]:
        """
        Mark a story published.

        Publishing again moves published_at forward; concurrent publishes
        resolve as last write wins.
        """
        now = self._now()
        story = self._update_story(story_id, {"published": True, "published_at": now, "updated_at": now})
        if story:
            log_event("info", "story.published", user_id=story.author_id, story_id=story_id, event_type="story.publish")
        return story

    def enable_chapters_on_story(self, story_id: str) -> Optional[Story]:
        return self._update_story(story_id, {"has_chapters": True, "updated_at": self._now()})

    def _update_story(self, story_id: str, values: dict) -> Optional[Story]:
        with self.db.session() as session:
            row = session.execute(
                update(stories)
                .where(stories.c.id == story_id)
                .values(**values)
                .returning(*stories.c)
            ).first()
            return _story_from_row(row) if row else None
