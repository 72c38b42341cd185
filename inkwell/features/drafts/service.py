"""
Draft service. Drafts are private: anyone but the author gets not found.
"""

from typing import List

from inkwell.core.errors import NotFoundError
from inkwell.models.draft import Draft, DraftRequest, NewDraft, DraftPatch
from inkwell.models.story import Story
from inkwell.store import ContentStore


def _own_draft(store: ContentStore, user_id: str, draft_id: str) -> Draft:
    draft = store.get_draft(draft_id)
    if not draft or draft.author_id != user_id:
        raise NotFoundError(f"Draft {draft_id} not found")
    return draft


def create_draft(store: ContentStore, user_id: str, request: DraftRequest) -> Draft:
    fields = request.model_dump()
    if request.word_count is None:
        fields["word_count"] = Story.count_words(request.content)
    return store.create_draft(NewDraft(**fields, author_id=user_id))


def list_own_drafts(store: ContentStore, user_id: str) -> List[Draft]:
    return store.get_drafts_by_author(user_id)


def get_own_draft(store: ContentStore, user_id: str, draft_id: str) -> Draft:
    return _own_draft(store, user_id, draft_id)


def update_own_draft(store: ContentStore, user_id: str, draft_id: str, patch: DraftPatch) -> Draft:
    _own_draft(store, user_id, draft_id)
    if "content" in patch.model_fields_set and "word_count" not in patch.model_fields_set:
        patch = DraftPatch(**patch.model_dump(exclude_unset=True), word_count=Story.count_words(patch.content))
    draft = store.update_draft(draft_id, patch)
    if not draft:
        raise NotFoundError(f"Draft {draft_id} not found")
    return draft


def delete_own_draft(store: ContentStore, user_id: str, draft_id: str) -> None:
    _own_draft(store, user_id, draft_id)
    if not store.delete_draft(draft_id):
        raise NotFoundError(f"Draft {draft_id} not found")
