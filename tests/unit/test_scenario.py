"""Create, list and thread a small conversation on one file."""

from uuid import uuid4

import pytest

from pinnote.core.modules.comment.threads import assemble_threads
from pinnote.errors import NotFoundError, ValidationError


@pytest.mark.asyncio
async def test_comment_conversation(core, seed):
    comments = core.services.comment

    a = await comments.create_comment(seed.file_id, seed.author_id, "Logo too small", 50.0, 50.0)
    page = await comments.get_file_comments(seed.file_id, 1, 10)
    assert [c.id for c in page.items] == [a.id]
    assert page.total == 1
    assert page.has_more is False

    b = await comments.create_comment(seed.file_id, seed.reviewer_id, "Will fix", parent_id=a.id)
    threads = assemble_threads([a, b])
    assert threads.top_level == [a]
    assert threads.replies_by_parent == {a.id: [b]}

    with pytest.raises(ValidationError):
        await comments.create_comment(seed.file_id, seed.author_id, "Half placed", x=50.0)

    with pytest.raises(NotFoundError):
        await comments.create_comment(seed.file_id, seed.author_id, "Lost", parent_id=uuid4())

    page = await comments.get_file_comments(seed.file_id, 1, 10)
    assert [c.id for c in page.items] == [b.id, a.id]
