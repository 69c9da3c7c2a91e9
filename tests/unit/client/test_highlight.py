import asyncio
from uuid import uuid4

import pytest

from pinnote.client.highlight import DEFAULT_HIGHLIGHT_SECONDS, HighlightTimer


def test_default_window_is_ten_seconds():
    assert DEFAULT_HIGHLIGHT_SECONDS == 10.0


@pytest.mark.asyncio
async def test_highlight_expires():
    timer = HighlightTimer(duration=0.01)
    comment_id = uuid4()

    timer.highlight(comment_id)
    assert timer.active == comment_id

    await asyncio.sleep(0.05)
    assert timer.active is None


@pytest.mark.asyncio
async def test_new_highlight_supersedes_old_one():
    timer = HighlightTimer(duration=0.1)
    first, second = uuid4(), uuid4()

    timer.highlight(first)
    await asyncio.sleep(0.06)
    timer.highlight(second)
    assert timer.active == second

    # The first window would have ended by now
    await asyncio.sleep(0.06)
    assert timer.active == second

    await asyncio.sleep(0.1)
    assert timer.active is None


@pytest.mark.asyncio
async def test_clear():
    timer = HighlightTimer()
    timer.highlight(uuid4())

    timer.clear()

    assert timer.active is None
