import asyncio

import pytest

from categorizer.services.classifier.context import ClassifierContext
from categorizer.services.errors import ClassifierContextError
from conftest import VOCABULARY


def test_manager_outside_context_raises(make_context):
    context = make_context()

    with pytest.raises(ClassifierContextError):
        context.manager()
    with pytest.raises(ClassifierContextError):
        context.registry


def test_manager_is_shared_per_vocabulary(make_context):
    context = make_context()

    async def scenario():
        async with context:
            default = context.manager()
            assert default.vocabulary == VOCABULARY
            assert context.manager(VOCABULARY) is default
            assert context.manager(["Food", "Other"]) is not default
        return context

    closed = asyncio.run(scenario())

    assert not closed.is_open
    with pytest.raises(ClassifierContextError):
        closed.manager()


def test_managers_share_handle_for_same_vocabulary(make_context):
    context: ClassifierContext = make_context().open()

    first = context.manager()
    asyncio.run(first.initialize())

    assert context.registry.get(VOCABULARY) is first.handle
    assert len(context.registry) == 1
    context.close()
