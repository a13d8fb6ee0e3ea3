# dreamstudio/stores/test_memory_store.py
from datetime import timedelta

import pytest

from dreamstudio.models.story import Story, Scene
from dreamstudio.models.user import User
from dreamstudio.stores.memory_store import MemoryStoryStore, MemoryUserStore
from dreamstudio.utils.datetime_utils import DateTimeUtils


def _story(story_id, user_id='u1', minutes_ago=0, **kwargs):
    created = DateTimeUtils.now() - timedelta(minutes=minutes_ago)
    return Story(story_id=story_id, title=story_id, user_id=user_id, art_style='anime',
                 created_at=created, updated_at=created, **kwargs)


def test_find_filters_sorts_and_slices():
    store = MemoryStoryStore()
    for index in range(5):
        store.insert(_story(f's{index}', minutes_ago=index))
    store.insert(_story('other', user_id='u2'))

    newest_first = store.find({'user_id': 'u1'}, ('created_at', True))
    assert [story.story_id for story in newest_first] == ['s0', 's1', 's2', 's3', 's4']

    page = store.find({'user_id': 'u1'}, ('created_at', False), skip=1, limit=2)
    assert [story.story_id for story in page] == ['s3', 's2']
    assert store.count({'user_id': 'u1'}) == 5
    assert store.count({}) == 6


def test_stored_story_is_a_copy():
    store = MemoryStoryStore()
    story = _story('s1', scenes=[Scene(text='t', image_url='/uploads/a.png', order=1)])
    store.insert(story)

    story.scenes[0].image_url = '/uploads/changed.png'
    assert store.get('s1').scenes[0].image_url == '/uploads/a.png'
    assert store.get('missing') is None


def test_delete():
    store = MemoryStoryStore()
    store.insert(_story('s1'))
    assert store.delete('s1') is True
    assert store.delete('s1') is False


def test_user_store_increment_and_preferences():
    store = MemoryUserStore()
    store.create(User(firebase_uid='u1', email='u1@example.com', display_name='U1'))

    assert store.increment_usage('u1', stories_created=1, images_generated=3) is True
    assert store.increment_usage('u1', images_generated=2) is True
    usage = store.get('u1').usage
    assert (usage.stories_created, usage.images_generated) == (1, 5)

    updated = store.update_preferences('u1', {'theme': 'dark'})
    assert updated.preferences.theme == 'dark'
    assert updated.preferences.default_art_style == 'realistic'

    assert store.find_by_email('u1@example.com').firebase_uid == 'u1'
    assert store.increment_usage('ghost', stories_created=1) is False
    assert store.update_preferences('ghost', {'theme': 'dark'}) is None


def test_user_store_rejects_duplicate_create():
    store = MemoryUserStore()
    user = User(firebase_uid='u1', email='u1@example.com', display_name='U1')
    store.create(user)
    with pytest.raises(ValueError):
        store.create(user)
