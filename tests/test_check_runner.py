import asyncio

import pytest

from alt_text_bot.config import DEFAULT_INTRO_META_KEY
from alt_text_bot.core.analyzer import BotIdentityError, get_or_create_bot_user, run_alt_text_check


def _run(store, identity, rng, post_id="42"):
    return asyncio.run(run_alt_text_check(post_id, store, identity, rng=rng))


def test_missing_post_is_skipped(store, identity, first_choice):
    outcome = _run(store, identity, first_choice, post_id="404")

    assert outcome.action == "skipped"
    assert outcome.reason == "post_not_found"
    assert store.comments == {}


def test_unpublished_post_is_skipped(store, identity, first_choice):
    store.add_post("42", '<img src="a.jpg">', status="draft")

    outcome = _run(store, identity, first_choice)

    assert outcome.action == "skipped"
    assert outcome.reason == "post_not_published"
    assert store.comments == {}


def test_first_run_inserts_comment_with_intro(store, identity, first_choice):
    store.add_post("42", '<img src="a.jpg">')

    outcome = _run(store, identity, first_choice)

    assert outcome.action == "inserted"
    assert outcome.counts == {"missing_alt": 1, "empty_alt": 0, "aria_issue": 0}
    [comment] = store.comments_for("42")
    assert "Hi Jane Doe" in comment.content
    assert store.meta[("7", DEFAULT_INTRO_META_KEY)] is True


def test_clean_post_removes_existing_comments(store, identity, first_choice):
    store.add_post("42", '<img src="a.jpg" alt="a cat">')
    store.add_comment("42", identity.email)
    store.add_comment("42", identity.email)
    human = store.add_comment("42", "reader@example.com", author="Reader")

    outcome = _run(store, identity, first_choice)

    assert outcome.action == "deleted"
    assert outcome.records_affected == 2
    assert store.comments_for("42") == []
    assert list(store.comments) == [str(human.id)]
    assert all(force for _, force in store.deleted)


def test_clean_post_is_idempotent(store, identity, first_choice):
    store.add_post("42", "<p>No images</p>")

    first = _run(store, identity, first_choice)
    second = _run(store, identity, first_choice)

    assert first.records_affected == second.records_affected == 0
    assert store.comments_for("42") == []


def test_intro_flag_is_set_exactly_once_per_author(store, identity, first_choice):
    store.add_post("42", '<img src="a.jpg">')
    store.add_post("43", "<svg></svg>")

    _run(store, identity, first_choice, post_id="42")
    _run(store, identity, first_choice, post_id="42")
    _run(store, identity, first_choice, post_id="43")

    assert store.meta_writes == [("7", DEFAULT_INTRO_META_KEY, True)]
    assert "Jane Doe" not in store.comments_for("43")[0].content


def test_intro_flag_is_set_when_updating(store, identity, first_choice):
    store.add_post("42", '<img src="a.jpg">')
    store.add_comment("42", identity.email, content="legacy")

    outcome = _run(store, identity, first_choice)

    assert outcome.action == "updated"
    assert store.meta_writes == [("7", DEFAULT_INTRO_META_KEY, True)]


def test_duplicate_comments_converge_to_identical_content(store, identity, first_choice):
    store.add_post("42", '<img src="a.jpg" alt="">')
    store.add_comment("42", identity.email, content="stale one")
    store.add_comment("42", identity.email, content="stale two")

    outcome = _run(store, identity, first_choice)

    assert outcome.action == "updated"
    assert outcome.records_affected == 2
    contents = {c.content for c in store.comments_for("42")}
    assert len(contents) == 1
    assert "stale" not in contents.pop()


def test_fixed_defects_are_dropped_on_next_publish(store, identity, first_choice):
    store.add_post("42", '<img src="a.jpg"><svg></svg>')
    _run(store, identity, first_choice)

    store.add_post("42", '<img src="a.jpg" alt="a cat"><svg></svg>')
    outcome = _run(store, identity, first_choice)

    assert outcome.counts == {"missing_alt": 0, "empty_alt": 0, "aria_issue": 1}
    [comment] = store.comments_for("42")
    assert comment.content.count("<li>") == 1


def test_unknown_author_gets_fallback_name(store, identity, first_choice):
    store.add_post("42", '<img src="a.jpg">', author_id="999")

    _run(store, identity, first_choice)

    assert "Hi Author," in store.comments_for("42")[0].content


def test_bot_user_is_created_once(store, identity, first_choice):
    store.add_post("42", '<img src="a.jpg">')

    _run(store, identity, first_choice)
    _run(store, identity, first_choice)

    assert store.created_users == ["Equalify"]
    bot = asyncio.run(store.find_user_by_login("Equalify"))
    assert store.comments_for("42")[0].user_id == bot.id


def test_bot_user_creation_failure_aborts_the_check(store, identity, first_choice):
    async def broken_create_user(**kwargs):
        raise ConnectionError("store unavailable")

    store.create_user = broken_create_user
    store.add_post("42", '<img src="a.jpg">')

    with pytest.raises(BotIdentityError):
        _run(store, identity, first_choice)
    assert store.comments == {}


def test_get_or_create_returns_existing_bot(store, identity):
    store.add_user("bot-9", "Equalify", "Equalify")

    assert asyncio.run(get_or_create_bot_user(store, identity)) == "bot-9"
    assert store.created_users == []
