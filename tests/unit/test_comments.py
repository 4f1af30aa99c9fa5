"""
Unit tests for comment and reply threads.
"""

import pytest


class TestAddComment:
    """Tests for add_comment."""

    @pytest.mark.unit
    def test_comment_extends_visibility(self, db_with_activity):
        """A stranger's comment adds exactly the commenter to the viewers."""
        from readrover.services import add_comment, get_visible_to

        db_tables, users, _, activity = db_with_activity
        alice, bob = users['alice'], users['bob']

        add_comment(db_tables, activity.id, bob.id, "hi")

        assert get_visible_to(db_tables, activity.id) == {alice.id, bob.id}
        rows = db_tables['activity_visibility'](where="activity_id = ?", where_args=[activity.id])
        assert len(rows) == 2

    @pytest.mark.unit
    def test_comment_stored_verbatim(self, db_with_activity):
        from readrover.services import add_comment

        db_tables, users, _, activity = db_with_activity
        text = "  Loved chapter 3!  <b>no escaping</b> "

        comment = add_comment(db_tables, activity.id, users['bob'].id, text)

        assert comment.content == text
        assert comment.user_id == users['bob'].id
        assert comment.parent_comment_id is None

    @pytest.mark.unit
    def test_comments_most_recent_first(self, db_with_activity):
        from readrover.services import add_comment, get_comments

        db_tables, users, _, activity = db_with_activity
        for text in ("first", "second", "third"):
            add_comment(db_tables, activity.id, users['bob'].id, text)

        assert [c.content for c in get_comments(db_tables, activity.id)] == ["third", "second", "first"]

    @pytest.mark.unit
    def test_comment_on_missing_activity(self, db_with_users):
        from readrover.services import add_comment, NotFound

        db_tables, users = db_with_users
        with pytest.raises(NotFound):
            add_comment(db_tables, 404, users['bob'].id, "hi")
        assert db_tables['comments']() == []

    @pytest.mark.unit
    def test_comment_by_unknown_user(self, db_with_activity):
        """An author ID that resolves to no user is rejected before any write."""
        from readrover.services import add_comment, get_visible_to, get_notifications, NotFound

        db_tables, users, _, activity = db_with_activity
        with pytest.raises(NotFound, match="User not found"):
            add_comment(db_tables, activity.id, 9999, "hi")

        assert get_visible_to(db_tables, activity.id) == {users['alice'].id}
        assert db_tables['comments']() == []
        assert get_notifications(db_tables, users['alice'].id) == []

    @pytest.mark.unit
    def test_comment_notifies_owner(self, db_with_activity):
        from readrover.services import add_comment, get_notifications

        db_tables, users, _, activity = db_with_activity
        add_comment(db_tables, activity.id, users['bob'].id, "hi")

        notifications = get_notifications(db_tables, users['alice'].id)
        assert [n.kind for n in notifications] == ['comment']
        assert 'bob' in notifications[0].content

    @pytest.mark.unit
    def test_own_comment_does_not_notify(self, db_with_activity):
        from readrover.services import add_comment, get_notifications

        db_tables, users, _, activity = db_with_activity
        add_comment(db_tables, activity.id, users['alice'].id, "note to self")

        assert get_notifications(db_tables, users['alice'].id) == []


class TestAddReply:
    """Tests for add_reply."""

    @pytest.mark.unit
    def test_reply_extends_visibility(self, db_with_activity):
        """Replier, owner and original commenter all become viewers."""
        from readrover.services import add_comment, add_reply, get_visible_to

        db_tables, users, _, activity = db_with_activity
        alice, bob, carol = users['alice'], users['bob'], users['carol']

        comment = add_comment(db_tables, activity.id, bob.id, "hi")
        add_reply(db_tables, activity.id, comment.id, carol.id, "hey")

        assert get_visible_to(db_tables, activity.id) == {alice.id, bob.id, carol.id}

    @pytest.mark.unit
    def test_replies_oldest_first(self, db_with_activity):
        from readrover.services import add_comment, add_reply, get_comments

        db_tables, users, _, activity = db_with_activity
        comment = add_comment(db_tables, activity.id, users['bob'].id, "hi")
        for text in ("one", "two", "three"):
            add_reply(db_tables, activity.id, comment.id, users['carol'].id, text)

        [thread] = get_comments(db_tables, activity.id)
        assert [r.content for r in thread.replies] == ["one", "two", "three"]

    @pytest.mark.unit
    def test_replies_stay_under_their_comment(self, db_with_activity):
        from readrover.services import add_comment, add_reply, get_comments

        db_tables, users, _, activity = db_with_activity
        first = add_comment(db_tables, activity.id, users['bob'].id, "first")
        second = add_comment(db_tables, activity.id, users['carol'].id, "second")
        add_reply(db_tables, activity.id, first.id, users['alice'].id, "re: first")

        threads = {c.id: c for c in get_comments(db_tables, activity.id)}
        assert len(threads) == 2
        assert [r.content for r in threads[first.id].replies] == ["re: first"]
        assert threads[second.id].replies == []

    @pytest.mark.unit
    def test_reply_to_missing_comment(self, db_with_activity):
        from readrover.services import add_reply, get_visible_to, NotFound

        db_tables, users, _, activity = db_with_activity
        with pytest.raises(NotFound):
            add_reply(db_tables, activity.id, 404, users['carol'].id, "hey")
        assert get_visible_to(db_tables, activity.id) == {users['alice'].id}

    @pytest.mark.unit
    def test_reply_to_comment_on_other_activity(self, db_with_activity, factory):
        from readrover.services import add_comment, add_reply, NotFound

        db_tables, users, _, activity = db_with_activity
        _, other = factory.create_activity(db_tables, users['bob'])
        comment = add_comment(db_tables, other.id, users['carol'].id, "elsewhere")

        with pytest.raises(NotFound):
            add_reply(db_tables, activity.id, comment.id, users['carol'].id, "hey")

    @pytest.mark.unit
    def test_reply_to_a_reply_rejected(self, db_with_activity):
        from readrover.services import add_comment, add_reply, NotFound

        db_tables, users, _, activity = db_with_activity
        comment = add_comment(db_tables, activity.id, users['bob'].id, "hi")
        reply = add_reply(db_tables, activity.id, comment.id, users['carol'].id, "hey")

        with pytest.raises(NotFound):
            add_reply(db_tables, activity.id, reply.id, users['bob'].id, "nested")

    @pytest.mark.unit
    def test_reply_on_missing_activity(self, db_with_users):
        from readrover.services import add_reply, NotFound

        db_tables, users = db_with_users
        with pytest.raises(NotFound):
            add_reply(db_tables, 404, 1, users['carol'].id, "hey")

    @pytest.mark.unit
    def test_reply_by_unknown_user(self, db_with_activity):
        from readrover.services import add_comment, add_reply, get_visible_to, NotFound
        from readrover.services.comments import get_replies

        db_tables, users, _, activity = db_with_activity
        alice, bob = users['alice'], users['bob']
        comment = add_comment(db_tables, activity.id, bob.id, "hi")

        with pytest.raises(NotFound, match="User not found"):
            add_reply(db_tables, activity.id, comment.id, 9999, "hey")

        assert get_visible_to(db_tables, activity.id) == {alice.id, bob.id}
        assert get_replies(db_tables, comment.id) == []

    @pytest.mark.unit
    def test_reply_notifies_owner_and_commenter(self, db_with_activity):
        from readrover.services import add_comment, add_reply, get_notifications

        db_tables, users, _, activity = db_with_activity
        alice, bob, carol = users['alice'], users['bob'], users['carol']
        comment = add_comment(db_tables, activity.id, bob.id, "hi")
        add_reply(db_tables, activity.id, comment.id, carol.id, "hey")

        assert [n.kind for n in get_notifications(db_tables, alice.id)] == ['reply', 'comment']
        assert [n.kind for n in get_notifications(db_tables, bob.id)] == ['reply']
        assert get_notifications(db_tables, carol.id) == []

    @pytest.mark.unit
    def test_owner_reply_notifies_commenter_once(self, db_with_activity):
        from readrover.services import add_comment, add_reply, get_notifications

        db_tables, users, _, activity = db_with_activity
        alice, bob = users['alice'], users['bob']
        comment = add_comment(db_tables, activity.id, bob.id, "hi")
        add_reply(db_tables, activity.id, comment.id, alice.id, "thanks")

        assert [n.kind for n in get_notifications(db_tables, bob.id)] == ['reply']
        assert [n.kind for n in get_notifications(db_tables, alice.id)] == ['comment']


class TestFriendThenCommentScenario:
    """Friendship, then a stranger joins the thread."""

    @pytest.mark.unit
    def test_friend_then_stranger_comment(self, db_with_activity):
        from readrover.services import (
            send_friend_request, accept_friend_request, add_comment,
            get_friend_ids, get_visible_to,
        )

        db_tables, users, _, act1 = db_with_activity
        a, b, c = users['alice'], users['bob'], users['carol']
        assert get_visible_to(db_tables, act1.id) == {a.id}

        send_friend_request(db_tables, b.id, a.id)
        accept_friend_request(db_tables, a.id, b.id)

        assert get_friend_ids(db_tables, a.id) == {b.id}
        assert get_friend_ids(db_tables, b.id) == {a.id}
        assert get_visible_to(db_tables, act1.id) == {a.id, b.id}

        add_comment(db_tables, act1.id, c.id, "mind if I join?")
        assert get_visible_to(db_tables, act1.id) == {a.id, b.id, c.id}
        assert get_friend_ids(db_tables, c.id) == set()
