import math

import pytest
from pydantic import ValidationError
from sqlalchemy import inspect

from campus_voice.core.exceptions import NotFoundError
from campus_voice.core.permissions import OPERATION_ROLES, Operation
from campus_voice.models.comment import Comment
from campus_voice.models.feedback import Feedback, FeedbackPriority, FeedbackStatus
from campus_voice.models.notification import Notification, NotificationType
from campus_voice.models.user import UserRole
from campus_voice.models.vote import Vote, VoteType
from campus_voice.schemas.feedback import FeedbackQuery, pagination_pages
from campus_voice.services.feedback import FeedbackService
from conftest import make_feedback, minutes_ago


class TestPaginationPages:
    def test_partial_last_page(self):
        assert pagination_pages(25, 10) == 3

    @pytest.mark.parametrize("total", [0, 1, 9, 10, 11, 99, 100, 101])
    @pytest.mark.parametrize("limit", [1, 3, 10, 100])
    def test_matches_ceiling(self, total, limit):
        assert pagination_pages(total, limit) == math.ceil(total / limit)


class TestFeedbackQuery:
    def test_is_immutable(self):
        query = FeedbackQuery(page=2)
        with pytest.raises(ValidationError):
            query.page = 3

    def test_offset(self):
        assert FeedbackQuery(page=1, limit=10).offset == 0
        assert FeedbackQuery(page=3, limit=10).offset == 20


class TestListFeedback:
    @pytest.mark.asyncio
    async def test_owner_scope(self, db_session, categories, student, other_student):
        mine = await make_feedback(db_session, student, category_id=1)
        await make_feedback(db_session, other_student, category_id=1)

        items, total = await FeedbackService.list_feedback(
            db_session, FeedbackQuery(owner_id=student.id)
        )

        assert total == 1
        assert [f.id for f in items] == [mine.id]

    @pytest.mark.asyncio
    async def test_no_owner_lists_everyone(self, db_session, categories, student, other_student):
        await make_feedback(db_session, student, category_id=1)
        await make_feedback(db_session, other_student, category_id=1)

        _, total = await FeedbackService.list_feedback(db_session, FeedbackQuery())

        assert total == 2

    @pytest.mark.asyncio
    async def test_status_filter(self, db_session, categories, student):
        for status in FeedbackStatus:
            await make_feedback(db_session, student, category_id=1, status=status)
        await make_feedback(
            db_session, student, category_id=2, status=FeedbackStatus.RESOLVED
        )

        items, total = await FeedbackService.list_feedback(
            db_session, FeedbackQuery(status=FeedbackStatus.RESOLVED)
        )

        assert total == 2
        assert all(f.status == FeedbackStatus.RESOLVED for f in items)

    @pytest.mark.asyncio
    async def test_priority_and_category_filters(self, db_session, categories, student):
        target = await make_feedback(
            db_session, student, category_id=3, priority=FeedbackPriority.URGENT
        )
        await make_feedback(db_session, student, category_id=3, priority=FeedbackPriority.LOW)
        await make_feedback(db_session, student, category_id=4, priority=FeedbackPriority.URGENT)

        items, total = await FeedbackService.list_feedback(
            db_session,
            FeedbackQuery(priority=FeedbackPriority.URGENT, category_id=3),
        )

        assert total == 1
        assert items[0].id == target.id

    @pytest.mark.asyncio
    async def test_newest_first_then_id(self, db_session, categories, student):
        old = await make_feedback(db_session, student, category_id=1, created_at=minutes_ago(30))
        same_time = minutes_ago(5)
        tie_a = await make_feedback(db_session, student, category_id=1, created_at=same_time)
        tie_b = await make_feedback(db_session, student, category_id=1, created_at=same_time)
        new = await make_feedback(db_session, student, category_id=1, created_at=minutes_ago(1))

        items, _ = await FeedbackService.list_feedback(db_session, FeedbackQuery())

        assert [f.id for f in items] == [new.id, tie_a.id, tie_b.id, old.id]

    @pytest.mark.asyncio
    async def test_pages(self, db_session, categories, student):
        created = []
        for i in range(25):
            created.append(
                await make_feedback(
                    db_session, student, category_id=1, title=f"Item {i}",
                    created_at=minutes_ago(100 - i),
                )
            )
        newest_first = [f.id for f in reversed(created)]

        page1, total = await FeedbackService.list_feedback(db_session, FeedbackQuery(page=1))
        page3, _ = await FeedbackService.list_feedback(db_session, FeedbackQuery(page=3))
        page4, _ = await FeedbackService.list_feedback(db_session, FeedbackQuery(page=4))

        assert total == 25
        assert [f.id for f in page1] == newest_first[:10]
        assert [f.id for f in page3] == newest_first[20:]
        assert page4 == []
        assert pagination_pages(total, 10) == 3

    @pytest.mark.asyncio
    async def test_counts_without_loading_comments_or_votes(
        self, session_factory, db_session, categories, student, admin
    ):
        busy = await make_feedback(db_session, student, category_id=1, title="busy")
        quiet = await make_feedback(db_session, student, category_id=1, title="quiet")
        db_session.add_all(
            [
                Comment(feedback_id=busy.id, user_id=student.id, content="me too"),
                Comment(feedback_id=busy.id, user_id=admin.id, content="on it"),
                Vote(feedback_id=busy.id, user_id=admin.id, vote_type=VoteType.UPVOTE),
            ]
        )
        await db_session.commit()

        async with session_factory() as fresh:
            items, _ = await FeedbackService.list_feedback(fresh, FeedbackQuery())
            counts = await FeedbackService.related_counts(fresh, [f.id for f in items])

            assert all({"comments", "votes"} <= inspect(f).unloaded for f in items)
            assert counts == {busy.id: (2, 1), quiet.id: (0, 0)}
            assert await FeedbackService.related_counts(fresh, []) == {}


class TestGetDetail:
    @pytest.mark.asyncio
    async def test_each_fetch_counts_one_view(self, db_session, categories, student):
        feedback = await make_feedback(db_session, student, category_id=1)

        for expected in range(1, 6):
            fetched = await FeedbackService.get_detail(db_session, feedback.id, viewer=student)
            assert fetched.views == expected

        stored = await db_session.get(Feedback, feedback.id, populate_existing=True)
        assert stored.views == 5

    @pytest.mark.asyncio
    async def test_student_cannot_read_others(self, db_session, categories, student, other_student):
        feedback = await make_feedback(db_session, other_student, category_id=1)

        with pytest.raises(NotFoundError):
            await FeedbackService.get_detail(db_session, feedback.id, viewer=student)

        stored = await db_session.get(Feedback, feedback.id, populate_existing=True)
        assert stored.views == 0

    @pytest.mark.asyncio
    async def test_detail_scope_follows_operation_table(
        self, db_session, categories, student, other_student, monkeypatch
    ):
        monkeypatch.setitem(
            OPERATION_ROLES,
            Operation.VIEW_ANY_FEEDBACK,
            frozenset({UserRole.STUDENT, UserRole.ADMIN}),
        )
        feedback = await make_feedback(db_session, other_student, category_id=1)

        fetched = await FeedbackService.get_detail(db_session, feedback.id, viewer=student)

        assert fetched.id == feedback.id
        assert fetched.views == 1

    @pytest.mark.asyncio
    async def test_admin_reads_any(self, db_session, categories, student, admin):
        feedback = await make_feedback(db_session, student, category_id=1)

        fetched = await FeedbackService.get_detail(db_session, feedback.id, viewer=admin)

        assert fetched.id == feedback.id
        assert fetched.views == 1

    @pytest.mark.asyncio
    async def test_missing(self, db_session, categories, admin):
        with pytest.raises(NotFoundError):
            await FeedbackService.get_detail(db_session, 12345, viewer=admin)

    @pytest.mark.asyncio
    async def test_includes_comments_in_order_and_votes(
        self, db_session, categories, student, admin
    ):
        feedback = await make_feedback(db_session, student, category_id=1)
        db_session.add_all(
            [
                Comment(feedback_id=feedback.id, user_id=student.id, content="first"),
                Comment(
                    feedback_id=feedback.id,
                    user_id=admin.id,
                    content="second",
                    is_admin_response=True,
                ),
                Vote(feedback_id=feedback.id, user_id=admin.id, vote_type=VoteType.UPVOTE),
            ]
        )
        await db_session.commit()

        fetched = await FeedbackService.get_detail(db_session, feedback.id, viewer=student)

        assert [c.content for c in fetched.comments] == ["first", "second"]
        assert fetched.comments[1].user.first_name == "System"
        assert [v.vote_type for v in fetched.votes] == [VoteType.UPVOTE]


class TestStats:
    @pytest.mark.asyncio
    async def test_counts_by_status(self, db_session, categories, student, other_student):
        for status in (
            FeedbackStatus.PENDING,
            FeedbackStatus.PENDING,
            FeedbackStatus.UNDER_REVIEW,
            FeedbackStatus.IN_PROGRESS,
            FeedbackStatus.RESOLVED,
            FeedbackStatus.REJECTED,
        ):
            await make_feedback(db_session, student, category_id=1, status=status)
        await make_feedback(db_session, other_student, category_id=1)
        db_session.add_all(
            [
                Notification(
                    user_id=student.id,
                    title="t",
                    message="m",
                    type=NotificationType.FEEDBACK_UPDATE,
                ),
                Notification(
                    user_id=student.id,
                    title="t",
                    message="m",
                    type=NotificationType.FEEDBACK_UPDATE,
                    is_read=True,
                ),
            ]
        )
        await db_session.commit()

        stats = await FeedbackService.stats(db_session, student.id)

        assert stats == {
            "total": 6,
            "pending": 2,
            "under_review": 1,
            "in_progress": 1,
            "resolved": 1,
            "rejected": 1,
            "unread_notifications": 1,
        }

    @pytest.mark.asyncio
    async def test_empty(self, db_session, student):
        stats = await FeedbackService.stats(db_session, student.id)
        assert stats["total"] == 0
        assert stats["pending"] == 0
        assert stats["unread_notifications"] == 0
