"""Tests for bookmark_service and progress_service."""

import pytest
import pytest_asyncio
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from quickmap.core.errors import NotFound
from quickmap.models import Bookmark, Milestone, Plan, Profile, Step, StepCompletion
from quickmap.services import bookmark_service, plan_service, progress_service


@pytest_asyncio.fixture
async def public_plan(test_session: AsyncSession) -> dict[str, object]:
    """Plan owned by alice with four steps over two milestones."""
    plan = Plan(owner_id="alice", title="Alice's plan", focus="f", outcome="o")
    test_session.add(plan)
    test_session.add(Profile(id="alice", email="alice@example.com"))
    await test_session.flush()

    milestones = [
        Milestone(plan_id=plan.id, title="M0", order_index=0),
        Milestone(plan_id=plan.id, title="M1", order_index=1),
    ]
    test_session.add_all(milestones)
    await test_session.flush()

    steps = [
        Step(milestone_id=milestones[i // 2].id, title=f"S{i}", order_index=i % 2)
        for i in range(4)
    ]
    test_session.add_all(steps)
    await test_session.commit()
    return {"plan_id": plan.id, "step_ids": [s.id for s in steps]}


class TestCalcProgress:
    def test_empty_plan(self):
        progress = progress_service.calc_progress(0, 0)
        assert (progress.completed, progress.total, progress.percent) == (0, 0, 0)

    def test_rounding(self):
        assert progress_service.calc_progress(2, 3).percent == 67
        assert progress_service.calc_progress(1, 3).percent == 33
        assert progress_service.calc_progress(4, 4).percent == 100


@pytest.mark.asyncio
async def test_bookmark_is_idempotent(test_session: AsyncSession, public_plan) -> None:
    plan_id = public_plan["plan_id"]
    await bookmark_service.add_bookmark(test_session, user_id="bob", plan_id=plan_id)
    await bookmark_service.add_bookmark(test_session, user_id="bob", plan_id=plan_id)
    await test_session.commit()

    count = await test_session.execute(select(func.count()).select_from(Bookmark))
    assert count.scalar_one() == 1


@pytest.mark.asyncio
async def test_bookmark_missing_plan(test_session: AsyncSession) -> None:
    with pytest.raises(NotFound, match="Plan not found"):
        await bookmark_service.add_bookmark(test_session, user_id="bob", plan_id="nope")


@pytest.mark.asyncio
async def test_remove_bookmark(test_session: AsyncSession, public_plan) -> None:
    plan_id = public_plan["plan_id"]
    await bookmark_service.add_bookmark(test_session, user_id="bob", plan_id=plan_id)
    await test_session.commit()

    assert await bookmark_service.remove_bookmark(test_session, user_id="bob", plan_id=plan_id)
    assert not await bookmark_service.remove_bookmark(
        test_session, user_id="bob", plan_id=plan_id
    )


@pytest.mark.asyncio
async def test_bookmarked_plans_carry_email_and_progress(
    test_session: AsyncSession, public_plan
) -> None:
    plan_id = public_plan["plan_id"]
    await bookmark_service.add_bookmark(test_session, user_id="bob", plan_id=plan_id)
    await progress_service.set_step_completion(
        test_session, user_id="bob", step_id=public_plan["step_ids"][0], completed=True
    )
    # Alice's own completions do not count for bob
    await progress_service.set_step_completion(
        test_session, user_id="alice", step_id=public_plan["step_ids"][1], completed=True
    )
    await test_session.commit()

    plans = await bookmark_service.list_bookmarked_plans(test_session, user_id="bob")
    assert len(plans) == 1
    assert plans[0].owner_email == "alice@example.com"
    assert plans[0].progress.completed == 1
    assert plans[0].progress.total == 4
    assert plans[0].progress.percent == 25

    assert await bookmark_service.list_bookmarked_plans(test_session, user_id="carol") == []


@pytest.mark.asyncio
async def test_step_completion_toggle(test_session: AsyncSession, public_plan) -> None:
    step_id = public_plan["step_ids"][2]
    for _ in range(2):
        assert await progress_service.set_step_completion(
            test_session, user_id="bob", step_id=step_id, completed=True
        )
    await test_session.commit()

    count = await test_session.execute(select(func.count()).select_from(StepCompletion))
    assert count.scalar_one() == 1

    progress = await progress_service.get_plan_progress(
        test_session, user_id="bob", plan_id=public_plan["plan_id"]
    )
    assert (progress.completed, progress.total) == (1, 4)

    assert not await progress_service.set_step_completion(
        test_session, user_id="bob", step_id=step_id, completed=False
    )
    await test_session.commit()
    progress = await progress_service.get_plan_progress(
        test_session, user_id="bob", plan_id=public_plan["plan_id"]
    )
    assert progress.completed == 0


@pytest.mark.asyncio
async def test_completion_of_missing_step(test_session: AsyncSession) -> None:
    with pytest.raises(NotFound, match="Step not found"):
        await progress_service.set_step_completion(
            test_session, user_id="bob", step_id="nope", completed=True
        )


@pytest.mark.asyncio
async def test_progress_of_missing_plan(test_session: AsyncSession) -> None:
    with pytest.raises(NotFound):
        await progress_service.get_plan_progress(test_session, user_id="bob", plan_id="nope")


@pytest.mark.asyncio
async def test_annotate_tree(test_session: AsyncSession, public_plan) -> None:
    await progress_service.set_step_completion(
        test_session, user_id="bob", step_id=public_plan["step_ids"][3], completed=True
    )
    await test_session.commit()

    tree = await plan_service.get_plan_tree(test_session, public_plan["plan_id"])
    tree = await progress_service.annotate_tree(test_session, tree, "bob")

    flags = [s.completed for m in tree.milestones for s in m.steps]
    assert flags == [False, False, False, True]
    assert tree.progress.percent == 25


@pytest.mark.asyncio
async def test_deleting_plan_removes_bookmarks_and_completions(
    test_session: AsyncSession, public_plan
) -> None:
    plan_id = public_plan["plan_id"]
    await bookmark_service.add_bookmark(test_session, user_id="bob", plan_id=plan_id)
    await progress_service.set_step_completion(
        test_session, user_id="bob", step_id=public_plan["step_ids"][0], completed=True
    )
    await test_session.commit()

    await plan_service.delete_plan(test_session, plan_id, owner_id="alice")
    await test_session.commit()

    for model in (Bookmark, StepCompletion):
        count = await test_session.execute(select(func.count()).select_from(model))
        assert count.scalar_one() == 0


@pytest.mark.asyncio
async def test_concurrent_bookmark_keeps_one_row(
    test_session: AsyncSession, public_plan, monkeypatch: pytest.MonkeyPatch
) -> None:
    plan_id = public_plan["plan_id"]
    await bookmark_service.add_bookmark(test_session, user_id="bob", plan_id=plan_id)
    await test_session.commit()

    async def not_seen(db, user_id, plan_id):
        return False

    # Both requests passed the existence check; the unique pair settles it
    monkeypatch.setattr(bookmark_service, "_bookmark_exists", not_seen)
    await bookmark_service.add_bookmark(test_session, user_id="bob", plan_id=plan_id)
    await test_session.commit()

    count = await test_session.execute(select(func.count()).select_from(Bookmark))
    assert count.scalar_one() == 1
    plans = await bookmark_service.list_bookmarked_plans(test_session, user_id="bob")
    assert [p.id for p in plans] == [plan_id]


@pytest.mark.asyncio
async def test_concurrent_completion_keeps_one_row(
    test_session: AsyncSession, public_plan, monkeypatch: pytest.MonkeyPatch
) -> None:
    step_id = public_plan["step_ids"][0]
    await progress_service.set_step_completion(
        test_session, user_id="bob", step_id=step_id, completed=True
    )
    await test_session.commit()

    async def not_seen(db, user_id, step_id):
        return False

    monkeypatch.setattr(progress_service, "_completion_exists", not_seen)
    assert await progress_service.set_step_completion(
        test_session, user_id="bob", step_id=step_id, completed=True
    )
    await test_session.commit()

    count = await test_session.execute(select(func.count()).select_from(StepCompletion))
    assert count.scalar_one() == 1
