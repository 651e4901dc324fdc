"""Tests for ownership checks."""

import pytest
import pytest_asyncio
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from quickmap.core.errors import NotFound, PersistenceFailure
from quickmap.models import Milestone, Plan, Resource, Step
from quickmap.services.ownership import (
    ensure_milestone_owner,
    ensure_plan_owner,
    ensure_resource_owner,
    ensure_step_owner,
)


@pytest_asyncio.fixture
async def owned_tree(test_session: AsyncSession) -> dict[str, str]:
    plan = Plan(owner_id="alice", title="P", focus="f", outcome="o")
    test_session.add(plan)
    await test_session.flush()
    milestone = Milestone(plan_id=plan.id, title="M", order_index=0)
    test_session.add(milestone)
    await test_session.flush()
    step = Step(milestone_id=milestone.id, title="S", order_index=0)
    test_session.add(step)
    await test_session.flush()
    resource = Resource(step_id=step.id, title="R", order_index=0)
    test_session.add(resource)
    await test_session.commit()
    return {
        "plan": plan.id,
        "milestone": milestone.id,
        "step": step.id,
        "resource": resource.id,
    }


CHECKS = [
    ("plan", ensure_plan_owner, "Plan not found"),
    ("milestone", ensure_milestone_owner, "Milestone not found"),
    ("step", ensure_step_owner, "Step not found"),
    ("resource", ensure_resource_owner, "Resource not found"),
]


@pytest.mark.asyncio
@pytest.mark.parametrize(("level", "check", "message"), CHECKS)
async def test_owner_passes(test_session, owned_tree, level, check, message) -> None:
    entity = await check(test_session, owned_tree[level], "alice")
    assert entity.id == owned_tree[level]


@pytest.mark.asyncio
@pytest.mark.parametrize(("level", "check", "message"), CHECKS)
async def test_foreign_and_missing_look_the_same(
    test_session, owned_tree, level, check, message
) -> None:
    with pytest.raises(NotFound) as foreign:
        await check(test_session, owned_tree[level], "mallory")
    with pytest.raises(NotFound) as missing:
        await check(test_session, "does-not-exist", "alice")

    assert foreign.value.message == missing.value.message == message
    assert foreign.value.to_payload() == missing.value.to_payload()
    assert foreign.value.status_code == 404


@pytest.mark.asyncio
async def test_store_error_carries_driver_message(test_session, owned_tree) -> None:
    await test_session.execute(text("DROP TABLE resources"))
    await test_session.commit()

    with pytest.raises(PersistenceFailure) as exc_info:
        await ensure_resource_owner(test_session, owned_tree["resource"], "alice")

    assert exc_info.value.message == "no such table: resources"
    assert exc_info.value.status_code == 500
