from typing import Annotated

import aiosqlite
from fastapi import Depends

from flowboard.auth import Session, verify_token
from flowboard.budgets.repository import BudgetRepository
from flowboard.budgets.service import BudgetService
from flowboard.database import get_db
from flowboard.event_store.service import EventStoreService
from flowboard.flows.repository import FlowRepository
from flowboard.flows.service import FlowService
from flowboard.goals.repository import GoalRepository
from flowboard.goals.service import GoalService
from flowboard.identity.repository import UserRepository
from flowboard.identity.service import IdentityService
from flowboard.nodes.repository import NodeRepository
from flowboard.nodes.service import NodeService
from flowboard.profiles.repository import ProfileRepository
from flowboard.profiles.service import ProfileService
from flowboard.statements.service import StatementService

DBConn = Annotated[aiosqlite.Connection, Depends(get_db)]
CurrentSession = Annotated[Session, Depends(verify_token)]


def get_event_store() -> EventStoreService:
    return EventStoreService(get_db())


def get_profile_service() -> ProfileService:
    return ProfileService(get_event_store(), ProfileRepository(get_db()))


def get_identity_service() -> IdentityService:
    return IdentityService(UserRepository(get_db()), get_profile_service())


def get_budget_service() -> BudgetService:
    db = get_db()
    return BudgetService(get_event_store(), BudgetRepository(db), NodeRepository(db))


def get_node_service() -> NodeService:
    return NodeService(get_event_store(), NodeRepository(get_db()), get_budget_service())


def get_flow_service() -> FlowService:
    db = get_db()
    return FlowService(get_event_store(), FlowRepository(db), NodeRepository(db))


def get_goal_service() -> GoalService:
    return GoalService(get_event_store(), GoalRepository(get_db()))


def get_statement_service() -> StatementService:
    return StatementService(
        get_event_store(),
        get_node_service(),
        get_flow_service(),
        get_budget_service(),
        get_goal_service(),
    )


EventStoreDep = Annotated[EventStoreService, Depends(get_event_store)]
ProfileServiceDep = Annotated[ProfileService, Depends(get_profile_service)]
IdentityServiceDep = Annotated[IdentityService, Depends(get_identity_service)]
BudgetServiceDep = Annotated[BudgetService, Depends(get_budget_service)]
NodeServiceDep = Annotated[NodeService, Depends(get_node_service)]
FlowServiceDep = Annotated[FlowService, Depends(get_flow_service)]
GoalServiceDep = Annotated[GoalService, Depends(get_goal_service)]
StatementServiceDep = Annotated[StatementService, Depends(get_statement_service)]


async def owned_profile_id(
    profile_id: str,
    session: CurrentSession,
    profiles: ProfileServiceDep,
) -> str:
    await profiles.require_access(session, profile_id)
    return profile_id


OwnedProfileId = Annotated[str, Depends(owned_profile_id)]
