import structlog

from flowboard.budgets.service import BudgetService
from flowboard.event_store.schemas import ActivityResponse
from flowboard.event_store.service import EventStoreService
from flowboard.flows.service import FlowService
from flowboard.goals.service import GoalService
from flowboard.nodes.service import NodeService
from flowboard.statements.schemas import DashboardResponse, FinancialStatement
from flowboard.statements.transformer import build_statement

logger = structlog.get_logger()


class StatementService:
    """Loads a fresh snapshot of a profile's graph and hands it to the transformer."""

    def __init__(
        self,
        event_store: EventStoreService,
        nodes: NodeService,
        flows: FlowService,
        budgets: BudgetService,
        goals: GoalService,
    ) -> None:
        self._event_store = event_store
        self._nodes = nodes
        self._flows = flows
        self._budgets = budgets
        self._goals = goals

    async def statement(self, profile_id: str) -> FinancialStatement:
        nodes = await self._nodes.snapshot(profile_id)
        flows = await self._flows.snapshot(profile_id)
        statement = build_statement(nodes, flows)

        logger.info(
            "statement_built",
            profile_id=profile_id,
            nodes=len(nodes),
            flows=len(flows),
            alerts=len(statement.alerts),
        )
        return statement

    async def dashboard(self, profile_id: str, activity_limit: int = 20) -> DashboardResponse:
        events = await self._event_store.get_activity(profile_id, limit=activity_limit)
        return DashboardResponse(
            profile_id=profile_id,
            statement=await self.statement(profile_id),
            budgets=await self._budgets.list_budgets(profile_id),
            goals=await self._goals.list_goals(profile_id),
            recent_activity=[ActivityResponse.from_event(event) for event in events],
        )
