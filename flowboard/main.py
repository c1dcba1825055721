from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from flowboard.budgets.router import router as budgets_router
from flowboard.config import settings
from flowboard.database import close_database, init_database
from flowboard.exception_handlers import register_exception_handlers
from flowboard.flows.router import router as flows_router
from flowboard.goals.router import router as goals_router
from flowboard.identity.router import router as identity_router
from flowboard.logging_config import setup_logging
from flowboard.nodes.router import router as nodes_router
from flowboard.profiles.router import router as profiles_router
from flowboard.statements.router import router as statements_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    await init_database()
    yield
    await close_database()


app = FastAPI(
    title="Flowboard",
    description="Personal finance flow graph and statements",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

PROFILE_PREFIX = "/api/v1/profiles/{profile_id}"

app.include_router(identity_router, prefix="/api/v1/auth", tags=["auth"])
app.include_router(profiles_router, prefix="/api/v1/profiles", tags=["profiles"])
app.include_router(nodes_router, prefix=f"{PROFILE_PREFIX}/nodes", tags=["nodes"])
app.include_router(flows_router, prefix=f"{PROFILE_PREFIX}/flows", tags=["flows"])
app.include_router(budgets_router, prefix=f"{PROFILE_PREFIX}/budgets", tags=["budgets"])
app.include_router(goals_router, prefix=f"{PROFILE_PREFIX}/goals", tags=["goals"])
app.include_router(statements_router, prefix=PROFILE_PREFIX, tags=["statements"])


@app.get("/api/v1/health")
async def health():
    from flowboard.database import check_health

    await check_health()
    return {"status": "healthy"}
