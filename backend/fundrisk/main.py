import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from fundrisk.config import settings
from fundrisk.services.parameter_service import initialize_parameters
from fundrisk.api.routes import cashflow, credit, health, parameters, portfolio, recovery, risk


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: configure logging and load parameter tables
    logging.basicConfig(level=settings.LOG_LEVEL)
    initialize_parameters()
    yield


app = FastAPI(title="Fund Risk Engine", version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router, prefix="/api")
app.include_router(parameters.router, prefix="/api")
app.include_router(credit.router, prefix="/api")
app.include_router(risk.router, prefix="/api")
app.include_router(cashflow.router, prefix="/api")
app.include_router(recovery.router, prefix="/api")
app.include_router(portfolio.router, prefix="/api")
