# Run from project root: uvicorn research_agent.main:app --reload

import logging

from fastapi import FastAPI

from research_agent.api.routes import router
from research_agent.core.config import LOG_LEVEL

logging.basicConfig(level=LOG_LEVEL)


app = FastAPI(title="Research Assistant Backend")
app.include_router(router)
