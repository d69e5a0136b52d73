import logging

from fastapi import FastAPI

from api.routers import assistant, commands, ops, scheduling, tasks

# Logging configuration
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s"
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Agenda AI")

app.include_router(assistant.router)
app.include_router(commands.router)
app.include_router(scheduling.router)
app.include_router(tasks.router)
app.include_router(ops.router)

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
