import logging

import uvicorn
from fastapi import FastAPI

from tournament_wheel.core.config import settings
from tournament_wheel.routes import bracket_routes

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="Tournament Wheel API")

# Include routers
app.include_router(bracket_routes.router, prefix="/api", tags=["Brackets"])


@app.get("/")
async def root():
    return {"message": "Tournament Wheel API"}


def run():
    uvicorn.run("tournament_wheel.main:app", host="0.0.0.0", port=8000)


if __name__ == "__main__":
    run()
