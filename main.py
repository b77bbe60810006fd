from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import logging

from database import Base, engine, settings
from api import answers, channels, users
from core.catalog import get_catalog
from schemas import HelpResponse

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)

HELP_TEXT = """Setup: use /setchannel <channel> to set the channel to play in. Make sure the bot has permissions to send messages in the channel.
Play album chain as you would in circle. Rules are:
1. No mothering - don't explain the rules of album chain.
2. No talking in album chain - any messages sent are considered answers.
3. Don't give weird album answers like "taylor's version" or "deluxe", song variants are accepted but album variants mostly are not, so try to be straightforward.
4. Answers are checked closely, they should match the song name (but case and punctuation don't matter).
5. Nobody can answer twice in a row, and the title track can't be the first song of an album."""


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: create tables and load the catalog once
    Base.metadata.create_all(bind=engine)
    get_catalog()
    yield


app = FastAPI(
    title="Album Chain API",
    description="Backend API for the album chain chat game",
    version="1.0.0",
    lifespan=lifespan
)

# CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure this properly in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(channels.router)
app.include_router(answers.router)
app.include_router(users.router)


@app.get("/")
def root():
    return {"message": "Album Chain API", "status": "ok"}


@app.get("/health")
def health():
    return {"status": "healthy"}


@app.get("/api/help", response_model=HelpResponse)
def help_text():
    return HelpResponse(text=HELP_TEXT)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
