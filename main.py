import argparse
import logging
import uvicorn
from fastapi import FastAPI
from contextlib import asynccontextmanager

import sys
from pathlib import Path

# Add project root to path for package imports
base_dir = Path(__file__).parent
sys.path.insert(0, str(base_dir))

from db.database import init_db
from config import load_config
from routes import decks, review  # Import routers

def configure_logging(config: dict) -> None:
    logging.basicConfig(
        level=config["logging"]["level"],
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

# First-run init
@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: init DB and config
    config = load_config()  # Ensures config exists
    configure_logging(config)
    init_db()
    yield

app = FastAPI(title="CardCoach", description="Local-first flashcards with SM-2 scheduling", lifespan=lifespan)

# Include routers
app.include_router(decks.router, prefix="/decks", tags=["decks"])
app.include_router(review.router, prefix="/review", tags=["review"])

@app.get("/health")
async def health():
    return {"status": "ok"}

if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="CardCoach App")
    parser.add_argument("--init", action="store_true", help="Initialize DB and config")
    parser.add_argument("--dev", action="store_true", help="Run in dev mode with reload")
    args = parser.parse_args()
    config = load_config()  # Ensures config is copied if missing
    configure_logging(config)
    if args.init:
        init_db()
        print("DB initialized and config copied to ~/.cardcoach/")
        sys.exit(0)
    # Run server
    uvicorn.run(
        "main:app",
        host=config["server"]["host"],
        port=config["server"]["port"],
        reload=args.dev,
        log_level=config["logging"]["level"].lower(),
    )
