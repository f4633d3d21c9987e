from __future__ import annotations

import logging

# Bring in the FastAPI toolkit plus the Mongo client and shared settings.
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pymongo import MongoClient

from config.settings import settings
from routers import auth, system


logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


# Build the FastAPI application that fronts account recovery.
app = FastAPI(title="Account Recovery API")


# Let local dev origins call the API without CORS complaints.
app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.cors_origins),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Open a Mongo connection on startup and stash handy handles on app.state.
@app.on_event("startup")
def startup_db_client():
    mongo_client = MongoClient(settings.mongodb_uri)
    mongo_db = mongo_client[settings.mongodb_db]
    app.state.mongo_client = mongo_client
    app.state.mongo_db = mongo_db
    users = mongo_db["users"]
    users.create_index("handle", unique=True)
    users.create_index("user_name", unique=True)
    logger.info("Connected to MongoDB database %s (env=%s)", settings.mongodb_db, settings.environment)


# Close the Mongo client cleanly whenever the API shuts down.
@app.on_event("shutdown")
def shutdown_db_client():
    client = getattr(app.state, "mongo_client", None)
    if client:
        client.close()


# Register each router so their endpoints become reachable.
app.include_router(system.router)
app.include_router(auth.router)


# Lightweight root endpoint acts as a ping for operators.
@app.get("/")
def root():
    return {"message": "Account recovery API running"}
