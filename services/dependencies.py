# Dependency factories for the FastAPI app.
from fastapi import Depends, Request

from services.password_reset_service import PasswordResetService


# Hand out the database opened during startup.
def get_mongo_db(request: Request):
    return request.app.state.mongo_db


# Build a reset service per request; it holds no state of its own.
def get_password_reset_service(db=Depends(get_mongo_db)) -> PasswordResetService:
    return PasswordResetService(db)
