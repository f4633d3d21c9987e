from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter


router = APIRouter(prefix="/auth", tags=["system"])


# Unauthenticated liveness probe for the auth service.
@router.get("/health")
def health():
    return {"status": "ok", "timestamp": datetime.utcnow().isoformat()}
