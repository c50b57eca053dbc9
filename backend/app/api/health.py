# app/api/health.py
import time

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

from app.schemas.submission import HealthOut

router = APIRouter()


@router.get("/", response_class=PlainTextResponse)
def root():
    return "API is running"


@router.get("/health", response_model=HealthOut)
def health():
    return HealthOut(ok=True, ts=int(time.time() * 1000))
