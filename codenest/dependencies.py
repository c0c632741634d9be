from fastapi import Depends, Header, HTTPException, Request
from jose import jwt, JWTError
from motor.motor_asyncio import AsyncIOMotorDatabase

from codenest import config

# ==================== DEPENDENCY FUNCTIONS ====================

async def get_db(request: Request) -> AsyncIOMotorDatabase:
    """Database dependency"""
    return request.app.state.db


def verify_bearer_token(authorization: str = Header(None)) -> dict:
    """Decode the identity provider's HS256 token; signature and expiry are checked by jose"""
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Missing or invalid authorization header")

    token = authorization.split(" ", 1)[1]
    try:
        return jwt.decode(token, config.JWT_SECRET_KEY, algorithms=[config.JWT_ALGORITHM])
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid authentication token")


async def get_current_user_id(payload: dict = Depends(verify_bearer_token)) -> str:
    """Stable user identifier, passed explicitly into every core call"""
    user_id = payload.get("sub") or payload.get("uid")
    if not user_id:
        raise HTTPException(status_code=401, detail="Token has no subject")
    return user_id


def get_evaluator(request: Request):
    return request.app.state.evaluator


def get_request_budget(request: Request):
    return request.app.state.request_budget


def get_streak_store(request: Request):
    return request.app.state.streak_store
