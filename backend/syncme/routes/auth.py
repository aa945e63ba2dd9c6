"""
SyncMe - Auth Route Handlers
============================

    POST /signup → 200 {message} | 400 email already registered
    POST /login  → 200 {email}   | 401 credentials do not match
"""

from fastapi import APIRouter, Depends

from syncme.repositories.base import UserRepository
from syncme.repositories.sql import get_user_repository
from syncme.schemas.auth import Credentials, LoginResponse, SignupResponse
from syncme.schemas.note import ErrorResponse
from syncme.services.auth_service import auth_service

router = APIRouter(tags=["Auth"])


@router.post(
    "/signup",
    response_model=SignupResponse,
    responses={400: {"description": "Email already registered", "model": ErrorResponse}},
    summary="Register a user",
)
async def signup(
    credentials: Credentials,
    users: UserRepository = Depends(get_user_repository),
) -> SignupResponse:
    await auth_service.signup(users, credentials.email, credentials.password)
    return SignupResponse()


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={401: {"description": "Invalid email or password", "model": ErrorResponse}},
    summary="Log in",
    description="Returns the email, which clients send back as X-User-Email.",
)
async def login(
    credentials: Credentials,
    users: UserRepository = Depends(get_user_repository),
) -> LoginResponse:
    email = await auth_service.login(users, credentials.email, credentials.password)
    return LoginResponse(email=email)
