from fastapi import APIRouter, Depends, HTTPException, status, Request
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from datetime import datetime

from lecture_reports.core.database import get_db
from lecture_reports.core.security import (
    verify_password,
    get_password_hash,
    create_access_token,
    create_refresh_token,
    decode_token,
    build_token_claims,
    REFRESH,
)
from lecture_reports.core.exceptions import InvalidCredentialsError, ValidationError
from lecture_reports.core.logging_config import logger, set_user_id
from lecture_reports.core.rate_limiter import auth_rate_limit, strict_rate_limit
from lecture_reports.models.user import User, UserRole
from lecture_reports.schemas.auth import (
    UserRegister,
    UserLogin,
    RefreshTokenRequest,
    UserResponse,
    AuthResponse,
)
from lecture_reports.modules.auth.dependencies import get_current_user
from lecture_reports.utils.responses import success_response

router = APIRouter()


def _auth_payload(user: User) -> dict:
    claims = build_token_claims(user)
    return AuthResponse(
        token=create_access_token(claims),
        refresh_token=create_refresh_token(claims),
        user=UserResponse.model_validate(user),
    ).model_dump()


@router.post("/register", status_code=status.HTTP_201_CREATED)
@strict_rate_limit()
async def register(
    request: Request,
    user_data: UserRegister,
    db: AsyncSession = Depends(get_db)
):
    """Register new user (rate limited: 3/min)"""
    client_ip = request.client.host if request.client else "unknown"
    email = user_data.email.lower()

    if user_data.role not in UserRole.values():
        logger.log_auth_event(
            event="register",
            success=False,
            user_email=email,
            reason=f"Invalid role {user_data.role!r}",
            client_ip=client_ip
        )
        raise ValidationError("Invalid role specified", field="role")

    result = await db.execute(
        select(User.id).where(func.lower(User.email) == email)
    )
    if result.scalar_one_or_none() is not None:
        logger.log_auth_event(
            event="register",
            success=False,
            user_email=email,
            reason="Email already registered",
            client_ip=client_ip
        )
        raise ValidationError("Email already registered", field="email")

    user = User(
        email=email,
        password_hash=get_password_hash(user_data.password),
        role=user_data.role,
        first_name=user_data.first_name,
        last_name=user_data.last_name,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)

    logger.log_auth_event(
        event="register",
        success=True,
        user_email=email,
        client_ip=client_ip,
        user_role=user.role
    )

    return success_response(_auth_payload(user), "User registered successfully")


@router.post("/login")
@auth_rate_limit()
async def login(
    request: Request,
    credentials: UserLogin,
    db: AsyncSession = Depends(get_db)
):
    """Login user (rate limited: 5/min)"""
    client_ip = request.client.host if request.client else "unknown"
    email = credentials.email.lower()

    result = await db.execute(
        select(User).where(func.lower(User.email) == email)
    )
    user = result.scalar_one_or_none()

    if not user or not verify_password(credentials.password, user.password_hash):
        logger.log_auth_event(
            event="login",
            success=False,
            user_email=email,
            reason="Invalid credentials",
            client_ip=client_ip
        )
        raise InvalidCredentialsError()

    if not user.is_active:
        logger.log_auth_event(
            event="login",
            success=False,
            user_email=email,
            reason="Account inactive",
            client_ip=client_ip
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is inactive"
        )

    user.last_login = datetime.utcnow()
    await db.commit()

    set_user_id(str(user.id))

    logger.log_auth_event(
        event="login",
        success=True,
        user_email=user.email,
        client_ip=client_ip,
        user_role=user.role
    )

    return success_response(_auth_payload(user), "Login successful")


@router.get("/me")
async def get_me(current_user: User = Depends(get_current_user)):
    """Current user profile"""
    return success_response(UserResponse.model_validate(current_user).model_dump())


@router.post("/refresh")
async def refresh_token(
    body: RefreshTokenRequest,
    db: AsyncSession = Depends(get_db)
):
    """Exchange a refresh token for a new access token"""
    payload = decode_token(body.refresh_token, expected_type=REFRESH)

    user = await db.get(User, int(payload["sub"]))
    if not user or not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found or inactive"
        )

    logger.log_auth_event(event="refresh", success=True, user_email=user.email)

    return success_response(
        {
            "token": create_access_token(build_token_claims(user)),
            "token_type": "bearer",
        },
        "Token refreshed"
    )
