"""Authentication routes.

This module handles HTTP endpoints for user authentication, registration and
the signed-in user's own profile. The signed-in user is resolved from the
bearer token on every request and handed to route functions explicitly.
"""

import logging
from datetime import datetime, timedelta
from typing import Optional

import pytz
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt

from config import (
    ACCESS_TOKEN_EXPIRE_MINUTES,
    ADMIN_TOKEN,
    JWT_ALGORITHM,
    JWT_SECRET_KEY,
    PRIVILEGED_ROLES,
)
from core.dependencies import UserManagerDep
from core.exceptions import (
    SchoolNotFoundError,
    UserAlreadyExistsError,
    UserNotFoundError,
)
from schemas.user import (
    CurrentUserResponse,
    LoginRequest,
    LoginResponse,
    RegisterRequest,
    UpdateProfileRequest,
    User,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])

# HTTP Bearer token security
security = HTTPBearer()


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create a JWT access token.

    Args:
        data: Data to encode in the token.
        expires_delta: Optional expiration time delta.

    Returns:
        Encoded JWT token string.
    """
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.now(pytz.utc) + expires_delta
    else:
        expire = datetime.now(pytz.utc) + timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, JWT_SECRET_KEY, algorithm=JWT_ALGORITHM)


def verify_token(credentials: HTTPAuthorizationCredentials = Depends(security)) -> dict:
    """Verify JWT token from Authorization header.

    Args:
        credentials: HTTP Bearer token credentials.

    Returns:
        Decoded token payload.

    Raises:
        HTTPException: If token is invalid or expired.
    """
    try:
        payload = jwt.decode(
            credentials.credentials, JWT_SECRET_KEY, algorithms=[JWT_ALGORITHM]
        )
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials",
        )
    if payload.get("sub") is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials",
        )
    return payload


def get_current_user(
    user_manager: UserManagerDep,
    token_payload: dict = Depends(verify_token),
) -> User:
    """Get current authenticated user.

    Args:
        user_manager: Injected UserManager instance.
        token_payload: Decoded JWT token payload.

    Returns:
        Current User object.

    Raises:
        HTTPException: If the user is not found or deactivated.
    """
    try:
        user = user_manager.get_user_by_id(token_payload["sub"])
    except UserNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
        )
    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is inactive. Please contact support.",
        )
    return user


@router.post("/register", status_code=status.HTTP_201_CREATED, summary="Register")
def register(req: RegisterRequest, user_manager: UserManagerDep) -> dict:
    """Register a new user.

    Registration requirements:
    - Developer/Admin: Requires ADMIN_TOKEN from environment variable
    - Everyone: A non-blank school code must match an existing school

    Args:
        req: Registration request.
        user_manager: Injected UserManager instance.

    Returns:
        Dictionary with success message and user_id.

    Raises:
        HTTPException: If registration fails.
    """
    if req.role in PRIVILEGED_ROLES:
        if not ADMIN_TOKEN:
            logger.error("ADMIN_TOKEN is not set; refusing %s registration", req.role)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Admin registration is not configured. ADMIN_TOKEN not set.",
            )
        if req.admin_token != ADMIN_TOKEN:
            logger.warning("Rejected %s registration for %s: bad admin token", req.role, req.email)
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Invalid admin token",
            )

    try:
        school_id = user_manager.resolve_school_code(req.school_code)
    except SchoolNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid school code. Please check with your school administration.",
        )

    try:
        user = user_manager.create_user(
            email=req.email,
            password=req.password,
            role=req.role,
            first_name=req.first_name,
            last_name=req.last_name,
            school_id=school_id,
            phone=req.phone,
            date_of_birth=req.date_of_birth,
            address=req.address,
        )
    except UserAlreadyExistsError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(e),
        )

    return {
        "success": True,
        "message": "User registered successfully",
        "user_id": user.user_id,
    }


@router.post("/login", response_model=LoginResponse, summary="Login")
def login(req: LoginRequest, user_manager: UserManagerDep) -> LoginResponse:
    """Login with email and password.

    Args:
        req: Login request with email and password.
        user_manager: Injected UserManager instance.

    Returns:
        LoginResponse with user information and JWT token.

    Raises:
        HTTPException: If login fails.
    """
    user = user_manager.authenticate(req.email, req.password)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )
    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is inactive. Please contact support.",
        )

    access_token = create_access_token(
        data={"sub": user.user_id, "role": user.role},
        expires_delta=timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES),
    )
    logger.info("User %s logged in", user.user_id)
    return LoginResponse(user=user.public_dict(), token=access_token)


@router.post("/logout", summary="Logout")
def logout() -> dict:
    """Logout endpoint.

    Note: Since we're using stateless JWT tokens, logout is handled
    client-side by removing the token. This endpoint exists for API
    consistency.
    """
    return {"success": True, "message": "Logged out successfully"}


@router.get("/me", response_model=CurrentUserResponse, summary="Current user")
def get_current_user_info(
    current_user: User = Depends(get_current_user),
) -> CurrentUserResponse:
    return CurrentUserResponse(user=current_user.public_dict())


@router.patch("/me", response_model=CurrentUserResponse, summary="Update own profile")
def update_current_user(
    req: UpdateProfileRequest,
    user_manager: UserManagerDep,
    current_user: User = Depends(get_current_user),
) -> CurrentUserResponse:
    """Update the signed-in user's profile fields.

    Raises:
        HTTPException: 400 if the school code is unknown.
    """
    try:
        user = user_manager.update_profile(
            current_user.user_id,
            first_name=req.first_name,
            last_name=req.last_name,
            phone=req.phone,
            date_of_birth=req.date_of_birth,
            address=req.address,
            school_code=req.school_code,
        )
    except SchoolNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid school code. Please check with your school administration.",
        )
    return CurrentUserResponse(user=user.public_dict())
