"""Conversions between ORM models and pydantic schemas."""

from models.school import SchoolModel
from models.user import UserModel
from schemas.school import SchoolInfo
from schemas.user import User


def user_to_model(user: User) -> UserModel:
    return UserModel(
        user_id=user.user_id,
        email=user.email,
        password_hash=user.password_hash,
        first_name=user.first_name,
        last_name=user.last_name,
        role=user.role,
        school_id=user.school_id,
        phone=user.phone,
        date_of_birth=user.date_of_birth,
        address=user.address,
        is_active=user.is_active,
        created_at=user.created_at,
        updated_at=user.updated_at,
    )


def model_to_user(model: UserModel) -> User:
    return User(
        user_id=model.user_id,
        email=model.email,
        password_hash=model.password_hash,
        first_name=model.first_name,
        last_name=model.last_name,
        role=model.role,
        school_id=model.school_id,
        phone=model.phone,
        date_of_birth=model.date_of_birth,
        address=model.address,
        is_active=bool(model.is_active),
        created_at=model.created_at,
        updated_at=model.updated_at,
    )


def model_to_school(model: SchoolModel) -> SchoolInfo:
    return SchoolInfo(
        id=model.id,
        name=model.name,
        school_code=model.school_code,
        address=model.address,
        phone=model.phone,
        email=model.email,
        website=model.website,
        principal_name=model.principal_name,
        principal_email=model.principal_email,
        plan=model.plan,
        created_at=model.created_at,
        updated_at=model.updated_at,
    )
