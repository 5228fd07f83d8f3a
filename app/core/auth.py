# app/core/auth.py

import uuid
import logging
import asyncio
from typing import Optional

from fastapi import Depends, Request
from fastapi_users import FastAPIUsers, BaseUserManager, UUIDIDMixin
from fastapi_users.authentication import (
    AuthenticationBackend,
    BearerTransport,
    JWTStrategy,
)
from fastapi_users.db import SQLAlchemyUserDatabase
from fastapi_users import schemas

from sqlalchemy import Column, String, Boolean
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.ext.asyncio import AsyncSession

import sendgrid
from sendgrid.helpers.mail import Mail

from .database import Base, get_async_session
from .config import settings

logger = logging.getLogger(__name__)

JWT_AUDIENCE = ["fastapi-users:auth"]


# 1. Auth identity. Household profile data lives in app.models.user.User
class Account(Base):
    __tablename__ = "auth_accounts"

    id = Column(PG_UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    is_superuser = Column(Boolean, default=False, nullable=False)
    is_verified = Column(Boolean, default=False, nullable=False)

    def __repr__(self):
        return f"<Account email={self.email}>"


# 2. Pydantic schemas
class AccountRead(schemas.BaseUser[uuid.UUID]):
    pass

class AccountCreate(schemas.BaseUserCreate):
    pass


# 3. Outgoing mail
async def send_email_via_sendgrid(to_email: str, subject: str, body: str) -> bool:
    """
    Send an HTML email through SendGrid. Returns False instead of raising so
    callers can treat mail as best effort.
    """
    if not settings.SENDGRID_API_KEY:
        logger.info(f"SendGrid not configured, skipping email to {to_email}")
        return False

    try:
        logger.info(f"Attempting to send email to {to_email}")

        if not to_email or "@" not in to_email:
            logger.error(f"Invalid email format: {to_email}")
            return False

        message = Mail(
            from_email=(settings.EMAIL_FROM, settings.EMAIL_FROM_NAME),
            to_emails=to_email,
            subject=subject,
            html_content=body
        )
        message.reply_to = settings.EMAIL_FROM

        sg = sendgrid.SendGridAPIClient(api_key=settings.SENDGRID_API_KEY)

        # The SendGrid client is blocking
        loop = asyncio.get_running_loop()
        response = await loop.run_in_executor(None, sg.send, message)

        if response.status_code == 202:
            logger.info(f"✅ Email sent successfully to {to_email}")
            return True
        logger.error(f"❌ Failed to send email. Status code: {response.status_code}")
        logger.error(f"Response body: {response.body}")
        return False

    except Exception as e:
        logger.error(f"❌ Exception while sending email to {to_email}: {str(e)}")
        return False


EMAIL_TEMPLATE = """
<!DOCTYPE html>
<html>
<head><meta charset="utf-8"><title>{title}</title></head>
<body style="margin: 0; padding: 0; font-family: Arial, sans-serif; background-color: #f4f4f4;">
    <div style="max-width: 600px; margin: 0 auto; background-color: #ffffff; padding: 20px;">
        <h1 style="color: #e8618c; font-size: 24px; text-align: center;">{app_name}</h1>
        <h2 style="color: #333;">{title}</h2>
        <p style="color: #666; line-height: 1.6;">{message}</p>
        <div style="text-align: center; margin: 30px 0;">
            <a href="{link}" style="background-color: #e8618c; color: #ffffff; padding: 15px 30px; text-decoration: none; border-radius: 5px; font-weight: bold;">{button}</a>
        </div>
        <p style="color: #999; font-size: 12px; word-break: break-all;">{link}</p>
    </div>
</body>
</html>
"""


def render_email(title: str, message: str, link: str, button: str) -> str:
    return EMAIL_TEMPLATE.format(
        app_name=settings.APP_NAME,
        title=title,
        message=message,
        link=link,
        button=button,
    )


# 4. Account manager
class AccountManager(UUIDIDMixin, BaseUserManager[Account, uuid.UUID]):
    reset_password_token_secret = settings.SECRET_KEY
    verification_token_secret = settings.SECRET_KEY

    async def on_after_register(self, user: Account, request: Optional[Request] = None):
        logger.info(f"Account {user.email} has registered")

    async def on_after_request_verify(self, user: Account, token: str, request: Optional[Request] = None):
        logger.info(f"Verification requested for {user.email}. Token: {token[:10]}...")
        verification_url = f"{settings.FRONTEND_URL}/verify-email?token={token}"
        body = render_email(
            title="Verify your email",
            message="Confirm your email address to start sharing a ledger with your partner.",
            link=verification_url,
            button="Verify Email Address",
        )
        if not await send_email_via_sendgrid(user.email, "Verify your account", body):
            logger.error(f"❌ Failed to send verification email to {user.email}")

    async def on_after_forgot_password(self, user: Account, token: str, request: Optional[Request] = None):
        logger.info(f"Password reset requested for {user.email}. Token: {token[:10]}...")
        reset_url = f"{settings.FRONTEND_URL}/reset-password?token={token}"
        body = render_email(
            title="Password reset",
            message="We received a request to reset your password. The link expires in 1 hour.",
            link=reset_url,
            button="Reset Password",
        )
        if not await send_email_via_sendgrid(user.email, "Reset your password", body):
            logger.error(f"❌ Failed to send password reset email to {user.email}")

    async def on_after_verify(self, user: Account, request: Optional[Request] = None):
        logger.info(f"Account {user.email} has been verified")

    async def on_after_reset_password(self, user: Account, request: Optional[Request] = None):
        logger.info(f"Password reset completed for {user.email}")


async def get_account_db(session: AsyncSession = Depends(get_async_session)):
    yield SQLAlchemyUserDatabase(session, Account)

async def get_account_manager(account_db: SQLAlchemyUserDatabase = Depends(get_account_db)):
    yield AccountManager(account_db)


# 5. Authentication backend
bearer_transport = BearerTransport(tokenUrl="/api/v1/auth/jwt/login")

def get_jwt_strategy() -> JWTStrategy:
    return JWTStrategy(
        secret=settings.SECRET_KEY,
        lifetime_seconds=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        token_audience=JWT_AUDIENCE,
        algorithm=settings.ALGORITHM,
    )

auth_backend = AuthenticationBackend(
    name="jwt",
    transport=bearer_transport,
    get_strategy=get_jwt_strategy,
)

fastapi_users = FastAPIUsers[Account, uuid.UUID](get_account_manager, [auth_backend])


__all__ = [
    "fastapi_users",
    "auth_backend",
    "get_account_db",
    "Account",
    "AccountRead",
    "AccountCreate",
    "JWT_AUDIENCE",
    "send_email_via_sendgrid",
    "render_email",
]
