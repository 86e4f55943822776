
import logging
import secrets
from datetime import timedelta
from decimal import Decimal
from typing import List, Optional, Tuple
from sqlalchemy.orm import Session
from app.config import settings
from app.errors import AuthError, ConflictError, ForbiddenError, NotFoundError, ValidationError
from app.models.order import Order
from app.models.user import User, WalletTransaction, AuthToken
from app.schemas.user import UserRegister
from app.utils import utcnow, as_utc

logger = logging.getLogger(__name__)


class UserService:
    """Accounts, bearer tokens and the wallet ledger"""

    @staticmethod
    def register(db: Session, data: UserRegister, role: str = "user") -> User:
        email = data.email.strip().lower()
        if db.query(User).filter(User.email == email).first():
            raise ConflictError("User already exists")
        user = User(
            name=data.name,
            email=email,
            mobile=data.mobile,
            role=role,
            wallet_balance=0,
        )
        user.set_password(data.password)
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    @staticmethod
    def get_user(db: Session, user_id: int) -> User:
        user = db.query(User).filter(User.id == user_id).first()
        if not user:
            raise NotFoundError("User")
        return user

    @staticmethod
    def get_by_email(db: Session, email: str) -> Optional[User]:
        return db.query(User).filter(User.email == email.strip().lower()).first()

    @staticmethod
    def login(db: Session, email: str, password: str) -> Tuple[User, AuthToken]:
        user = UserService.get_by_email(db, email)
        if not user or not user.check_password(password):
            raise AuthError("Invalid email or password")
        if user.is_blocked:
            raise ForbiddenError("Account is blocked")
        return user, UserService.issue_token(db, user)

    @staticmethod
    def issue_token(db: Session, user: User) -> AuthToken:
        token = AuthToken(
            token=secrets.token_hex(32),
            user_id=user.id,
            expires_at=utcnow() + timedelta(hours=settings.token_ttl_hours),
        )
        db.add(token)
        db.commit()
        db.refresh(token)
        return token

    @staticmethod
    def authenticate(db: Session, token: Optional[str]) -> User:
        if not token:
            raise AuthError("Not authorized, no token")
        record = db.query(AuthToken).filter(AuthToken.token == token).first()
        if record is None:
            raise AuthError()
        if as_utc(record.expires_at) <= utcnow():
            db.delete(record)
            db.commit()
            raise AuthError("Token expired")
        if record.user.is_blocked:
            raise AuthError("Account is blocked")
        return record.user

    @staticmethod
    def set_role(db: Session, user: User, role: str) -> User:
        user.role = role
        db.commit()
        db.refresh(user)
        return user

    @staticmethod
    def list_customers(db: Session) -> List[User]:
        return (
            db.query(User)
            .filter(User.role != "admin")
            .order_by(User.created_at.desc(), User.id.desc())
            .all()
        )

    @staticmethod
    def toggle_block(db: Session, user_id: int, reason: Optional[str] = None) -> User:
        user = UserService.get_user(db, user_id)
        if user.role == "admin":
            raise ValidationError("Cannot block admin users")
        user.is_blocked = not user.is_blocked
        user.blocked_reason = (reason or "") if user.is_blocked else None
        db.commit()
        db.refresh(user)
        logger.info("User %s %s", user.id, "blocked" if user.is_blocked else "unblocked")
        return user

    @staticmethod
    def update_role(db: Session, user_id: int, role: str) -> User:
        return UserService.set_role(db, UserService.get_user(db, user_id), role)

    @staticmethod
    def delete_user(db: Session, user_id: int) -> None:
        user = UserService.get_user(db, user_id)
        if user.role == "admin":
            raise ValidationError("Cannot delete admin users")
        # orders are never deleted and reference their owner
        if db.query(Order.id).filter(Order.user_id == user.id).first():
            raise ConflictError("Cannot delete a user with orders, block the account instead")
        db.query(AuthToken).filter(AuthToken.user_id == user.id).delete(synchronize_session=False)
        db.delete(user)
        db.commit()
        logger.info("Deleted user %s", user_id)

    @staticmethod
    def credit_wallet(db: Session, user_id: int, amount: Decimal, description: str, order_id: Optional[int] = None) -> None:
        """Atomic balance increment plus ledger entry. Caller commits."""
        updated = (
            db.query(User)
            .filter(User.id == user_id)
            .update({User.wallet_balance: User.wallet_balance + amount}, synchronize_session=False)
        )
        if not updated:
            raise NotFoundError("User")
        db.add(WalletTransaction(
            user_id=user_id,
            type="credit",
            amount=amount,
            description=description,
            order_id=order_id,
            timestamp=utcnow(),
        ))
        logger.info("Credited %s to wallet of user %s", amount, user_id)
