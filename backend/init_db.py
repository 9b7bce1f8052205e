"""Create the account store tables and bootstrap a platform admin account."""

from sqlalchemy.orm import Session

from models.config import settings
from repositories.database import Base, SessionLocal, engine
from repositories.db_models import Account, PasswordRecord


def ensure_admin_account(db: Session) -> bool:
    """
    Create or promote the configured admin account.

    Returns:
        True if the database was changed
    """
    if not settings.ADMIN_ACCOUNT_ID:
        return False

    admin = db.get(Account, settings.ADMIN_ACCOUNT_ID)
    if admin is None:
        admin = Account(
            id=settings.ADMIN_ACCOUNT_ID,
            full_name="Administrator",
            is_platform_admin=True,
            password=settings.ADMIN_PASSWORD or None,
        )
        db.add(admin)
        if settings.ADMIN_PASSWORD:
            db.add(
                PasswordRecord(
                    account_id=admin.id,
                    has_custom_password=True,
                    custom_password=settings.ADMIN_PASSWORD,
                )
            )
        db.commit()
        return True

    if not admin.is_platform_admin:
        admin.is_platform_admin = True
        db.commit()
        return True
    return False


def init_db():
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()

    try:
        if ensure_admin_account(db):
            print("[OK] Admin account ready")
            print(f"  Account: {settings.ADMIN_ACCOUNT_ID}")
            print("  Password: (from ADMIN_PASSWORD in .env)")

        print("\n[OK] Database initialization complete!")

    except Exception as e:
        print(f"Error initializing database: {e}")
        db.rollback()
    finally:
        db.close()


if __name__ == "__main__":
    init_db()
