from models.base_model import Base, BaseModel
from sqlalchemy import Boolean, Column, DateTime, String, false


class User(BaseModel, Base):
    __tablename__ = "users"

    username = Column(String(64), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    email = Column(String(255), nullable=True, unique=True, index=True)
    email_verified = Column(Boolean, nullable=False, default=False, server_default=false())

    # Outstanding single-use tokens; cleared on consumption
    email_verification_token = Column(String(64), nullable=True, unique=True, index=True)
    password_reset_token = Column(String(64), nullable=True, unique=True, index=True)
    password_reset_expires = Column(DateTime(timezone=True), nullable=True)

    # Linked Discogs account (OAuth 1.0a access credentials)
    discogs_access_token = Column(String(255), nullable=True)
    discogs_access_token_secret = Column(String(255), nullable=True)
    discogs_username = Column(String(255), nullable=True)

    @property
    def password(self):
        raise AttributeError("Password: Write-only field")

    @property
    def discogs_linked(self) -> bool:
        return bool(self.discogs_access_token and self.discogs_access_token_secret)

    def __repr__(self):
        return f"<User id={self.id} username={self.username}>"
