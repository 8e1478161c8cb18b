import uuid

from sqlalchemy import BigInteger, Boolean, Column, DateTime, Index, String, Text, Uuid
from sqlalchemy.sql import expression, func

from shortlinks.database.connection import Base


class ShortLink(Base):
    """
    A token mapped to its redirect target.

    is_active is a soft-delete flag: inactive rows stay in the table but are
    treated as not found.
    """
    __tablename__ = "short_links"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    # Case-sensitive lookup key
    token = Column(String(255), unique=True, nullable=False)
    long_url = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
    click_count = Column(BigInteger, nullable=False, default=0, server_default="0")
    is_active = Column(Boolean, nullable=False, default=True, server_default=expression.true())

    __table_args__ = (
        Index("idx_short_links_token", "token"),
        Index("idx_short_links_active", "is_active"),
        Index("idx_short_links_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<ShortLink {self.token!r} -> {self.long_url!r}>"
