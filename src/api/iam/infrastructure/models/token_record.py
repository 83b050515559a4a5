"""SQLAlchemy ORM model for the token_records table.

Backs the replay and revocation store. Token records are keyed by the
credential's token id and are not tenant-isolated: they are consulted
before any AuthContext exists.
"""

from sqlalchemy import BigInteger, Boolean, String, false
from sqlalchemy.orm import Mapped, mapped_column

from infrastructure.database.models import Base


class TokenRecordModel(Base):
    """ORM model for token_records table.

    expires_at is stored as epoch seconds; rows past it are ignored by
    lookups and removed by purging.
    """

    __tablename__ = "token_records"

    token_id: Mapped[str] = mapped_column(String(255), primary_key=True)
    expires_at: Mapped[int] = mapped_column(BigInteger, nullable=False, index=True)
    revoked: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false()
    )
    consumed: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false()
    )

    def __repr__(self) -> str:
        """Return string representation."""
        return (
            f"<TokenRecordModel(token_id={self.token_id}, revoked={self.revoked}, "
            f"consumed={self.consumed})>"
        )
