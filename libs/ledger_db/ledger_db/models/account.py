from sqlalchemy import BigInteger, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from ledger_db.db import Base


class Account(Base):
    """A user's credited balance, in minor currency units."""

    __tablename__ = "accounts"
    __mapper_args__ = {"eager_defaults": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    balance_minor: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0, server_default="0")
