from sqlalchemy import Column, Integer, String, Text, BigInteger, Boolean, ForeignKey
from sqlalchemy.orm import relationship
from log_insights.database import Base

class Host(Base):
    """
    A tracked website. Entries are grouped under the hostname they were
    loaded for; instants are UTC epoch milliseconds.
    """
    __tablename__ = "hosts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    hostname = Column(String(255), unique=True, nullable=False)
    created_at = Column(BigInteger, nullable=False)
    updated_at = Column(BigInteger, nullable=False)

    entries = relationship("LogEntryRecord", back_populates="host")


class LogEntryRecord(Base):
    """
    One parsed access log line bound to its host.
    is_bot and date_only are derived once at insert time.
    """
    __tablename__ = "log_entries"

    id = Column(Integer, primary_key=True, autoincrement=True)
    host_id = Column(Integer, ForeignKey("hosts.id"), nullable=False, index=True)
    ip = Column(String(45), nullable=False, index=True)  # Supports IPv6
    timestamp = Column(BigInteger, nullable=False, index=True)  # UTC epoch ms
    method = Column(String(32), nullable=False)
    url = Column(Text, nullable=False, index=True)
    protocol = Column(String(32), nullable=False)
    status_code = Column(Integer, nullable=False, index=True)
    response_size = Column(BigInteger, nullable=False, default=0)  # Bytes
    referrer = Column(Text, nullable=False, default="", index=True)
    user_agent = Column(Text, nullable=False, index=True)
    forwarded_for = Column(Text, nullable=True)
    is_bot = Column(Boolean, nullable=False, default=False, index=True)
    date_only = Column(String(10), nullable=False, index=True)  # YYYY-MM-DD (UTC)

    host = relationship("Host", back_populates="entries")


class FileMetadata(Base):
    """Audit record of the last time a given file was loaded."""
    __tablename__ = "file_metadata"

    file_path = Column(String(1024), primary_key=True)
    hostname = Column(String(255), nullable=False)
    last_modified = Column(BigInteger, nullable=False)
    file_size = Column(BigInteger, nullable=False)
    processed_at = Column(BigInteger, nullable=False)
