from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, declarative_base

from config import DATABASE_URL, DB_ECHO


def _engine_kwargs(url: str) -> dict:
    if url.startswith("sqlite"):
        # Requests are served from worker threads
        return {"connect_args": {"check_same_thread": False}}
    return {"pool_pre_ping": True}


def serialize_sqlite_writers(target_engine):
    """
    SQLite ignores SELECT ... FOR UPDATE and pysqlite defers BEGIN until the
    first write, so two sessions could both run the conflict check before
    either inserts. Every transaction here opens with BEGIN IMMEDIATE and takes
    the database write lock up front; a second writer waits (or times out)
    until the first commits or rolls back.
    """
    @event.listens_for(target_engine, "connect")
    def _disable_pysqlite_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(target_engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    return target_engine


engine = create_engine(DATABASE_URL, echo=DB_ECHO, **_engine_kwargs(DATABASE_URL))
if engine.dialect.name == "sqlite":
    serialize_sqlite_writers(engine)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()

# Tables are created from main.py (lifespan) once every model is imported


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
