from typing import Optional

from sqlalchemy import create_engine, event
from sqlalchemy.orm import declarative_base, sessionmaker
from pydantic_settings import BaseSettings
from functools import lru_cache, wraps
import logging

from core.exceptions import ImInException

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    database_url: str = "sqlite:///./imin.db"
    base_url: Optional[str] = None
    discover_window_hours: int = 2
    seed_backup_path: Optional[str] = None
    log_level: str = "INFO"

    class Config:
        env_file = ".env"


@lru_cache()
def get_settings():
    return Settings()


settings = get_settings()


def create_db_engine(database_url: str, **kwargs):
    """
    建立 SQLAlchemy engine

    SQLite needs connect_args={"check_same_thread": False} so FastAPI's
    threadpool can share the connection, and foreign keys must be switched
    on per connection for the joins -> games cascade to work.

    SQLite 會忽略 SELECT ... FOR UPDATE，而 pysqlite 要到第一個 INSERT 才送出 BEGIN，
    所以「讀人數 → 比對 capacity → 寫入」不會被序列化。
    這裡關掉 pysqlite 自己的 transaction 處理，改成每個 transaction 一開始就
    BEGIN IMMEDIATE（立即取得寫入鎖），其他連線會等到 commit / rollback。
    """
    is_sqlite = database_url.startswith("sqlite")
    engine = create_engine(
        database_url,
        connect_args={"check_same_thread": False} if is_sqlite else {},
        pool_pre_ping=True,
        **kwargs
    )

    if is_sqlite:
        @event.listens_for(engine, "connect")
        def _configure_connection(dbapi_connection, connection_record):
            # 由下面的 begin listener 自己送 BEGIN
            dbapi_connection.isolation_level = None
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        @event.listens_for(engine, "begin")
        def _begin_immediate(conn):
            conn.exec_driver_sql("BEGIN IMMEDIATE")

    return engine


engine = create_db_engine(settings.database_url)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def get_db():
    """
    FastAPI dependency：提供 Database Session

    使用 yield 確保 session 在請求結束後會被關閉
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def transactional(func):
    """
    Transaction decorator：確保資料庫操作的原子性

    使用方式：
        @transactional
        def join_game(store: RosterStore, ...):
            # 所有 DB 操作都在一個 transaction 內
            store.insert_join(...)
            # 不需要手動 commit，decorator 會處理

    如果函式內發生異常：
        - 自動 rollback
        - 異常會被重新拋出（讓上層處理）

    注意：
        - 第一個參數必須是 store（或 db Session），需提供 commit() / rollback()
        - 不要在函式內手動 commit（decorator 會處理）
    """
    @wraps(func)
    def wrapper(*args, **kwargs):
        # 找出 store（可能在 args 或 kwargs）
        store = None
        if args and hasattr(args[0], "commit") and hasattr(args[0], "rollback"):
            store = args[0]
        elif 'store' in kwargs:
            store = kwargs['store']

        if store is None:
            raise ValueError(
                f"@transactional requires a store as first argument, "
                f"but got args={args}, kwargs={kwargs}"
            )

        try:
            result = func(*args, **kwargs)
            store.commit()
            return result
        except ImInException as e:
            logger.warning(f"Transaction rejected in {func.__name__}: {e}")
            store.rollback()
            raise
        except Exception as e:
            logger.error(f"Transaction failed in {func.__name__}: {e}", exc_info=True)
            store.rollback()
            raise

    return wrapper
