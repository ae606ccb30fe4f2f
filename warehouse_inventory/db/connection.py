# warehouse_inventory/db/connection.py
import logging

from sqlalchemy import create_engine, event
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from warehouse_inventory.config import config
from warehouse_inventory.exceptions import PersistenceError
from warehouse_inventory.models import Base

logger = logging.getLogger(__name__)

def _set_sqlite_pragma(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()

def create_session_factory(engine):
    """Build the session factory used by the SQL store.

    Sessions keep loaded attributes after commit so returned entities stay
    readable once their session is closed.
    """
    if engine.dialect.name == 'sqlite':
        event.listen(engine, 'connect', _set_sqlite_pragma)
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)

class Database:
    """Database connection manager for the Warehouse Inventory system."""

    _instance = None

    def __new__(cls):
        """Singleton pattern implementation."""
        if cls._instance is None:
            cls._instance = super(Database, cls).__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        """Initialize the database holder if not already initialized."""
        if self._initialized:
            return

        self._engine = None
        self._session_factory = None
        self._initialized = True

    def initialize(self, connection_string=None, **engine_kwargs):
        """Initialize database connection.

        Args:
            connection_string: Optional database URL.
                              If not provided, will use configuration.
            engine_kwargs: Extra keyword arguments for create_engine
        """
        db_config = config.database_config
        if connection_string is None:
            connection_string = db_config['url']

        options = {'echo': db_config['echo']}

        try:
            url = make_url(connection_string)
            if url.get_backend_name() != 'sqlite':
                options.update(
                    pool_size=db_config['pool_size'],
                    max_overflow=db_config['max_overflow'],
                    pool_timeout=db_config['pool_timeout'],
                    pool_recycle=db_config['pool_recycle']
                )
            options.update(engine_kwargs)

            self._engine = create_engine(url, **options)
        except (SQLAlchemyError, ValueError) as e:
            raise PersistenceError(f"Failed to initialize database connection: {str(e)}")

        self._session_factory = create_session_factory(self._engine)
        logger.info(f"Database initialized: {url.render_as_string(hide_password=True)}")

    def create_all_tables(self):
        """Create all tables defined in the models."""
        Base.metadata.create_all(self.engine)

    def drop_all_tables(self):
        """Drop all tables from the database."""
        Base.metadata.drop_all(self.engine)

    def dispose(self):
        """Release pooled connections and forget the engine."""
        if self._engine is not None:
            self._engine.dispose()
        self._engine = None
        self._session_factory = None

    @property
    def engine(self):
        """Get the database engine."""
        if self._engine is None:
            self.initialize()
        return self._engine

    @property
    def session_factory(self):
        """Get the session factory."""
        if self._session_factory is None:
            self.initialize()
        return self._session_factory

# Global database instance
db = Database()
