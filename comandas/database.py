"""Database configuration and initialization."""
import uuid

from sqlalchemy import create_engine, event
from sqlalchemy.orm import scoped_session, sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool

# Create SQLAlchemy base
Base = declarative_base()

# Global session and engine
engine = None
db_session = None


def _on_sqlite_connect(dbapi_conn, _conn_record):
    """SQLite ignores foreign keys (and ON DELETE actions) unless asked."""
    cur = dbapi_conn.cursor()
    cur.execute("PRAGMA foreign_keys = ON;")
    cur.close()


def _make_engine(database_uri, echo=False):
    if database_uri.startswith('sqlite'):
        options = {'connect_args': {'check_same_thread': False}}
        if database_uri in ('sqlite://', 'sqlite:///:memory:'):
            # One shared connection, otherwise every checkout sees an empty database
            options['poolclass'] = StaticPool
        sqlite_engine = create_engine(database_uri, echo=echo, **options)
        event.listen(sqlite_engine, 'connect', _on_sqlite_connect)
        return sqlite_engine

    return create_engine(
        database_uri,
        echo=echo,
        pool_pre_ping=True,  # Enable connection health checks
        pool_size=10,
        max_overflow=20
    )


def init_db(app):
    """Initialize database connection."""
    global engine, db_session

    engine = _make_engine(
        app.config['SQLALCHEMY_DATABASE_URI'],
        echo=app.config.get('SQLALCHEMY_ECHO', False)
    )

    db_session = scoped_session(
        sessionmaker(autocommit=False, autoflush=False, bind=engine)
    )

    Base.query = db_session.query_property()

    # Register teardown
    @app.teardown_appcontext
    def shutdown_session(exception=None):
        """Close database session and rollback on error."""
        if exception:
            db_session.rollback()
        db_session.remove()


def create_tables():
    """Create every table registered on Base."""
    from comandas import models  # noqa: F401 - registers tables
    Base.metadata.create_all(engine)


def drop_tables():
    """Drop every table registered on Base."""
    from comandas import models  # noqa: F401
    Base.metadata.drop_all(engine)


def get_session():
    """Get database session."""
    return db_session


def new_uuid():
    """Primary key generator shared by all tables."""
    return str(uuid.uuid4())
