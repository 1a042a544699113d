import logging
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, declarative_base
from lendbook.configs import DB_URI, DB_TIMEOUT, DEBUG

logger = logging.getLogger(__name__)

Base = declarative_base()


# Execution option marking a connection whose transaction only reads
READ_ONLY = "lendbook_read_only"


def _sqlite_begin_immediate(engine):
    """Makes every SQLite write transaction take the write lock up front so
    two writers can never both read before either of them writes. Read only
    connections get a plain deferred BEGIN and never wait on writers.
    """
    @event.listens_for(engine, "connect")
    def _connect(dbapi_connection, connection_record):
        # Let SQLAlchemy emit BEGIN itself instead of pysqlite
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _begin(conn):
        if conn.get_execution_options().get(READ_ONLY):
            conn.exec_driver_sql("BEGIN")
        else:
            conn.exec_driver_sql("BEGIN IMMEDIATE")


def make_engine(uri=DB_URI, timeout=DB_TIMEOUT, echo=DEBUG):
    engine_kwargs = {'echo': echo}
    if uri.startswith('sqlite'):
        engine_kwargs['connect_args'] = {
            'timeout': timeout,
            'check_same_thread': False,
        }
    else:
        ms = int(timeout * 1000)
        engine_kwargs['client_encoding'] = 'utf8'
        engine_kwargs['connect_args'] = {
            'options': f"-c lock_timeout={ms} -c statement_timeout={ms}"
        }
    engine = create_engine(uri, **engine_kwargs)
    if engine.dialect.name == 'sqlite':
        _sqlite_begin_immediate(engine)
    return engine


def make_sessionmaker(engine):
    return sessionmaker(
        bind=engine, autoflush=False, expire_on_commit=False)


def init(engine):
    # Models must be imported so their tables are registered on Base
    from lendbook.core import models  # noqa: F401
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables ready on %s", engine.url.render_as_string())
