"""
Storage shim over the two supported SQL backends.

Callers always write ``?`` placeholders; each backend variant translates them
to its driver's parameter style. Both variants run on a SQLAlchemy engine and
execute statements at the driver level, so rows come back exactly as the
driver returns them.
"""
import logging
import re
from collections import namedtuple
from datetime import date, datetime, time

from sqlalchemy import create_engine
from sqlalchemy.engine import make_url

logger = logging.getLogger(__name__)

RunResult = namedtuple('RunResult', ['insert_id', 'changes'])

# Matches either a single-quoted SQL literal or a bare placeholder.
PLACEHOLDER_REGEX = re.compile(r"'(?:[^']|'')*'|\?")


class Database:
    """Connection lifecycle plus ``query`` and ``run``."""

    backend = None

    def __init__(self, url, **engine_options):
        self.url = url
        self.engine_options = engine_options
        self.engine = None

    def connect(self):
        if self.engine is not None:
            return self
        self.engine = create_engine(self.url, **self.engine_options)
        with self.engine.connect() as connection:
            connection.exec_driver_sql('SELECT 1')
        logger.info(f"Connected to {self.backend} database")
        return self

    def _require_engine(self):
        if self.engine is None:
            raise RuntimeError('Database not connected')
        return self.engine

    def translate(self, sql, params):
        return sql, tuple(params)

    def _row(self, mapping):
        return dict(mapping)

    def query(self, sql, params=()):
        """Run a read statement and return the rows as dicts."""
        engine = self._require_engine()
        statement, bound = self.translate(sql, params or ())
        with engine.connect() as connection:
            result = connection.exec_driver_sql(statement, bound)
            return [self._row(row) for row in result.mappings()]

    def run(self, sql, params=()):
        """Run a write statement in its own transaction."""
        engine = self._require_engine()
        statement, bound = self.translate(sql, params or ())
        with engine.begin() as connection:
            result = connection.exec_driver_sql(statement, bound)
            changes = result.rowcount
            return RunResult(insert_id=self._insert_id(result), changes=changes)

    def _insert_id(self, result):
        return None

    def close(self):
        if self.engine is not None:
            self.engine.dispose()
            self.engine = None
            logger.info(f"Closed {self.backend} database connection")


class SQLiteDatabase(Database):
    backend = 'sqlite'

    def _insert_id(self, result):
        return result.lastrowid


class PostgresDatabase(Database):
    backend = 'postgresql'

    def translate(self, sql, params):
        params = tuple(params)
        # psycopg2 applies %-formatting even to an empty parameter tuple
        sql = sql.replace('%', '%%')

        def substitute(match):
            return '%s' if match.group(0) == '?' else match.group(0)

        sql = PLACEHOLDER_REGEX.sub(substitute, sql)
        stripped = sql.strip().rstrip(';')
        if stripped.upper().startswith('INSERT') and 'RETURNING' not in stripped.upper():
            sql = f"{stripped} RETURNING id"
        return sql, params

    def _row(self, mapping):
        row = {}
        for key, value in mapping.items():
            if isinstance(value, (datetime, date, time)):
                value = value.isoformat()
            row[key] = value
        return row

    def _insert_id(self, result):
        if not result.returns_rows:
            return None
        row = result.first()
        return row[0] if row else None


def create_database(url, production=False, **engine_options):
    """Pick the backend variant from the configured database URL."""
    if url.startswith('postgres://'):
        url = 'postgresql://' + url[len('postgres://'):]
    backend = make_url(url).get_backend_name()
    if backend == 'sqlite':
        return SQLiteDatabase(url, **engine_options)
    if backend == 'postgresql':
        connect_args = {'connect_timeout': 2}
        if production:
            connect_args['sslmode'] = 'require'
        options = {
            'pool_size': 20,
            'pool_recycle': 30,
            'pool_pre_ping': True,
            'connect_args': connect_args,
        }
        options.update(engine_options)
        return PostgresDatabase(url, **options)
    raise ValueError(f"Unsupported database backend: {backend}")
