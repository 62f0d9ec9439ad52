"""Relational store implementation backed by SQLAlchemy"""

import logging
import threading

from sqlalchemy import (
    Boolean,
    Column,
    ForeignKey,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    create_engine,
    delete,
    event,
    func,
    insert,
    select,
    text,
)
from sqlalchemy import exc as sa_exc
from sqlalchemy.orm import sessionmaker

from blogapp import fields
from blogapp.exceptions import (
    ConfigurationError,
    ObjectNotFoundError,
    StoreError,
    StoreTimeoutError,
)
from blogapp.port.dao import BaseDAO
from blogapp.port.provider import BaseProvider

logger = logging.getLogger(__name__)

# Fragments of driver messages that indicate a lock wait or statement timeout
TIMEOUT_MARKERS = ("database is locked", "statement timeout", "lock timeout")


def translate_error(exc: sa_exc.SQLAlchemyError) -> StoreError:
    """Convert a SQLAlchemy exception into a `StoreError`"""
    message = str(exc)
    extra_info = {
        "original_exception": exc.__class__.__name__,
        "original_message": message,
    }
    if isinstance(exc, sa_exc.OperationalError) and any(
        marker in message.lower() for marker in TIMEOUT_MARKERS
    ):
        return StoreTimeoutError(message, extra_info=extra_info)
    return StoreError(message, extra_info=extra_info)


def build_column(field_obj) -> Column:
    """Map an entity field to a table column"""
    if isinstance(field_obj, fields.Auto):
        return Column(
            field_obj.field_name,
            Integer,
            primary_key=field_obj.identifier,
            autoincrement=True,
        )
    if isinstance(field_obj, fields.Reference):
        to_meta = field_obj.to_cls.meta_
        return Column(
            field_obj.field_name,
            Integer,
            ForeignKey(f"{to_meta.schema_name}.{to_meta.id_field.field_name}"),
            nullable=not field_obj.required,
            index=True,
        )
    if isinstance(field_obj, fields.Text):
        return Column(field_obj.field_name, Text, nullable=not field_obj.required)
    if isinstance(field_obj, fields.String):
        return Column(
            field_obj.field_name,
            String(field_obj.max_length),
            nullable=not field_obj.required,
        )
    if isinstance(field_obj, fields.Boolean):
        return Column(
            field_obj.field_name,
            Boolean,
            nullable=not field_obj.required,
            default=field_obj.default,
        )

    raise ConfigurationError(
        f"Field `{field_obj.field_name}` of type {type(field_obj).__name__} "
        f"cannot be mapped to a column"
    )


class SASession:
    """A transaction against the relational store, wrapping a SQLAlchemy session"""

    def __init__(self, provider, timeout=None):
        self._provider = provider
        self._session = provider._session_factory()
        self.is_active = True

        if timeout is not None and provider.engine.dialect.name == "postgresql":
            # Applies to every statement of this transaction, and ends with it
            self.execute(text(f"SET LOCAL statement_timeout = {int(timeout * 1000)}"))

    def execute(self, statement):
        try:
            return self._session.execute(statement)
        except sa_exc.SQLAlchemyError as exc:
            raise translate_error(exc) from exc

    def commit(self):
        try:
            self._session.commit()
        except sa_exc.SQLAlchemyError as exc:
            raise translate_error(exc) from exc

    def rollback(self):
        self._session.rollback()

    def close(self):
        self.is_active = False
        self._session.close()


class SAConnection(SASession):
    """A short-lived session for reading committed data outside a Unit of Work"""

    def __init__(self, provider):
        super().__init__(provider)

    def execute(self, statement):
        try:
            # Rows are buffered so that they remain readable after the session closes
            return super().execute(statement).freeze()()
        finally:
            self.close()


class SAProvider(BaseProvider):
    """Provider for relational databases reachable through SQLAlchemy"""

    def __init__(self, name, domain, conn_info: dict):
        super().__init__(name, domain, conn_info)

        if not conn_info.get("database_uri"):
            raise ConfigurationError(
                f"`database_uri` is required for database `{name}`"
            )

        self.engine = create_engine(
            conn_info["database_uri"], **self._get_engine_options()
        )
        self._session_factory = sessionmaker(bind=self.engine)

        self._metadata = MetaData()
        self._tables = {}
        self._tables_lock = threading.RLock()

    def _get_engine_options(self):
        return {}

    def table_for(self, entity_cls) -> Table:
        """Return the table of an entity, constructing it on first use"""
        schema_name = entity_cls.meta_.schema_name

        with self._tables_lock:
            if schema_name not in self._tables:
                # Referenced tables must be part of the metadata for foreign keys to resolve
                for field_obj in entity_cls.meta_.reference_fields.values():
                    self.table_for(field_obj.to_cls)

                self._tables[schema_name] = Table(
                    schema_name,
                    self._metadata,
                    *[
                        build_column(field_obj)
                        for field_obj in entity_cls.meta_.declared_fields.values()
                    ],
                )

            return self._tables[schema_name]

    def get_session(self, timeout=None):
        return SASession(self, timeout=timeout)

    def get_connection(self):
        return SAConnection(self)

    def is_alive(self) -> bool:
        """Check if the connection is alive"""
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except sa_exc.DBAPIError as exc:
            logger.error(f"Database `{self.name}` is not reachable: {exc}")
            return False

    def get_dao(self, entity_cls):
        return SADAO(self.domain, self, entity_cls)

    def _registered_tables(self):
        for entity_cls in self.domain.registry:
            if entity_cls.meta_.provider == self.name:
                self.table_for(entity_cls)

    def _create_database_artifacts(self):
        self._registered_tables()
        self._metadata.create_all(self.engine)

    def _drop_database_artifacts(self):
        self._registered_tables()
        self._metadata.drop_all(self.engine)

    def _data_reset(self):
        """Delete all rows, children before parents"""
        self._registered_tables()
        with self.engine.begin() as conn:
            for table in reversed(self._metadata.sorted_tables):
                conn.execute(table.delete())


class SqliteProvider(SAProvider):
    __database__ = "sqlite"

    def _get_engine_options(self):
        # Seconds a connection waits on a locked database before giving up
        return {"connect_args": {"timeout": self.conn_info.get("busy_timeout", 5)}}

    def __init__(self, name, domain, conn_info: dict):
        super().__init__(name, domain, conn_info)

        @event.listens_for(self.engine, "connect")
        def _enable_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()


class PostgresqlProvider(SAProvider):
    __database__ = "postgresql"

    def _get_engine_options(self):
        return {"pool_pre_ping": True}


class SADAO(BaseDAO):
    """DAO implementation for relational databases"""

    @property
    def table(self) -> Table:
        return self.provider.table_for(self.entity_cls)

    def _where(self, statement, criteria):
        for key, value in (criteria or {}).items():
            statement = statement.where(self.table.c[key] == value)
        return statement

    def _filter(self, criteria, order_by=()):
        statement = self._where(select(self.table), criteria)

        ordering = []
        for o_key in order_by or (self.entity_cls.meta_.id_field.field_name,):
            if o_key.startswith("-"):
                ordering.append(self.table.c[o_key[1:]].desc())
            else:
                ordering.append(self.table.c[o_key])

        result = self._get_session().execute(statement.order_by(*ordering))
        return [dict(row._mapping) for row in result]

    def _count(self, criteria):
        statement = self._where(
            select(func.count()).select_from(self.table), criteria
        )
        return self._get_session().execute(statement).scalar_one()

    def _create(self, record):
        id_field_name = self.entity_cls.meta_.id_field.field_name
        values = {
            key: value for key, value in record.items() if key != id_field_name
        }

        result = self._get_session().execute(insert(self.table).values(**values))

        record = dict(record)
        record[id_field_name] = result.inserted_primary_key[0]
        return record

    def _delete(self, identifier):
        id_column = self.table.c[self.entity_cls.meta_.id_field.field_name]
        result = self._get_session().execute(
            delete(self.table).where(id_column == identifier)
        )

        if result.rowcount == 0:
            raise ObjectNotFoundError(
                f"`{self.entity_cls.__name__}` object with identifier {identifier} "
                f"does not exist."
            )
