"""Startup provisioning of the storage-side ``normalize_text`` function.

Search predicates call ``normalize_text(column)`` inside SQL so filtering
happens in the database. At startup we try, in order:

1. the native tier: accent folding backed by the database itself
   (``unaccent`` on PostgreSQL, the in-process Unicode normalizer registered
   as a SQL function on SQLite);
2. the fallback tier: an explicit substitution table (``ACCENT_TABLE``) plus
   lowercasing and trimming;
3. giving up: the mode becomes ``unavailable`` and searches degrade to
   case-only matching.

Provisioning never raises; every failure is logged and downgrades the mode.
"""

from __future__ import annotations

import enum
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from sqlalchemy import event, text
from sqlalchemy.engine import Engine

from app.logging import get_logger
from app.services.text_normalization import ACCENT_TABLE, fold_accents, normalize

logger = get_logger(__name__)

STORAGE_FUNCTION_NAME = "normalize_text"

_PROBE = "  ÁéÍóÚ Ñü  "

# Representative accented inputs; every character here is covered by ACCENT_TABLE
# so both tiers must reproduce ``normalize`` exactly.
ACCENT_SAMPLES: tuple[str, ...] = (
    "José",
    "JOSÉ",
    "jose",
    "Ángel García",
    "María Pérez",
    "Núñez",
    "ÑANDÚ",
    "Pingüino",
    "  Íñigo  ",
    "Ramón Güell",
    "àâä èêë ìîï òôö ùûü",
    "ÀÂÄ ÈÊË ÌÎÏ ÒÔÖ ÙÛÜ",
    "Çedilla",
    "plain ascii",
    "",
)


class NormalizationMode(enum.Enum):
    native = "native"
    fallback = "fallback"
    unavailable = "unavailable"


@dataclass(frozen=True)
class AgreementMismatch:
    sample: str
    expected: str | None
    actual: str | None


def _translate_arguments() -> tuple[str, str]:
    source: list[str] = []
    target: list[str] = []
    for accented, plain in ACCENT_TABLE.items():
        source.append(accented)
        target.append(plain)
        upper = accented.upper()
        if upper != accented and len(upper) == 1:
            source.append(upper)
            target.append(plain)
    return "".join(source), "".join(target)


_PG_NATIVE_FUNCTION = f"""
CREATE OR REPLACE FUNCTION {STORAGE_FUNCTION_NAME}(input_text TEXT)
RETURNS TEXT AS $$
    SELECT trim(lower(unaccent(input_text)))
$$ LANGUAGE sql IMMUTABLE STRICT
"""


def _pg_fallback_function() -> str:
    source, target = _translate_arguments()
    return f"""
CREATE OR REPLACE FUNCTION {STORAGE_FUNCTION_NAME}(input_text TEXT)
RETURNS TEXT AS $$
    SELECT trim(lower(translate(input_text, '{source}', '{target}')))
$$ LANGUAGE sql IMMUTABLE STRICT
"""


class NormalizationProvider:
    """Installs ``normalize_text`` on one engine, tier by tier."""

    def __init__(self, engine: Engine):
        self.engine = engine
        self._sqlite_listener: Callable | None = None

    @property
    def dialect(self) -> str:
        return self.engine.dialect.name

    # -------------------------------------------------------------------------
    # Tiers
    # -------------------------------------------------------------------------

    def install_native(self) -> None:
        if self.dialect == "postgresql":
            with self.engine.begin() as conn:
                conn.execute(text("CREATE EXTENSION IF NOT EXISTS unaccent"))
                conn.execute(text(_PG_NATIVE_FUNCTION))
            return
        if self.dialect == "sqlite":
            self._register_sqlite_function(normalize)
            return
        raise NotImplementedError(f"No native normalization for dialect '{self.dialect}'.")

    def install_fallback(self) -> None:
        if self.dialect == "postgresql":
            with self.engine.begin() as conn:
                conn.execute(text(_pg_fallback_function()))
            return
        if self.dialect == "sqlite":
            self._register_sqlite_function(fold_accents)
            return
        raise NotImplementedError(f"No fallback normalization for dialect '{self.dialect}'.")

    def verify(self, reference: Callable[[str | None], str | None]) -> None:
        with self.engine.connect() as conn:
            result = conn.execute(text(f"SELECT {STORAGE_FUNCTION_NAME}(:value)"), {"value": _PROBE}).scalar()
        expected = reference(_PROBE)
        if result != expected:
            raise RuntimeError(f"{STORAGE_FUNCTION_NAME}({_PROBE!r}) returned {result!r}, expected {expected!r}.")

    def _register_sqlite_function(self, func: Callable[[str | None], str | None]) -> None:
        if self._sqlite_listener is not None:
            event.remove(self.engine, "connect", self._sqlite_listener)
            self._sqlite_listener = None

        def _on_connect(dbapi_connection, _connection_record):
            dbapi_connection.create_function(STORAGE_FUNCTION_NAME, 1, func, deterministic=True)

        event.listen(self.engine, "connect", _on_connect)
        self._sqlite_listener = _on_connect
        # Connections opened before provisioning do not see the connect event.
        with self.engine.connect() as conn:
            conn.connection.dbapi_connection.create_function(STORAGE_FUNCTION_NAME, 1, func, deterministic=True)

    # -------------------------------------------------------------------------
    # Negotiation
    # -------------------------------------------------------------------------

    def provision(self) -> NormalizationMode:
        try:
            self.install_native()
            self.verify(normalize)
        except Exception as exc:
            logger.warning(
                "Native %s unavailable on %s (%s); installing fallback.",
                STORAGE_FUNCTION_NAME,
                self.dialect,
                exc,
            )
        else:
            logger.info("Provisioned native %s on %s.", STORAGE_FUNCTION_NAME, self.dialect)
            return NormalizationMode.native

        try:
            self.install_fallback()
            self.verify(fold_accents)
        except Exception as exc:
            logger.warning(
                "Could not provision any %s on %s (%s); text search degrades to case-only matching.",
                STORAGE_FUNCTION_NAME,
                self.dialect,
                exc,
            )
            return NormalizationMode.unavailable

        logger.info("Provisioned fallback %s on %s.", STORAGE_FUNCTION_NAME, self.dialect)
        return NormalizationMode.fallback


def provision_normalization(engine: Engine) -> NormalizationMode:
    mode = NormalizationProvider(engine).provision()
    if mode is not NormalizationMode.unavailable:
        try:
            mismatches = check_agreement(engine)
        except Exception as exc:
            logger.warning("Skipped %s agreement check: %s", STORAGE_FUNCTION_NAME, exc)
            return mode
        if mismatches:
            logger.warning(
                "%s disagrees with the application normalizer for %d sample(s): %s",
                STORAGE_FUNCTION_NAME,
                len(mismatches),
                ", ".join(repr(m.sample) for m in mismatches),
            )
    return mode


def check_agreement(engine: Engine, samples: Iterable[str] = ACCENT_SAMPLES) -> list[AgreementMismatch]:
    """Compare the storage function with ``normalize`` for every sample."""
    mismatches: list[AgreementMismatch] = []
    statement = text(f"SELECT {STORAGE_FUNCTION_NAME}(:value)")
    with engine.connect() as conn:
        for sample in samples:
            actual = conn.execute(statement, {"value": sample}).scalar()
            expected = normalize(sample)
            if actual != expected:
                mismatches.append(AgreementMismatch(sample=sample, expected=expected, actual=actual))
    return mismatches
