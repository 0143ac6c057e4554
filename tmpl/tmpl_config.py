import os
import sys
from dataclasses import dataclass


LOOP_EXECUTION_LIMIT = 10_000
STRING_LENGTH_LIMIT = 100_000
CHUNK_COUNT_LIMIT = 10_000


def _dbg(*parts):
    if os.environ.get("TMPL_DEBUG"):
        try:
            print("[DBG]", *parts, file=sys.stderr)
        except Exception:
            pass


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        _dbg("config", name, "ignored malformed value", repr(raw))
        return default
    if value < 0:
        _dbg("config", name, "ignored negative value", value)
        return default
    return value


@dataclass(frozen=True)
class Limits:
    """
    Ceilings that stop a template author from triggering unbounded work.

    - loop_iterations: bounds until/untilStep/seq, repeat's count and chunk's chunk count
    - string_length: bounds the length of repeat's output
    - chunk_count: bounds the number of sub-lists chunk may build
    """
    loop_iterations: int = LOOP_EXECUTION_LIMIT
    string_length: int = STRING_LENGTH_LIMIT
    chunk_count: int = CHUNK_COUNT_LIMIT

    @classmethod
    def from_env(cls) -> "Limits":
        # Overrides are configurable via env, e.g. TMPL_MAX_LOOP_ITERS=500
        return cls(
            loop_iterations=_env_int("TMPL_MAX_LOOP_ITERS", LOOP_EXECUTION_LIMIT),
            string_length=_env_int("TMPL_MAX_STRING_LENGTH", STRING_LENGTH_LIMIT),
            chunk_count=_env_int("TMPL_MAX_CHUNKS", CHUNK_COUNT_LIMIT),
        )


DEFAULT_LIMITS = Limits()
