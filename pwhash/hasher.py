"""Password hashing pipeline.

A request is classified into a plan of stages (generate password, generate
salt, decode salt, derive), and the plan runs in order as one coroutine. The
first failing stage ends the run; its exception is what the caller sees.
"""

from __future__ import annotations

import asyncio
import enum
import logging
from dataclasses import dataclass, replace
from typing import Any, Callable, Iterator, Mapping, Optional, Union

from .kdf import (
    HasherConfig,
    decode_salt,
    derive_key,
    encode_b64,
    new_password,
    new_salt,
)


logger = logging.getLogger(__name__)

HashCallback = Callable[[Optional[BaseException], Optional[str], Optional[str], Optional[str]], None]


@dataclass(frozen=True)
class HashRequest:
    """Inputs of one hash call. ``None`` (or any non-string) means "generate it"."""

    password: Any = None
    salt: Any = None

    @classmethod
    def coerce(cls, request: Union["HashRequest", Mapping[str, Any], None]) -> "HashRequest":
        if request is None:
            return cls()
        if isinstance(request, cls):
            return request
        return cls(password=request.get("password"), salt=request.get("salt"))


@dataclass(frozen=True)
class HashResult:
    password: str
    salt: str
    hash: str

    def __iter__(self) -> Iterator[str]:
        return iter((self.password, self.salt, self.hash))


@dataclass(frozen=True)
class _Draft:
    password: Optional[str]
    salt_text: Optional[str] = None
    salt: Optional[bytes] = None
    key: Optional[bytes] = None


class Stage(enum.Enum):
    GEN_PASSWORD = "gen_password"
    GEN_SALT = "gen_salt"
    DECODE_SALT = "decode_salt"
    DERIVE = "derive"


FULL_PLAN = (Stage.GEN_PASSWORD, Stage.GEN_SALT, Stage.DERIVE)
SALT_PLAN = (Stage.GEN_SALT, Stage.DERIVE)
DIRECT_PLAN = (Stage.DECODE_SALT, Stage.DERIVE)


def plan(request: HashRequest) -> tuple[Stage, ...]:
    if not isinstance(request.password, str):
        return FULL_PLAN
    if not isinstance(request.salt, str):
        return SALT_PLAN
    return DIRECT_PLAN


class PasswordHasher:
    def __init__(self, config: HasherConfig = HasherConfig()):
        self.config = config.validate()
        self._tasks: set[asyncio.Task] = set()
        self._stages = {
            Stage.GEN_PASSWORD: self._gen_password,
            Stage.GEN_SALT: self._gen_salt,
            Stage.DECODE_SALT: self._decode_salt,
            Stage.DERIVE: self._derive,
        }

    async def hash(
        self,
        request: Union[HashRequest, Mapping[str, Any], None] = None,
        *,
        password: Any = None,
        salt: Any = None,
    ) -> HashResult:
        """Resolve missing inputs and derive the hash.

        ``password`` and ``salt`` keywords are a shortcut for passing a
        :class:`HashRequest`. A supplied salt must be base64 text.
        Random-source, decoding and derivation errors propagate unchanged.
        """
        if request is None:
            request = HashRequest(password=password, salt=salt)
        request = HashRequest.coerce(request)

        stages = plan(request)
        logger.debug("hash plan: %s", ", ".join(s.value for s in stages))

        draft = _Draft(
            password=request.password if isinstance(request.password, str) else None,
            salt_text=request.salt if isinstance(request.salt, str) else None,
        )
        for stage in stages:
            logger.debug("running stage %s", stage.value)
            try:
                draft = await self._stages[stage](draft)
            except Exception as e:
                logger.debug("stage %s failed: %s", stage.value, type(e).__name__)
                raise

        return HashResult(
            password=draft.password,
            salt=encode_b64(draft.salt),
            hash=encode_b64(draft.key),
        )

    def __call__(
        self,
        request: Union[HashRequest, Mapping[str, Any], None],
        callback: HashCallback,
    ) -> None:
        """Callback flavour of :meth:`hash`.

        Must be called with a running event loop. Returns at once; ``callback``
        gets ``(error, password, salt, hash)`` exactly once on a later loop
        iteration, with the last three set to ``None`` when ``error`` is set.
        """
        loop = asyncio.get_running_loop()
        task = loop.create_task(self.hash(request))
        self._tasks.add(task)

        def _done(t: asyncio.Task) -> None:
            self._tasks.discard(t)
            if t.cancelled():
                callback(asyncio.CancelledError(), None, None, None)
                return
            err = t.exception()
            if err is not None:
                callback(err, None, None, None)
                return
            result = t.result()
            callback(None, result.password, result.salt, result.hash)

        task.add_done_callback(_done)

    async def _gen_password(self, draft: _Draft) -> _Draft:
        return replace(draft, password=await asyncio.to_thread(new_password))

    async def _gen_salt(self, draft: _Draft) -> _Draft:
        return replace(draft, salt=await asyncio.to_thread(new_salt, self.config))

    async def _decode_salt(self, draft: _Draft) -> _Draft:
        return replace(draft, salt=decode_salt(draft.salt_text))

    async def _derive(self, draft: _Draft) -> _Draft:
        key = await asyncio.to_thread(derive_key, draft.password, draft.salt, self.config)
        return replace(draft, key=key)


def build(
    config: Union[HasherConfig, Mapping[str, Any], None] = None,
    **options: Any,
) -> PasswordHasher:
    """Create a hasher; configuration errors are raised here, before any request."""
    if isinstance(config, HasherConfig):
        config = config.with_options(options)
    else:
        merged = dict(config or {})
        merged.update(options)
        config = HasherConfig.from_options(merged)
    return PasswordHasher(config)
