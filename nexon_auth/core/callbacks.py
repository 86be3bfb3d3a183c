"""
Application-supplied callbacks and the contracts they are normalized to.

- VerifyCallback: which of the four supported call shapes the app's verify
  function uses, fixed at construction time.
- resolve_skip_profile: turns the skip-profile option into a single
  `async (access_token) -> bool` predicate.
"""

import inspect
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from nexon_auth.core.domain import NexonProfile, TokenBundle
from nexon_auth.core.exceptions import ConfigurationError


logger = logging.getLogger(__name__)

Done = Callable[..., None]
SkipPredicate = Callable[[str], Awaitable[bool]]

_POSITIONAL = (
    inspect.Parameter.POSITIONAL_ONLY,
    inspect.Parameter.POSITIONAL_OR_KEYWORD,
)


async def maybe_await(value: Any) -> Any:
    """Await `value` if it is awaitable, otherwise return it unchanged."""
    if inspect.isawaitable(value):
        return await value
    return value


def positional_arity(func: Callable[..., Any]) -> int:
    """
    Count the positional parameters `func` requires.

    Parameters with a default value are not counted.

    Raises:
        ConfigurationError: If the signature cannot be inspected or takes *args
    """
    try:
        signature = inspect.signature(func)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Cannot inspect callback {func!r}: {e}") from e

    params = signature.parameters.values()
    if any(p.kind == inspect.Parameter.VAR_POSITIONAL for p in params):
        raise ConfigurationError(
            f"Callback {func!r} takes *args; declare its parameters explicitly "
            "or wrap it in VerifyCallback"
        )
    return sum(
        1 for p in params if p.kind in _POSITIONAL and p.default is inspect.Parameter.empty
    )


@dataclass(frozen=True)
class VerifyCallback:
    """
    An application verify function together with its calling convention.

    Shapes, by (pass_request, include_params):
        (True, True):   func(request, access_token, refresh_token, params, profile, done)
        (True, False):  func(request, access_token, refresh_token, profile, done)
        (False, True):  func(access_token, refresh_token, params, profile, done)
        (False, False): func(access_token, refresh_token, profile, done)

    `func` may be a plain function or a coroutine function. It reports its
    decision through `done(error=None, user=None, info=None)`.
    """

    func: Callable[..., Any]
    include_params: bool = False
    pass_request: bool = False

    @property
    def arity(self) -> int:
        return 4 + int(self.include_params) + int(self.pass_request)

    @classmethod
    def infer(cls, func: Callable[..., Any], pass_request: bool = False) -> "VerifyCallback":
        """
        Pick the calling convention from the number of declared parameters.

        Raises:
            ConfigurationError: If the count matches no supported shape for
                the given request-forwarding mode
        """
        arity = positional_arity(func)
        base = 5 if pass_request else 4
        if arity not in (base, base + 1):
            raise ConfigurationError(
                f"Verify callback must take {base} or {base + 1} positional "
                f"arguments when pass_req_to_callback is {pass_request}, got {arity}"
            )
        return cls(func=func, include_params=arity == base + 1, pass_request=pass_request)

    @classmethod
    def coerce(cls, verify: Any, pass_request: bool = False) -> "VerifyCallback":
        """Accept an explicit VerifyCallback or infer one from a plain callable."""
        if isinstance(verify, cls):
            if verify.pass_request != pass_request:
                raise ConfigurationError(
                    "VerifyCallback.pass_request does not match pass_req_to_callback"
                )
            return verify
        if not callable(verify):
            raise ConfigurationError("Strategy requires a verify callback")
        return cls.infer(verify, pass_request=pass_request)

    async def invoke(
        self,
        request: Any,
        tokens: TokenBundle,
        profile: NexonProfile | None,
        done: Done,
    ) -> None:
        args: list[Any] = []
        if self.pass_request:
            args.append(request)
        args.extend([tokens.access_token, tokens.refresh_token])
        if self.include_params:
            args.append(tokens.params)
        args.extend([profile, done])

        await maybe_await(self.func(*args))


def resolve_skip_profile(option: Any) -> SkipPredicate:
    """
    Normalize the skip_user_profile option to an async predicate.

    Accepts None/bool, a zero-argument callable, or a callable taking the
    access token. Callables may be sync or async.
    """
    if option is None or isinstance(option, bool):
        fixed = bool(option)

        async def constant(access_token: str) -> bool:
            return fixed

        return constant

    if not callable(option):
        raise ConfigurationError(
            f"skip_user_profile must be a bool or a callable, got {type(option).__name__}"
        )

    arity = positional_arity(option)
    if arity > 1:
        raise ConfigurationError(
            f"skip_user_profile callable must take 0 or 1 arguments, got {arity}"
        )

    async def predicate(access_token: str) -> bool:
        result = option(access_token) if arity == 1 else option()
        return bool(await maybe_await(result))

    return predicate
