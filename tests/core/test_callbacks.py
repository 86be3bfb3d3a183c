"""
Tests for verify-callback variants and the skip-profile predicate.
"""

import functools

import pytest

from nexon_auth.core.callbacks import VerifyCallback, positional_arity, resolve_skip_profile
from nexon_auth.core.domain import NexonProfile, TokenBundle
from nexon_auth.core.exceptions import ConfigurationError


TOKENS = TokenBundle(access_token="at", refresh_token="rt", params={"token": "at"})
PROFILE = NexonProfile(id="1", display_name="A", raw="{}", parsed={})


def verify4(access_token, refresh_token, profile, done):
    pass


def verify5(access_token, refresh_token, params, profile, done):
    pass


def verify6(req, access_token, refresh_token, params, profile, done):
    pass


class TestInfer:
    """Tests for choosing the call shape from the declared parameters."""

    def test_four_args_without_forwarding(self):
        callback = VerifyCallback.infer(verify4, pass_request=False)
        assert callback.include_params is False
        assert callback.arity == 4

    def test_five_args_without_forwarding(self):
        callback = VerifyCallback.infer(verify5, pass_request=False)
        assert callback.include_params is True
        assert callback.arity == 5

    def test_six_args_with_forwarding(self):
        callback = VerifyCallback.infer(verify6, pass_request=True)
        assert callback.include_params is True
        assert callback.pass_request is True
        assert callback.arity == 6

    def test_five_args_with_forwarding(self):
        callback = VerifyCallback.infer(verify5, pass_request=True)
        assert callback.include_params is False
        assert callback.arity == 5

    @pytest.mark.parametrize("func", [lambda a, b, c: None, lambda a, b, c, d, e, f, g: None])
    def test_arity_outside_supported_range(self, func):
        with pytest.raises(ConfigurationError):
            VerifyCallback.infer(func, pass_request=False)
        with pytest.raises(ConfigurationError):
            VerifyCallback.infer(func, pass_request=True)

    def test_six_args_without_forwarding_is_rejected(self):
        with pytest.raises(ConfigurationError, match="4 or 5"):
            VerifyCallback.infer(verify6, pass_request=False)

    def test_four_args_with_forwarding_is_rejected(self):
        with pytest.raises(ConfigurationError, match="5 or 6"):
            VerifyCallback.infer(verify4, pass_request=True)

    def test_var_positional_is_rejected(self):
        with pytest.raises(ConfigurationError, match=r"\*args"):
            VerifyCallback.infer(lambda *args: None)

    def test_bound_method_excludes_self(self):
        class App:
            def verify(self, access_token, refresh_token, profile, done):
                pass

        assert VerifyCallback.infer(App().verify).arity == 4

    def test_defaulted_parameters_are_not_counted(self):
        def verify(access_token, refresh_token, profile, done, extra=None):
            pass

        callback = VerifyCallback.infer(verify)
        assert callback.arity == 4
        assert callback.include_params is False

    def test_partial_counts_remaining_args(self):
        partial = functools.partial(verify6, "req")
        assert positional_arity(partial) == 5


class TestCoerce:
    """Tests for accepting explicit variants."""

    def test_explicit_variant_is_used_as_is(self):
        explicit = VerifyCallback(lambda *args: None, include_params=True)
        assert VerifyCallback.coerce(explicit) is explicit

    def test_explicit_variant_must_match_forwarding(self):
        explicit = VerifyCallback(verify4, pass_request=False)
        with pytest.raises(ConfigurationError):
            VerifyCallback.coerce(explicit, pass_request=True)

    def test_non_callable_is_rejected(self):
        with pytest.raises(ConfigurationError):
            VerifyCallback.coerce(None)


class TestInvoke:
    """Tests for the argument lists each shape receives."""

    @pytest.mark.asyncio
    async def test_four_arg_shape(self):
        seen = []
        callback = VerifyCallback(lambda *args: seen.append(args))

        await callback.invoke("req", TOKENS, PROFILE, "done")

        assert seen == [("at", "rt", PROFILE, "done")]

    @pytest.mark.asyncio
    async def test_six_arg_shape(self):
        seen = []
        callback = VerifyCallback(
            lambda *args: seen.append(args), include_params=True, pass_request=True
        )

        await callback.invoke("req", TOKENS, PROFILE, "done")

        assert seen == [("req", "at", "rt", {"token": "at"}, PROFILE, "done")]

    @pytest.mark.asyncio
    async def test_async_callback_is_awaited(self):
        seen = []

        async def verify(access_token, refresh_token, profile, done):
            seen.append(access_token)

        await VerifyCallback.infer(verify).invoke(None, TOKENS, None, "done")

        assert seen == ["at"]


class TestResolveSkipProfile:
    """Tests for normalizing skip_user_profile to one async predicate."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("option,expected", [(None, False), (False, False), (True, True)])
    async def test_fixed_values(self, option, expected):
        predicate = resolve_skip_profile(option)
        assert await predicate("token") is expected

    @pytest.mark.asyncio
    async def test_zero_argument_callable(self):
        predicate = resolve_skip_profile(lambda: True)
        assert await predicate("token") is True

    @pytest.mark.asyncio
    async def test_callable_receives_access_token(self):
        seen = []

        def skip(access_token):
            seen.append(access_token)
            return False

        assert await resolve_skip_profile(skip)("token-1") is False
        assert seen == ["token-1"]

    @pytest.mark.asyncio
    async def test_async_callable(self):
        async def skip(access_token):
            return access_token == "skip-me"

        predicate = resolve_skip_profile(skip)
        assert await predicate("skip-me") is True
        assert await predicate("other") is False

    def test_rejects_non_callable(self):
        with pytest.raises(ConfigurationError):
            resolve_skip_profile("yes")

    def test_rejects_two_argument_callable(self):
        with pytest.raises(ConfigurationError):
            resolve_skip_profile(lambda token, callback: None)
