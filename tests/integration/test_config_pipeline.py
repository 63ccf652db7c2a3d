"""Integration tests for the generate / validate / retry / apply pipeline.

Tests cover:
- ConfigGenerator.generate_with_retry: success, retry on each failure kind, exhaustion
- apply_generated_config: both slots written on success, nothing written on failure
- setup_config: end-to-end over mocked HTTP with an injected credential
"""

import copy
import json
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest
import respx

from serversurvival.generation.config_generator import (
    ConfigGenerator,
    GenerationExhaustedError,
    generate_config,
)
from serversurvival.generation.schemas import Configuration
from serversurvival.llm import MalformedReplyError, TransportError
from serversurvival.parameters import DEFAULT_API_URL
from serversurvival.settings import (
    NestedSettingsStore,
    apply_generated_config,
    setup_config,
)


def _stub_client(*results):
    """Build a client whose generate_json returns or raises each result in turn."""
    client = MagicMock()
    client.generate_json = AsyncMock(side_effect=list(results))
    return client


def _with_bad_event_type(config_data):
    bad = copy.deepcopy(config_data)
    bad["randomEvents"][0]["type"] = "ALIEN_INVASION"
    return bad


class TestGenerateWithRetry:
    """Tests for ConfigGenerator.generate_with_retry."""

    @pytest.mark.asyncio
    async def test_first_attempt_succeeds(self, valid_config_data):
        client = _stub_client(valid_config_data)
        generator = ConfigGenerator(client)

        config = await generator.generate_with_retry("space", "easy")

        assert isinstance(config, Configuration)
        assert client.generate_json.await_count == 1

    @pytest.mark.asyncio
    async def test_prompts_carry_theme_and_difficulty(self, valid_config_data):
        client = _stub_client(valid_config_data)

        await ConfigGenerator(client).generate_with_retry("haunted datacenter", "nightmare")

        kwargs = client.generate_json.await_args.kwargs
        assert kwargs["user_prompt"] == "Theme: haunted datacenter Difficulty: nightmare"
        assert "randomEvents" in kwargs["system_prompt"]
        assert "MALICIOUS" in kwargs["system_prompt"]

    @pytest.mark.asyncio
    async def test_succeeds_on_third_attempt(self, valid_config_data):
        """Transport error, then invalid event type, then a valid reply."""
        third = copy.deepcopy(valid_config_data)
        third["randomEvents"][0]["name"] = "Third Time Lucky"
        client = _stub_client(
            TransportError(503, "service unavailable"),
            _with_bad_event_type(valid_config_data),
            third,
        )

        config = await ConfigGenerator(client).generate_with_retry("space", "hard", 3)

        assert config.random_events[0].name == "Third Time Lucky"
        assert client.generate_json.await_count == 3

    @pytest.mark.asyncio
    async def test_malformed_reply_is_retried(self, valid_config_data):
        client = _stub_client(MalformedReplyError("bad json", "{oops"), valid_config_data)

        config = await ConfigGenerator(client).generate_with_retry("space", "easy")

        assert len(config.traffic_patterns) == 4
        assert client.generate_json.await_count == 2

    @pytest.mark.asyncio
    async def test_exhaustion_raises_with_attempt_failures(self, valid_config_data):
        client = _stub_client(
            TransportError(None, "ConnectError: refused"),
            MalformedReplyError("bad json", "nope"),
            _with_bad_event_type(valid_config_data),
        )

        with pytest.raises(GenerationExhaustedError) as exc_info:
            await ConfigGenerator(client).generate_with_retry("space", "hard", 3)

        error = exc_info.value
        assert error.attempts == 3
        assert "after 3 attempts" in str(error)
        assert len(error.failures) == 3
        assert "refused" in error.failures[0]
        assert "ALIEN_INVASION" in error.failures[2]

    @pytest.mark.asyncio
    async def test_no_attempts_beyond_bound(self):
        client = _stub_client(*[TransportError(500, "err")] * 5)

        with pytest.raises(GenerationExhaustedError):
            await ConfigGenerator(client).generate_with_retry("space", "easy", 2)

        assert client.generate_json.await_count == 2

    @pytest.mark.asyncio
    async def test_partial_results_not_merged(self, valid_config_data):
        """Three valid events per attempt never add up to a valid configuration."""
        short = copy.deepcopy(valid_config_data)
        short["randomEvents"] = short["randomEvents"][:3]
        client = _stub_client(short, copy.deepcopy(short))

        with pytest.raises(GenerationExhaustedError):
            await ConfigGenerator(client).generate_with_retry("space", "easy", 2)

    @pytest.mark.asyncio
    async def test_programming_errors_propagate(self):
        client = _stub_client(RuntimeError("bug"))

        with pytest.raises(RuntimeError, match="bug"):
            await ConfigGenerator(client).generate_with_retry("space", "easy")

    @pytest.mark.asyncio
    async def test_rejects_non_positive_max_attempts(self):
        with pytest.raises(ValueError, match="at least 1"):
            await ConfigGenerator(_stub_client()).generate_with_retry("space", "easy", 0)

    @pytest.mark.asyncio
    async def test_retry_delay_between_failed_attempts(self, valid_config_data):
        client = _stub_client(TransportError(429, "slow down"), valid_config_data)
        generator = ConfigGenerator(client, retry_delay=1.5)

        with patch("serversurvival.generation.config_generator.asyncio.sleep", new=AsyncMock()) as sleep:
            await generator.generate_with_retry("space", "easy")

        sleep.assert_awaited_once_with(1.5)

    @pytest.mark.asyncio
    async def test_generate_config_convenience(self, valid_config_data):
        config = await generate_config(_stub_client(valid_config_data), "space", "easy")
        assert isinstance(config, Configuration)


class TestApplyGeneratedConfig:
    """Tests for writing generated configurations into game settings."""

    @pytest.mark.asyncio
    async def test_overwrites_both_slots(self, valid_config_data, game_settings):
        generator = ConfigGenerator(_stub_client(valid_config_data))

        await apply_generated_config(NestedSettingsStore(game_settings), generator, "space", "easy", 3)

        survival = game_settings["survival"]
        assert [e["name"] for e in survival["randomEvents"]["events"]] == [
            "Cloud Bill Shock", "Thermal Throttling", "Viral Post", "DNS Hiccup",
        ]
        assert survival["trafficShifts"]["patterns"][1]["name"] == "Bot Swarm"
        # Unrelated settings survive
        assert survival["startBudget"] == 500
        assert survival["randomEvents"]["interval"] == 45

    @pytest.mark.asyncio
    async def test_written_values_are_repaired(self, valid_config_data, game_settings):
        valid_config_data["randomEvents"][2]["rpsMultiplier"] = 42
        generator = ConfigGenerator(_stub_client(valid_config_data))

        await apply_generated_config(NestedSettingsStore(game_settings), generator, "space", "easy", 3)

        assert game_settings["survival"]["randomEvents"]["events"][2]["rpsMultiplier"] == 10

    @pytest.mark.asyncio
    async def test_exhaustion_leaves_settings_untouched(self, game_settings):
        before = copy.deepcopy(game_settings)
        generator = ConfigGenerator(_stub_client(*[TransportError(500, "down")] * 3))

        with pytest.raises(GenerationExhaustedError):
            await apply_generated_config(NestedSettingsStore(game_settings), generator, "space", "easy", 3)

        assert game_settings == before

    @pytest.mark.asyncio
    async def test_creates_missing_sections(self, valid_config_data):
        settings = {}
        generator = ConfigGenerator(_stub_client(valid_config_data))

        await apply_generated_config(NestedSettingsStore(settings), generator, "space", "easy", 1)

        assert len(settings["survival"]["randomEvents"]["events"]) == 4
        assert len(settings["survival"]["trafficShifts"]["patterns"]) == 4


class TestSetupConfig:
    """End-to-end tests for setup_config over mocked HTTP."""

    @pytest.fixture(autouse=True)
    def _clean_env(self, monkeypatch):
        for name in (
            "SERVER_SURVIVAL_API_KEY",
            "OPENAI_API_KEY",
            "SERVER_SURVIVAL_API_URL",
            "SERVER_SURVIVAL_MAX_ATTEMPTS",
            "SERVER_SURVIVAL_RETRY_DELAY",
        ):
            monkeypatch.delenv(name, raising=False)

    @pytest.mark.asyncio
    @respx.mock
    async def test_setup_config_applies_reply(self, valid_config_data, game_settings):
        reply = {"choices": [{"message": {"content": json.dumps(valid_config_data)}}]}
        route = respx.post(DEFAULT_API_URL).mock(return_value=httpx.Response(200, json=reply))

        await setup_config(game_settings, "cyberpunk", "hard", api_key="sk-injected")

        assert route.calls.last.request.headers["Authorization"] == "Bearer sk-injected"
        assert game_settings["survival"]["randomEvents"]["events"][0]["type"] == "COST_SPIKE"

    @pytest.mark.asyncio
    @respx.mock
    async def test_setup_config_retries_then_raises(self, game_settings):
        route = respx.post(DEFAULT_API_URL).mock(return_value=httpx.Response(500, text="oops"))
        before = copy.deepcopy(game_settings)

        with pytest.raises(GenerationExhaustedError):
            await setup_config(game_settings, "cyberpunk", "hard", api_key="sk-injected")

        assert route.call_count == 3
        assert game_settings == before

    @pytest.mark.asyncio
    @respx.mock
    async def test_reply_past_decoder_limits_is_retried(self, valid_config_data, game_settings):
        """A reply json.loads refuses with ValueError counts as a failed attempt."""
        bad = {"choices": [{"message": {"content": "9" * 5000}}]}
        good = {"choices": [{"message": {"content": json.dumps(valid_config_data)}}]}
        route = respx.post(DEFAULT_API_URL).mock(
            side_effect=[httpx.Response(200, json=bad), httpx.Response(200, json=good)]
        )

        await setup_config(game_settings, "cyberpunk", "hard", api_key="sk-injected")

        assert route.call_count == 2
        assert len(game_settings["survival"]["trafficShifts"]["patterns"]) == 4

    @pytest.mark.asyncio
    @respx.mock
    async def test_deeply_nested_replies_exhaust_attempts(self, game_settings):
        nested = {"choices": [{"message": {"content": "[" * 100000 + "]" * 100000}}]}
        route = respx.post(DEFAULT_API_URL).mock(return_value=httpx.Response(200, json=nested))
        before = copy.deepcopy(game_settings)

        with pytest.raises(GenerationExhaustedError):
            await setup_config(game_settings, "cyberpunk", "hard", api_key="sk-injected")

        assert route.call_count == 3
        assert game_settings == before

    @pytest.mark.asyncio
    async def test_setup_config_requires_credential(self, game_settings):
        from serversurvival.config import MissingCredentialError

        with pytest.raises(MissingCredentialError):
            await setup_config(game_settings, "cyberpunk", "hard")
