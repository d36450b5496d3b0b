"""Configuration model and loaders for SentenceVoice.

Responsibilities:
- Define runtime configuration as a typed dataclass.
- Provide deterministic precedence resolution for provider settings and keys.
- Provide loader entry points for YAML- and environment-based configuration.

Key types:
- `SentenceVoiceConfig`: normalized runtime settings for one run.
- `ProviderRuntimeConfig`: resolved provider/model/key values.
- `RuntimeConfigSources`: optional value sources for precedence resolution.
- `ConfigLoader`: static construction helpers for `SentenceVoiceConfig`.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
import os
from pathlib import Path
from typing import Any, Mapping

from dotenv import find_dotenv, load_dotenv
import yaml

from .models.datatypes import (
    EmptyAudioPolicy,
    FailurePolicy,
    LanguagePair,
    PipelineOptions,
)
from .parsing import (
    coerce_repetitions,
    normalize_optional_string,
    parse_permissive_boolean,
)


_DEFAULT_TRANSLATOR = "deepl"
_DEFAULT_TTS_PROVIDER = "openai"
_DEFAULT_TRANSLATION_MODEL = "gpt-4.1-mini"
_DEFAULT_TTS_MODEL = "gpt-4o-mini-tts"
_SUPPORTED_TRANSLATORS = frozenset({"deepl", "openai"})
_SUPPORTED_TTS_PROVIDERS = frozenset({"openai"})
_SUPPORTED_AUDIO_FORMATS = frozenset({"mp3", "m4a", "wav"})

_PATH_KEYS = frozenset({"input_csv", "output_dir", "timer_asset", "silence_asset"})
_BOOLEAN_KEYS = frozenset(
    {"disable_translation", "disable_synthesis", "random_order", "concat", "reverse_columns"}
)
_FLOAT_KEYS = frozenset({"synthesis_interval_seconds", "tts_speed"})
_POSITIVE_INT_KEYS = frozenset({"translation_concurrency"})
_ENV_PREFIX = "SENTENCEVOICE_"
_API_KEY_ENV = {"deepl_api_key": "DEEPL_TOKEN", "openai_api_key": "OPENAI_API_KEY"}


@dataclass(frozen=True, slots=True)
class RuntimeConfigSources:
    """Source mappings used for deterministic runtime value precedence.

    Attributes:
        cli: Values explicitly provided by CLI arguments.
        env: Values loaded from environment variables.
    """

    cli: Mapping[str, str] = field(default_factory=dict)
    env: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class ProviderRuntimeConfig:
    """Resolved provider identifiers, models, and keys for one run.

    API keys are resolved here but never written to tables or logs.
    """

    translator_provider: str
    tts_provider: str
    translate_model: str
    tts_model: str
    deepl_api_key: str | None = None
    openai_api_key: str | None = None


@dataclass(slots=True)
class SentenceVoiceConfig:
    """Runtime configuration for one pipeline run.

    Attributes:
        input_csv: Sentence table to read and write back.
        output_dir: Artifact root; defaults to the table path without extension.
        source_language: Short source language code used for artifact folders.
        target_language: Short target language code used for artifact folders.
        source_locale: Provider locale for source speech.
        target_locale: Provider locale for target speech.
        translator_provider: `deepl` or `openai`.
        tts_provider: Speech provider identifier.
        model_translate: Model for LLM-backed translation.
        model_tts: Model for speech synthesis.
        source_voice: Default source voice; language default when unset.
        target_voice: Target voice; language default when unset.
        audio_format: Artifact and combined-track format.
        tts_speed: Speaking rate multiplier.
        force_voice_id: Voice forced for every source clip.
        disable_translation: Never call the translation provider.
        disable_synthesis: Never call the speech provider.
        random_order: Shuffle sentences before processing.
        concat: Build the combined study track.
        repetitions: Study clip repetitions per sentence in the combined track.
        reverse_columns: Lead with the source language instead of the target.
        synthesis_interval_seconds: Minimum pause after each synthesized clip.
        translation_concurrency: Maximum concurrent translation requests.
        empty_audio_policy: `skip` or `fail` when the provider returns no audio.
        failure_policy: `fail-fast` or `skip` for per-sentence failures.
        timer_asset: Timer filler clip; generated when unset.
        silence_asset: Silence filler clip; generated when unset.
        deepl_api_key: Optional DeepL key.
        openai_api_key: Optional OpenAI key.
        runtime_sources: Runtime source overrides injected by the CLI.
    """

    input_csv: Path
    output_dir: Path | None = None
    source_language: str = "en"
    target_language: str = "es"
    source_locale: str = "en-US"
    target_locale: str = "es-ES"
    translator_provider: str = _DEFAULT_TRANSLATOR
    tts_provider: str = _DEFAULT_TTS_PROVIDER
    model_translate: str = _DEFAULT_TRANSLATION_MODEL
    model_tts: str = _DEFAULT_TTS_MODEL
    source_voice: str | None = None
    target_voice: str | None = None
    audio_format: str = "mp3"
    tts_speed: float = 1.0
    force_voice_id: str | None = None
    disable_translation: bool = False
    disable_synthesis: bool = False
    random_order: bool = False
    concat: bool = False
    repetitions: int = 1
    reverse_columns: bool = False
    synthesis_interval_seconds: float = 1.0
    translation_concurrency: int = 8
    empty_audio_policy: str = EmptyAudioPolicy.SKIP.value
    failure_policy: str = FailurePolicy.FAIL_FAST.value
    timer_asset: Path | None = None
    silence_asset: Path | None = None
    deepl_api_key: str | None = None
    openai_api_key: str | None = None
    runtime_sources: RuntimeConfigSources = field(default_factory=RuntimeConfigSources)

    @property
    def resolved_output_dir(self) -> Path:
        """Return the artifact root, defaulting to the table path without extension."""

        if self.output_dir is not None:
            return self.output_dir
        return self.input_csv.with_suffix("")

    def languages(self) -> LanguagePair:
        """Return the configured language pair."""

        return LanguagePair(
            source=self.source_language,
            target=self.target_language,
            source_locale=self.source_locale,
            target_locale=self.target_locale,
        )

    def pipeline_options(self) -> PipelineOptions:
        """Return per-run pipeline switches."""

        return PipelineOptions(
            force_voice_id=self.force_voice_id,
            disable_translation=self.disable_translation,
            disable_synthesis=self.disable_synthesis,
            random_order=self.random_order,
            failure_policy=FailurePolicy(self.failure_policy),
        )

    def validate(self) -> None:
        """Validate runtime configuration values before pipeline execution."""

        self._validate_choice(
            self.translator_provider, _SUPPORTED_TRANSLATORS, "translator_provider"
        )
        self._validate_choice(self.tts_provider, _SUPPORTED_TTS_PROVIDERS, "tts_provider")
        self._validate_choice(self.audio_format, _SUPPORTED_AUDIO_FORMATS, "audio_format")
        self._validate_choice(
            self.empty_audio_policy,
            frozenset(policy.value for policy in EmptyAudioPolicy),
            "empty_audio_policy",
        )
        self._validate_choice(
            self.failure_policy,
            frozenset(policy.value for policy in FailurePolicy),
            "failure_policy",
        )
        for field_name in (
            "source_language",
            "target_language",
            "source_locale",
            "target_locale",
            "model_translate",
            "model_tts",
        ):
            self._require_non_empty(getattr(self, field_name), field_name)
        if self.source_language.lower() == self.target_language.lower():
            raise ValueError("`source_language` and `target_language` must differ.")
        if self.repetitions < 0:
            raise ValueError("`repetitions` must be zero or a positive integer.")
        if self.synthesis_interval_seconds < 0:
            raise ValueError("`synthesis_interval_seconds` must not be negative.")
        if self.translation_concurrency <= 0:
            raise ValueError("`translation_concurrency` must be a positive integer.")
        if not 0.25 <= self.tts_speed <= 4.0:
            raise ValueError("`tts_speed` must be between 0.25 and 4.0.")

    def resolved_provider_runtime(
        self, sources: RuntimeConfigSources | None = None
    ) -> ProviderRuntimeConfig:
        """Resolve provider settings with deterministic source precedence.

        Precedence for each key is `cli` > `env` > config field value.
        """

        resolved_sources = sources if sources is not None else self.runtime_sources
        resolved = ProviderRuntimeConfig(
            translator_provider=self._resolve_runtime_value(
                "translator_provider", f"{_ENV_PREFIX}TRANSLATOR_PROVIDER",
                self.translator_provider, resolved_sources,
            ),
            tts_provider=self._resolve_runtime_value(
                "tts_provider", f"{_ENV_PREFIX}TTS_PROVIDER",
                self.tts_provider, resolved_sources,
            ),
            translate_model=self._resolve_runtime_value(
                "model_translate", f"{_ENV_PREFIX}MODEL_TRANSLATE",
                self.model_translate, resolved_sources,
            ),
            tts_model=self._resolve_runtime_value(
                "model_tts", f"{_ENV_PREFIX}MODEL_TTS",
                self.model_tts, resolved_sources,
            ),
            deepl_api_key=self._resolve_optional_runtime_value(
                "deepl_api_key", _API_KEY_ENV["deepl_api_key"],
                self.deepl_api_key, resolved_sources,
            ),
            openai_api_key=self._resolve_optional_runtime_value(
                "openai_api_key", _API_KEY_ENV["openai_api_key"],
                self.openai_api_key, resolved_sources,
            ),
        )
        self._validate_choice(
            resolved.translator_provider, _SUPPORTED_TRANSLATORS, "translator_provider"
        )
        self._validate_choice(resolved.tts_provider, _SUPPORTED_TTS_PROVIDERS, "tts_provider")
        return resolved

    def _resolve_runtime_value(
        self,
        key: str,
        env_key: str,
        default_value: str | None,
        sources: RuntimeConfigSources,
    ) -> str:
        """Resolve a required runtime value from sources in precedence order."""

        value = self._resolve_optional_runtime_value(key, env_key, default_value, sources)
        if value is None:
            raise ValueError(f"`{key}` could not be resolved from CLI, env, or defaults.")
        return value

    @staticmethod
    def _resolve_optional_runtime_value(
        key: str,
        env_key: str,
        default_value: str | None,
        sources: RuntimeConfigSources,
    ) -> str | None:
        """Resolve an optional runtime value from sources in precedence order."""

        for mapping, lookup_key in ((sources.cli, key), (sources.env, env_key)):
            if lookup_key in mapping:
                value = normalize_optional_string(mapping.get(lookup_key))
                if value is not None:
                    return value
        return normalize_optional_string(default_value)

    @staticmethod
    def _validate_choice(value: str, supported: frozenset[str], field_name: str) -> None:
        """Validate a value against a fixed set of supported identifiers."""

        if value not in supported:
            choices = ", ".join(sorted(supported))
            raise ValueError(f"Unsupported `{field_name}` value `{value}`; supported: {choices}.")

    @staticmethod
    def _require_non_empty(value: str, field_name: str) -> None:
        """Validate that runtime string fields are not empty."""

        if not isinstance(value, str) or not value.strip():
            raise ValueError(f"`{field_name}` must be a non-empty string.")


class ConfigLoader:
    """Factory methods for creating `SentenceVoiceConfig` from external sources."""

    _REQUIRED_KEYS = frozenset({"input_csv"})
    _SUPPORTED_KEYS = frozenset(
        item.name for item in fields(SentenceVoiceConfig) if item.name != "runtime_sources"
    )

    @staticmethod
    def from_yaml(path: Path, *, require_input: bool = True) -> SentenceVoiceConfig:
        """Create a validated config from a YAML file.

        With `require_input=False` the table path may be omitted; callers then
        supply it before running.
        """

        payload = yaml.safe_load(path.read_text(encoding="utf-8"))
        if payload is None:
            payload = {}
        if not isinstance(payload, Mapping):
            raise ValueError(f"YAML config `{path}` must contain a top-level mapping/object.")
        return ConfigLoader.from_mapping(
            payload, source_label=f"YAML `{path}`", require_input=require_input
        )

    @staticmethod
    def from_env(env: Mapping[str, str] | None = None) -> SentenceVoiceConfig:
        """Create a validated config from `SENTENCEVOICE_*` environment variables."""

        env_map: Mapping[str, str] = os.environ if env is None else env
        payload: dict[str, Any] = {}
        for key in ConfigLoader._SUPPORTED_KEYS:
            env_key = _API_KEY_ENV.get(key, f"{_ENV_PREFIX}{key.upper()}")
            if env_key in env_map:
                payload[key] = env_map[env_key]
        if "input_csv" not in payload:
            raise ValueError(f"Environment variable `{_ENV_PREFIX}INPUT_CSV` is required.")

        runtime_env = {
            key: value
            for key, value in env_map.items()
            if (key.startswith(_ENV_PREFIX) or key in _API_KEY_ENV.values())
            and normalize_optional_string(value) is not None
        }
        config = ConfigLoader.from_mapping(payload, source_label="Environment")
        config.runtime_sources = RuntimeConfigSources(env=runtime_env)
        return config

    @staticmethod
    def from_mapping(
        payload: Mapping[str, Any],
        *,
        source_label: str,
        require_input: bool = True,
    ) -> SentenceVoiceConfig:
        """Build a validated config from a normalized mapping payload."""

        unknown = sorted(set(map(str, payload)).difference(ConfigLoader._SUPPORTED_KEYS))
        if unknown:
            raise ValueError(f"{source_label} includes unsupported key(s): {', '.join(unknown)}.")
        if require_input:
            missing = sorted(
                key
                for key in ConfigLoader._REQUIRED_KEYS
                if normalize_optional_string(payload.get(key)) is None
            )
            if missing:
                raise ValueError(
                    f"{source_label} is missing required key(s): {', '.join(missing)}."
                )

        values: dict[str, Any] = {}
        for key, raw_value in payload.items():
            parsed = ConfigLoader._parse_value(str(key), raw_value, source_label)
            if parsed is not None:
                values[str(key)] = parsed
        values.setdefault("input_csv", Path(""))

        config = SentenceVoiceConfig(**values)
        config.validate()
        return config

    @staticmethod
    def _parse_value(key: str, raw_value: Any, source_label: str) -> Any:
        """Parse one payload value according to the config field it targets."""

        if key in _BOOLEAN_KEYS:
            if raw_value is None:
                return None
            parsed_bool = parse_permissive_boolean(raw_value)
            if parsed_bool is None:
                raise ValueError(
                    f"{source_label} field `{key}` must be a boolean value "
                    "(`true`/`false`, `1`/`0`, `yes`/`no`)."
                )
            return parsed_bool

        normalized = normalize_optional_string(raw_value)
        if normalized is None:
            return None
        if key in _PATH_KEYS:
            return Path(normalized)
        if key == "repetitions":
            try:
                return coerce_repetitions(raw_value)
            except ValueError as exc:
                raise ValueError(f"{source_label} field `{key}`: {exc}") from exc
        if key in _POSITIVE_INT_KEYS:
            try:
                parsed_int = int(normalized)
            except ValueError as exc:
                raise ValueError(
                    f"{source_label} field `{key}` must be a positive integer."
                ) from exc
            if parsed_int <= 0:
                raise ValueError(f"{source_label} field `{key}` must be a positive integer.")
            return parsed_int
        if key in _FLOAT_KEYS:
            try:
                return float(normalized)
            except ValueError as exc:
                raise ValueError(f"{source_label} field `{key}` must be a number.") from exc
        return normalized



def load_env_file(env_path: Path | None = None) -> Path | None:
    """Load a `.env` file without overriding variables that are already set.

    Without an explicit path, the nearest `.env` from the working directory
    upwards is used. Returns the loaded file, or `None` when none was found.
    """

    if env_path is None:
        located = find_dotenv(usecwd=True)
        if not located:
            return None
        env_path = Path(located)
    if not env_path.is_file():
        return None
    load_dotenv(env_path, override=False)
    return env_path
