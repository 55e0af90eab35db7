"""Runtime check configuration — loaded from environment / .env file."""

from __future__ import annotations

from pydantic_settings import BaseSettings


class RuntimeCheckSettings(BaseSettings):
    """Settings read from ``RUNTIME_CHECK_*`` variables."""

    model_config = {
        "env_prefix": "RUNTIME_CHECK_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    # Gate: RuntimeCheck.should_run() default
    enabled: bool = True

    # Emit the per-check trace when running through the gate
    log: bool = True

    # Logging (CLI only, libraries don't configure logging)
    log_level: str = "INFO"

    # EnvFlagStore reads FEATURE_<NAME> by default
    flag_env_prefix: str = "FEATURE_"


settings = RuntimeCheckSettings()
