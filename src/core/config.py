"""
Application configuration via pydantic-settings.

Loads values from .env file with sensible defaults for local development.
Use ``get_settings()`` to obtain the cached singleton instance.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Collector settings loaded from environment / .env file.

    All settings can be overridden via environment variables or a `.env` file.
    Field names map directly to env var names (case-insensitive).

    Attributes:
        corpus_url: CSV table holding the prompt corpus (needs a ``text`` column).
        dataset_repo_url: Dataset repository the audio/transcript pairs belong to.
        draw_size: Number of prompts drawn into each session.
        session_limit: Number of commits that completes a session.
        transport: Submission backend ("simulated" or "local").
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Silently ignore unrecognized env vars
    )

    # --- Corpus ---
    corpus_url: str = (
        "https://huggingface.co/datasets/kattojuprashanth238/"
        "Telugu-Prompts/resolve/main/telugu_prompts.csv"
    )
    corpus_timeout: float = 10.0  # Seconds before the single fetch attempt gives up

    # --- Session ---
    draw_size: int = 20  # Prompts drawn per session
    session_limit: int = 5  # Commits needed to complete a session

    # --- Capture ---
    # "stream" = PCM pushed over /ws/capture, "sounddevice" = local microphone
    capture_backend: str = "stream"
    capture_device: int | None = None  # sounddevice input index; None = system default
    sample_rate: int = 16000
    channels: int = 1

    # --- Submission ---
    dataset_repo_url: str = (
        "https://huggingface.co/datasets/kattojuprashanth238/Speech-Data-Telugu"
    )
    transport: str = "simulated"  # "simulated" or "local"
    submit_delay: float = 0.8  # Simulated network delay in seconds
    submissions_dir: str = "data/submissions"  # Root for the "local" transport

    # --- Application ---
    app_host: str = "0.0.0.0"  # Bind address for the FastAPI server
    app_port: int = 8000
    log_level: str = "INFO"  # Python logging level


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings singleton.

    Uses ``functools.lru_cache`` so the .env file is read only once.
    Subsequent calls return the same ``Settings`` instance.

    Returns:
        Settings: The application-wide configuration object.
    """
    return Settings()
