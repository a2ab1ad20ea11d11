"""
Application settings management.

Settings are loaded from environment variables with .env file support.
Studio behaviour (lexicons, reply rules, backend profiles) is loaded from
config/studio_config.yaml. All configuration is validated using Pydantic.
"""

from pathlib import Path
from typing import List, Optional

import yaml
from pydantic import BaseModel, Field, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from video_studio.domain.models.backend import BackendProfile


class Settings(BaseSettings):
    """
    Application settings loaded from environment.

    Environment variables take precedence over .env file values.
    """

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    # ==========================================================================
    # Paths
    # ==========================================================================

    config_dir: Path = Field(
        default=Path("config"),
        description="Directory containing YAML configuration files",
    )
    logs_dir: Path = Field(default=Path("logs"), description="Directory for log files")
    log_runs_to_keep: int = Field(
        default=5, ge=1, description="Run log files kept in logs_dir"
    )
    log_level: str = Field(default="INFO", description="Minimum level for log output")

    # ==========================================================================
    # Pipeline
    # ==========================================================================

    default_backend_profile: Optional[str] = Field(
        default=None,
        description="Override the backend profile for new sessions (default from studio_config.yaml)",
    )
    enhancement_latency_min_ms: float = Field(
        default=500.0, ge=0, description="Lower bound of simulated enhancement latency"
    )
    enhancement_latency_max_ms: float = Field(
        default=1500.0, ge=0, description="Upper bound of simulated enhancement latency"
    )
    stage_timeout_seconds: Optional[float] = Field(
        default=None,
        gt=0,
        description="Per-stage timeout; unset means stages may run indefinitely",
    )
    output_resolution: str = Field(
        default="1920x1080", description="Resolution stamped on every directive"
    )
    artifact_base_url: str = Field(
        default="/api/placeholder/640/360",
        description="Base URL for synthetic artifact references",
    )

    # ==========================================================================
    # Custom generation backend (optional)
    # ==========================================================================
    #
    # When custom_backend_endpoint is set, generation goes through the HTTP
    # backend instead of the simulated one.

    custom_backend_name: str = Field(
        default="Custom API", description="Display name for the custom backend"
    )
    custom_backend_endpoint: Optional[str] = Field(
        default=None, description="Base URL of a real generation backend"
    )
    custom_backend_api_key: Optional[str] = Field(
        default=None, description="Bearer token for the custom backend"
    )
    custom_backend_timeout: float = Field(
        default=120.0, gt=0, description="HTTP timeout for the custom backend"
    )

    # ==========================================================================
    # Server Configuration
    # ==========================================================================

    host: str = Field(default="127.0.0.1", description="Server host address")
    port: int = Field(default=8000, ge=1, le=65535, description="Server port")
    debug: bool = Field(default=False, description="Enable debug mode")

    @field_validator("log_level")
    @classmethod
    def known_log_level(cls, v: str) -> str:
        """Log level must be a standard logging level name."""
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level

    @field_validator("enhancement_latency_max_ms")
    @classmethod
    def latency_range_ordered(cls, v: float, info: ValidationInfo) -> float:
        """Upper latency bound may not be below the lower bound."""
        low = info.data.get("enhancement_latency_min_ms")
        if low is not None and v < low:
            raise ValueError(
                f"enhancement_latency_max_ms ({v}) must be >= "
                f"enhancement_latency_min_ms ({low})"
            )
        return v


# ============================================================================
# Studio Configuration (from YAML)
# ============================================================================


class LexiconConfig(BaseModel):
    """Keyword sets shared by the intent classifier and the enhancer.

    All matching is whole-word and case-insensitive.
    """

    creation_verbs: List[str] = Field(
        default_factory=lambda: [
            "make",
            "create",
            "generate",
            "animate",
            "show",
            "scene",
            "render",
            "film",
            "video",
        ]
    )
    modification_verbs: List[str] = Field(
        default_factory=lambda: ["add", "change", "modify", "include"]
    )
    subject_terms: List[str] = Field(
        default_factory=lambda: [
            "frog",
            "cow",
            "dog",
            "cat",
            "bird",
            "fish",
            "elephant",
            "lion",
            "tiger",
        ]
    )
    action_terms: List[str] = Field(
        default_factory=lambda: [
            "dancing",
            "running",
            "flying",
            "swimming",
            "jumping",
            "walking",
        ]
    )
    setting_terms: List[str] = Field(
        default_factory=lambda: [
            "forest",
            "city",
            "ocean",
            "space",
            "mountain",
            "desert",
            "jungle",
        ]
    )
    abstract_terms: List[str] = Field(
        default_factory=lambda: ["abstract", "geometric"]
    )


class ReplyRule(BaseModel):
    """A conversational reply template triggered by any of its keywords."""

    name: str
    keywords: List[str] = Field(default_factory=list)
    reply: str


class RepliesConfig(BaseModel):
    """Template replies for conversational (non-generation) turns."""

    rules: List[ReplyRule] = Field(
        default_factory=lambda: [
            ReplyRule(
                name="greeting",
                keywords=["hello", "hi", "hey", "morning", "evening"],
                reply=(
                    "Hi! Describe a scene you'd like to see and I'll turn it "
                    "into a video."
                ),
            ),
            ReplyRule(
                name="ideas",
                keywords=["idea", "ideas", "suggest", "suggestion", "inspire"],
                reply=(
                    "Here are a few ideas: a cyberpunk city at night, a "
                    "peaceful mountain lake at sunrise, or abstract geometric "
                    "shapes morphing."
                ),
            ),
            ReplyRule(
                name="capabilities",
                keywords=["can", "able", "capabilities", "help"],
                reply=(
                    "I can generate short videos from a description, then "
                    "refine them. Try something like \"a frog dancing in a "
                    "forest\", then ask me to add or change details."
                ),
            ),
            ReplyRule(
                name="thanks",
                keywords=["thanks", "thank", "cheers"],
                reply="You're welcome! Tell me what you'd like to create next.",
            ),
        ]
    )
    fallback: str = Field(
        default=(
            "Tell me what you'd like to see, for example \"make a video of a "
            "bird flying over the ocean\", and I'll generate it."
        )
    )


def _default_backends() -> List[BackendProfile]:
    return [
        BackendProfile(
            id="runway-gen4",
            display_name="Runway Gen-4 Turbo",
            description="Latest high-quality model",
            latency_ms=8000,
        ),
        BackendProfile(
            id="veo3",
            display_name="Veo3",
            description="Fast and creative",
            latency_ms=6000,
        ),
        BackendProfile(
            id="banana",
            display_name="Banana",
            description="Artistic style",
            latency_ms=5000,
        ),
        BackendProfile(
            id="custom",
            display_name="Custom API",
            description="Your own model",
            latency_ms=10000,
        ),
    ]


class BackendsConfig(BaseModel):
    """Catalogue of generation backend profiles."""

    default: str = Field(default="runway-gen4")
    profiles: List[BackendProfile] = Field(default_factory=_default_backends)

    @field_validator("profiles")
    @classmethod
    def unique_profile_ids(cls, v: List[BackendProfile]) -> List[BackendProfile]:
        """Profile ids must be unique."""
        ids = [p.id for p in v]
        duplicates = sorted({i for i in ids if ids.count(i) > 1})
        if duplicates:
            raise ValueError(f"Duplicate backend profile ids: {duplicates}")
        return v


class StudioConfig(BaseModel):
    """
    Complete studio configuration loaded from studio_config.yaml.

    Holds the data that drives classification, enhancement, conversational
    replies, and the backend catalogue.
    """

    welcome_message: str = Field(
        default=(
            "Welcome to AI Video Studio! I can help you create amazing videos. "
            "Just describe what you want to see and I'll generate it for you. "
            "You can also refine your videos with simple prompts."
        )
    )
    lexicon: LexiconConfig = Field(default_factory=LexiconConfig)
    replies: RepliesConfig = Field(default_factory=RepliesConfig)
    backends: BackendsConfig = Field(default_factory=BackendsConfig)


def load_studio_config(config_path: Optional[Path] = None) -> StudioConfig:
    """
    Load studio configuration from YAML file.

    Args:
        config_path: Path to studio_config.yaml. If None, looks in the project
            root config/ directory, then the working directory.

    Returns:
        StudioConfig with validated settings (defaults if no file is found)

    Raises:
        pydantic.ValidationError: If the file contents fail validation
    """
    if config_path is None:
        project_root = Path(__file__).resolve().parent.parent.parent
        candidates = [
            project_root / "config" / "studio_config.yaml",
            Path.cwd() / "config" / "studio_config.yaml",
        ]
        config_path = next((c for c in candidates if c.exists()), None)
        if config_path is None:
            return StudioConfig()

    config_path = Path(config_path).resolve()

    if not config_path.exists():
        return StudioConfig()

    with open(str(config_path)) as f:
        config_data = yaml.safe_load(f)

    if not config_data:
        return StudioConfig()

    return StudioConfig(**config_data)


# Global settings instance
settings = Settings()

# Global studio config instance
studio_config = load_studio_config()
