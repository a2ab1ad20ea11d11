"""Backend profile model.

A backend profile names one generation backend together with its
presentation name and expected latency. Profiles are loaded from
studio_config.yaml and looked up by id through BackendRegistry.
"""

from pydantic import BaseModel, ConfigDict, Field


class BackendProfile(BaseModel):
    """Named generation backend configuration."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Stable profile identifier (e.g. 'veo3')")
    display_name: str = Field(description="Human-readable backend name")
    description: str = Field(default="", description="Short blurb for pickers")
    latency_ms: float = Field(
        default=8000.0, ge=0, description="Simulated generation latency"
    )
