"""
Artifact generation services.

Turns a Directive into an ArtifactResult using a named backend profile.

Two implementations share the IGenerationService contract:
- MockGenerationService: simulated backend, latency looked up per profile,
  synthetic artifact URLs
- HttpGenerationService: posts the directive to a real backend over HTTP

Both resolve display names through a BackendRegistry, which falls back to
the default profile for unknown ids.
"""

import time
from typing import Callable, Dict, Iterable, List, Optional
from uuid import uuid4

import httpx
import structlog

from video_studio.core.exceptions import (
    ConfigurationError,
    GenerationFailure,
    StageTimeoutError,
)
from video_studio.domain.models.backend import BackendProfile
from video_studio.domain.models.generation import ArtifactResult, Directive
from video_studio.services.latency import FixedLatency, LatencyStrategy

log = structlog.get_logger(__name__)


# =============================================================================
# Backend Registry
# =============================================================================


class BackendRegistry:
    """Lookup table of backend profiles with a default fallback."""

    def __init__(self, profiles: Iterable[BackendProfile], default: str):
        self._profiles: Dict[str, BackendProfile] = {p.id: p for p in profiles}
        if default not in self._profiles:
            raise ConfigurationError(
                f"Default backend profile '{default}' is not registered. "
                f"Known profiles: {', '.join(self._profiles) or 'none'}"
            )
        self.default = default

    def __contains__(self, profile_id: object) -> bool:
        return profile_id in self._profiles

    def profiles(self) -> List[BackendProfile]:
        return list(self._profiles.values())

    def resolve(self, profile_id: Optional[str]) -> BackendProfile:
        """Return the profile for profile_id, or the default profile."""
        if profile_id in self._profiles:
            return self._profiles[profile_id]
        return self._profiles[self.default]

    def display_name(self, profile_id: Optional[str]) -> str:
        return self.resolve(profile_id).display_name


# =============================================================================
# Simulated backend
# =============================================================================


class MockGenerationService:
    """Simulated generation backend.

    Waits the profile's latency, then returns a synthetic artifact whose URL
    embeds a random opaque id. Metadata is copied from the directive. Never
    raises GenerationFailure.
    """

    def __init__(
        self,
        registry: BackendRegistry,
        base_url: str = "/api/placeholder/640/360",
        latency_factory: Optional[Callable[[BackendProfile], LatencyStrategy]] = None,
    ):
        """
        Args:
            registry: Backend catalogue used for latency and display names
            base_url: Base of the synthetic artifact URLs
            latency_factory: Builds the latency strategy for a profile
                (default: the profile's fixed latency_ms)
        """
        self.registry = registry
        self.base_url = base_url
        self.latency_factory = latency_factory or (
            lambda profile: FixedLatency(profile.latency_ms)
        )

    async def generate(
        self, directive: Directive, backend_profile: Optional[str] = None
    ) -> ArtifactResult:
        profile = self.registry.resolve(backend_profile)
        start = time.perf_counter()

        await self.latency_factory(profile).wait()

        artifact_id = uuid4().hex[:12]
        artifact = ArtifactResult(
            artifact_id=artifact_id,
            artifact_url=f"{self.base_url}?video={artifact_id}",
            thumbnail_url=f"{self.base_url}?thumb={artifact_id}",
            duration_seconds=directive.duration_seconds,
            resolution=directive.resolution,
            style=directive.style,
            backend_profile=profile.id,
        )

        log.info(
            "artifact_generated",
            backend_profile=profile.id,
            requested_profile=backend_profile,
            artifact_id=artifact_id,
            latency_ms=round((time.perf_counter() - start) * 1000, 2),
        )
        return artifact

    def display_name(self, backend_profile: Optional[str]) -> str:
        return self.registry.display_name(backend_profile)


# =============================================================================
# HTTP backend
# =============================================================================


class HttpGenerationService:
    """Generation backend reached over HTTP.

    Request:  POST {endpoint}/generations with the directive as JSON and a
              bearer token.
    Response: JSON with at least "id" and "video_url"; "thumbnail_url",
              "duration_seconds" and "resolution" are optional and default
              to the directive's values.

    Every transport, HTTP status or payload problem is raised as
    GenerationFailure.
    """

    def __init__(
        self,
        endpoint: str,
        registry: BackendRegistry,
        api_key: Optional[str] = None,
        timeout: float = 120.0,
    ):
        if not endpoint:
            raise ConfigurationError("HttpGenerationService requires an endpoint")
        self.endpoint = endpoint.rstrip("/")
        self.registry = registry
        self.api_key = api_key
        self.timeout = timeout

        log.info(
            "http_generation_service_initialized",
            endpoint=self.endpoint,
            timeout=self.timeout,
        )

    async def generate(
        self, directive: Directive, backend_profile: Optional[str] = None
    ) -> ArtifactResult:
        profile = self.registry.resolve(backend_profile)
        headers = {"content-type": "application/json"}
        if self.api_key:
            headers["authorization"] = f"Bearer {self.api_key}"

        payload = {
            "model": profile.id,
            "prompt": directive.enhanced_text,
            "style": directive.style,
            "duration_seconds": directive.duration_seconds,
            "resolution": directive.resolution,
            "motion_intensity": directive.motion_intensity.value,
        }

        start = time.perf_counter()
        log.debug("generation_request_start", backend_profile=profile.id)

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    f"{self.endpoint}/generations", headers=headers, json=payload
                )
                response.raise_for_status()
                data = response.json()
        except httpx.TimeoutException as e:
            raise GenerationFailure(
                f"Generation backend timed out after {self.timeout}s",
                cause=StageTimeoutError(str(e) or "timeout"),
            ) from e
        except httpx.HTTPStatusError as e:
            raise GenerationFailure(
                f"Generation backend returned HTTP {e.response.status_code}",
                cause=e,
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            raise GenerationFailure(
                f"Generation backend request failed: {type(e).__name__}", cause=e
            ) from e

        try:
            artifact_id = str(data["id"])
            artifact = ArtifactResult(
                artifact_id=artifact_id,
                artifact_url=data["video_url"],
                thumbnail_url=data.get("thumbnail_url") or data["video_url"],
                duration_seconds=int(
                    data.get("duration_seconds", directive.duration_seconds)
                ),
                resolution=data.get("resolution", directive.resolution),
                style=directive.style,
                backend_profile=profile.id,
            )
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise GenerationFailure(
                "Generation backend returned an unexpected payload", cause=e
            ) from e

        log.info(
            "artifact_generated",
            backend_profile=profile.id,
            artifact_id=artifact_id,
            latency_ms=round((time.perf_counter() - start) * 1000, 2),
        )
        return artifact

    def display_name(self, backend_profile: Optional[str]) -> str:
        return self.registry.display_name(backend_profile)


# =============================================================================
# Factory
# =============================================================================


def create_generation_service(
    registry: BackendRegistry,
    endpoint: Optional[str] = None,
    api_key: Optional[str] = None,
    timeout: float = 120.0,
    base_url: str = "/api/placeholder/640/360",
):
    """Build the HTTP backend when an endpoint is configured, else the simulated one."""
    if endpoint:
        return HttpGenerationService(
            endpoint=endpoint, registry=registry, api_key=api_key, timeout=timeout
        )
    return MockGenerationService(registry=registry, base_url=base_url)
