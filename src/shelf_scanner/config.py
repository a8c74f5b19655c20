from dataclasses import dataclass, replace
from pathlib import Path
from typing import Mapping, Optional
import os

from .utils.log_utils import get_logger

logger = get_logger(__name__)

DEFAULT_LIBRARY_ROOT = "~/Library Images"
SUPPORTED_APIS = ("gemini", "openai", "claude")


@dataclass(frozen=True)
class Settings:
    library_root: Path
    api: str = "gemini"
    model: Optional[str] = None
    image_max_width: int = 1024
    image_quality: int = 80
    max_workers: int = 4
    enrich_model: str = "sonar"

    def __post_init__(self):
        if self.api not in SUPPORTED_APIS:
            raise ValueError(f"Unsupported API '{self.api}'. Available: {', '.join(SUPPORTED_APIS)}")
        for name in ("image_max_width", "image_quality", "max_workers"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive")
        if self.image_quality > 100:
            raise ValueError("image_quality must be at most 100")

    def with_overrides(self, **overrides) -> "Settings":
        """Return a copy with every non-None override applied (CLI flags win over env)."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        if "library_root" in changes:
            changes["library_root"] = Path(changes["library_root"]).expanduser()
        return replace(self, **changes)


def _int_env(env: Mapping[str, str], name: str, default: int) -> int:
    v = env.get(name)
    if not v:
        return default
    try:
        return int(v)
    except ValueError:
        logger.warning("Ignoring non-integer %s=%r, using %d", name, v, default)
        return default


def load_settings(env: Optional[Mapping[str, str]] = None) -> Settings:
    """Build Settings from environment variables. API keys are read by the clients themselves."""
    env = os.environ if env is None else env
    return Settings(
        library_root=Path(env.get("SHELF_LIBRARY_ROOT") or DEFAULT_LIBRARY_ROOT).expanduser(),
        api=(env.get("SHELF_API") or "gemini").lower(),
        model=env.get("SHELF_MODEL") or None,
        image_max_width=_int_env(env, "SHELF_IMAGE_MAX_WIDTH", 1024),
        image_quality=_int_env(env, "SHELF_IMAGE_QUALITY", 80),
        max_workers=_int_env(env, "SHELF_MAX_WORKERS", 4),
        enrich_model=env.get("SHELF_ENRICH_MODEL") or "sonar",
    )
