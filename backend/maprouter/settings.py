from __future__ import annotations

from pathlib import Path

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _default_out_dir() -> str:
    # Keep runtime artifacts in backend/out by default to avoid polluting source data.
    return str(Path(__file__).resolve().parents[1] / "out")


class Settings(BaseSettings):
    """Validated settings (env-driven), keeping map and tile config out of code."""

    model_config = SettingsConfigDict(
        # Support both "repo root/.env" and "backend/.env" (local dev)
        env_file=(".env", "../.env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    out_dir: str = Field(default_factory=_default_out_dir, alias="OUT_DIR")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # OSM XML road data; empty means the service starts with an empty map.
    map_osm_path: str = Field(default="", alias="MAP_OSM_PATH")
    allowed_highways: str = Field(
        default=(
            "motorway,trunk,primary,secondary,tertiary,unclassified,residential,"
            "living_street,motorway_link,trunk_link,primary_link,secondary_link,"
            "tertiary_link"
        ),
        alias="ALLOWED_HIGHWAYS",
    )

    # Root tile bounds (d0_x0_y0) and raster geometry.
    root_ullon: float = Field(default=-122.2998046875, alias="ROOT_ULLON")
    root_ullat: float = Field(default=37.892195547244356, alias="ROOT_ULLAT")
    root_lrlon: float = Field(default=-122.2119140625, alias="ROOT_LRLON")
    root_lrlat: float = Field(default=37.82280243352756, alias="ROOT_LRLAT")
    tile_size: int = Field(default=256, ge=1, alias="TILE_SIZE")
    tile_max_depth: int = Field(default=7, ge=0, le=20, alias="TILE_MAX_DEPTH")
    tile_image_suffix: str = Field(default=".png", alias="TILE_IMAGE_SUFFIX")

    cors_allow_origins: str = Field(default="*", alias="CORS_ALLOW_ORIGINS")

    @model_validator(mode="after")
    def _check_root_box(self) -> "Settings":
        if not (self.root_ullon < self.root_lrlon and self.root_ullat > self.root_lrlat):
            raise ValueError("root bounding box must have upper-left above and left of lower-right")
        return self

    def allowed_highway_set(self) -> frozenset[str]:
        return frozenset(
            part.strip().lower() for part in self.allowed_highways.split(",") if part.strip()
        )

    def cors_origin_list(self) -> list[str]:
        return [part.strip() for part in self.cors_allow_origins.split(",") if part.strip()]


settings = Settings()
