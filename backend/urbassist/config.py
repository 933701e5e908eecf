from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    app_name: str = "UrbAssist Planning Engine"
    log_level: str = "INFO"
    cors_origins: list[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
        "https://urbassist.fr",
        "https://www.urbassist.fr",
    ]

    # Canvas scale used when a calculation request carries none
    default_pixels_per_meter: float = 100.0

    # Road direction assumed when no road was detected (south)
    default_road_bearing: float = 180.0

    # Minimum setback (m) for canvas setback checks without a PLU value
    default_setback_minimum_m: float = 3.0

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
