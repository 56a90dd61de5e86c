import os


def _origins(raw: str) -> list[str]:
    return [o.strip() for o in raw.split(",") if o.strip()]


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY") or "you-will-never-guess"
    # Seats per room (2-4)
    AZUL_MAX_PLAYERS = int(os.environ.get("AZUL_MAX_PLAYERS", "4"))
    # "standard" or "gray"
    AZUL_WALL_VARIANT = os.environ.get("AZUL_WALL_VARIANT", "standard")
    # Optional: fixed seed for reproducible bag shuffles
    AZUL_SEED = int(os.environ["AZUL_SEED"]) if os.environ.get("AZUL_SEED") else None
    AZUL_CORS_ORIGINS = _origins(
        os.environ.get("AZUL_CORS_ORIGINS", "http://localhost:5173,http://127.0.0.1:5173")
    )
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
