from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./stairworks.db"
    APP_NAME: str = "Stairworks Estimator"
    LOG_LEVEL: str = "INFO"

    # Slab cladding consumables
    ADHESIVE_BAG_KG: float = 20.0
    ADHESIVE_KG_PER_M2_PER_CM: float = 12.0
    DEFAULT_SLAB_TYPE: str = "porcelain"

    # Masonry
    MORTAR_BATCH_KG: float = 125.0

    # Seed the duration catalogue on first run
    SEED_TASK_TEMPLATES: bool = True

    class Config:
        env_file = ".env"


settings = Settings()
