import os
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from dotenv import load_dotenv


# ==========================================================
# 1) Cargar .env raíz
# ==========================================================
load_dotenv(".env")
DEPLOY_ENV = os.getenv("DEPLOY_ENV", "prod").lower()

# ==========================================================
# 2) Cargar .env del entorno
# ==========================================================
ENV_PATH = f"DevOps/{DEPLOY_ENV}/.env"
load_dotenv(ENV_PATH, override=True)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=ENV_PATH,
        extra="allow"
    )

    # =========================
    #  App
    # =========================
    deploy_env: str = "prod"
    app_name: str = "anpr-focus"
    app_env: str = "prod"
    app_port: int = 8000

    # =========================
    #  Placas
    # =========================
    plate_min_length: int = Field(5, ge=1)
    plate_max_length: int = Field(7, ge=1)

    # =========================
    #  Búsqueda ROI (zoom)
    # =========================
    plate_detection_enabled: bool = True
    max_zoom_steps: int = Field(6, ge=1)
    min_crop_size: int = Field(64, ge=1)
    min_plate_aspect: float = 2.0
    horizontal_expansion_factor: float = 1.3
    initial_focus_fraction: float = 0.85
    vertical_trim_factor: float = Field(0.85, gt=0.0, lt=1.0)

    # =========================
    #  Registro / similitud
    # =========================
    image_similarity_threshold: float = 0.5
    similarity_sample_size: int = Field(32, ge=1)

    # =========================
    #  Votación
    # =========================
    confirmation_threshold: int = Field(2, ge=1)
    algorithm_confirmation_threshold: int = Field(3, ge=1)
    window_interval_ms: int = Field(300, ge=1)
    recent_strings_retention_ms: int = 5_000

    # =========================
    #  Ventana visible
    # =========================
    min_vertical_fraction: float = 0.3
    min_horizontal_fraction: float = 0.3
    vertical_fraction: float = 1.0
    horizontal_fraction: float = 1.0
    preview_width: int = 0
    preview_height: int = 0

    # =========================
    #  OCR / detector de texto
    # =========================
    text_detector: str = "easyocr"
    ocr_lang: str = "en"
    ocr_gpu: bool = False

    # =========================
    #  Camera
    # =========================
    camera_url: str = "0"
    camera_rotation: int = 0
    max_fps: float = 10.0

    # =========================
    #  Confirmación
    # =========================
    prompt_mode: str = "console"

    # =========================
    #  Monitoring
    # =========================
    prometheus_port: int = 9100


settings = Settings()
