from datetime import timedelta
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # General
    port: int = Field(8000, alias="PORT")
    cors_origin: str = Field("*", alias="CORS_ORIGIN")
    log_level: str = Field("INFO", alias="LOG_LEVEL")

    # MongoDB
    mongodb_uri: str = Field("mongodb://localhost:27017", alias="MONGODB_URI")
    db_name: str = Field("playapp", alias="DB_NAME")

    # JWT
    access_token_secret: str = Field(..., alias="ACCESS_TOKEN_SECRET")
    access_token_expiry: timedelta = Field(timedelta(days=1), alias="ACCESS_TOKEN_EXPIRY")
    refresh_token_secret: str = Field(..., alias="REFRESH_TOKEN_SECRET")
    refresh_token_expiry: timedelta = Field(timedelta(days=10), alias="REFRESH_TOKEN_EXPIRY")
    jwt_algorithm: str = Field("HS256", alias="JWT_ALGORITHM")

    # Cloudinary
    cloudinary_cloud_name: Optional[str] = Field(None, alias="CLOUDINARY_CLOUD_NAME")
    cloudinary_api_key: Optional[str] = Field(None, alias="CLOUDINARY_API_KEY")
    cloudinary_api_secret: Optional[str] = Field(None, alias="CLOUDINARY_API_SECRET")
    cloudinary_folder: str = Field("PlayApp", alias="CLOUDINARY_FOLDER")

    # Local files
    public_dir: str = Field("public", alias="PUBLIC_DIR")
    upload_temp_dir: str = Field("public/temp", alias="UPLOAD_TEMP_DIR")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def cors_origins(self) -> List[str]:
        return [o.strip() for o in self.cors_origin.split(",") if o.strip()]


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


settings = get_settings()
