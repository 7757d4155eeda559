# okulkocu/core/config.py
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # dev / test / prod
    env: str = Field("dev", alias="ENV")

    # ==== Okul Koçu backend ====
    api_base_url: str = Field(
        "https://c802f00043e4.ngrok-free.app/api",
        validation_alias="OKUL_API_BASE_URL",
    )
    upload_base_url: str = Field(
        "https://c802f00043e4.ngrok-free.app/uploads",
        validation_alias="OKUL_UPLOAD_BASE_URL",
    )
    connect_timeout: float = Field(10.0, validation_alias="OKUL_CONNECT_TIMEOUT")
    read_timeout: float = Field(20.0, validation_alias="OKUL_READ_TIMEOUT")

    # Okul kodu seçimi (SchoolSelect ekranının yerine)
    school_code: str | None = Field(default=None, validation_alias="OKUL_SCHOOL_CODE")

    # ogrenci_/ogretmen_/admin_ dosya adları demo veridir; kapatılırsa gerçek upload URL'si üretilir
    mock_photos: bool = Field(default=True, validation_alias="OKUL_MOCK_PHOTOS")
    placeholder_base_url: str = Field(
        "https://randomuser.me/api/portraits",
        validation_alias="OKUL_PLACEHOLDER_BASE_URL",
    )

    # Backend hatasında sahte kayıt göster (yalnızca demo); varsayılan: açık hata durumu
    demo_fallback: bool = Field(default=False, validation_alias="OKUL_DEMO_FALLBACK")

    # ==== Token store ====
    # memory / file / redis
    token_store: str = Field(default="file", validation_alias="OKUL_TOKEN_STORE")
    token_file: str = Field(default=".okulkocu/tokens.json", validation_alias="OKUL_TOKEN_FILE")

    # redis://:password@host:6379/0
    redis_url: str | None = Field(default=None, validation_alias="REDIS_URL")
    redis_prefix: str = Field(default="okulkocu:store:", validation_alias="OKUL_REDIS_PREFIX")
    redis_decode_responses: bool = Field(default=True, validation_alias="REDIS_DECODE_RESPONSES")

    log_level: str = Field(default="INFO", validation_alias="OKUL_LOG_LEVEL")

settings = Settings()
