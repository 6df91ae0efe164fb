from pydantic_settings import SettingsConfigDict, BaseSettings


class Settings(BaseSettings):
    PROJECT_NAME: str = "Idea Board Analysis API"

    # List all published versions here. This enables us to manage them better; i.e. gradually phase them out etc...
    API_V1_STR: str = "/v1"

    # Rate Limiting
    GLOBAL_RATE_LIMIT: str = "1000/minute"
    RATE_LIMIT_PER_USER: str = "60/minute"

    # Request limits. The analysis is quadratic in the number of ideas, keep this small.
    MAX_IDEAS: int = 200
    MAX_TOTAL_BYTES: int = 200_000

    # Newly submitted ideas scoring at least this much are flagged as standouts
    STANDOUT_NOVELTY_THRESHOLD: int = 80

    # CORS, comma separated lists
    CORS_ALLOW_ORIGINS: str = "*"
    CORS_ALLOW_CREDENTIALS: bool = True
    CORS_ALLOW_METHODS: str = "GET,OPTIONS,POST"
    CORS_ALLOW_HEADERS: str = "Accept, Authorization, Content-Length, Content-Type, X-Requested-With"

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # Environment
    ENVIRONMENT: str = "DEV"
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


settings = Settings()
