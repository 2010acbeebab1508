from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import PostgresDsn

class DatabaseSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix='DB_')

    url: str | None = None
    create_schema: bool = False
    host: str = "localhost"
    port: int = 5432
    database: str = "categorizer"
    username: str = "postgres"
    password: SecretStr = SecretStr("")

    @property
    def database_url(self) -> str:
        if self.url:
            return self.url
        return str(
            PostgresDsn.build(
                scheme="postgresql+asyncpg",
                username=self.username,
                password=self.password.get_secret_value(),
                host=self.host,
                port=self.port,
                path=self.database,
            )
        )
