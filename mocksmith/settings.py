from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Engine settings, read from the environment (or a local ``.env`` file).

    Every variable uses the ``MOCKSMITH_`` prefix.

    Examples:
        # Seed five items per resource, skipping audit logs
        MOCKSMITH_ITEMS_PER_RESOURCE=5
        MOCKSMITH_EXCLUDE_RESOURCES='["audit-logs"]'

        # Reproducible runs
        MOCKSMITH_SEED=1234

        # Realistic values in another Faker locale
        MOCKSMITH_FAKER_LOCALE=de_DE
    """

    # Number of instances the resolver generates for every resource
    items_per_resource: int = 5

    # Resource filters (case-insensitive, exclude wins, empty include means all)
    include_resources: list[str] = []
    exclude_resources: list[str] = []

    # Default seed for generators created without an explicit rng/seed
    seed: int | None = None

    # Locale handed to Faker for realistic values
    faker_locale: str = "en_US"

    # Nesting depth after which optional object properties are skipped
    max_depth: int = 6

    model_config = SettingsConfigDict(
        env_prefix="MOCKSMITH_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


settings = Settings()
