from pydantic import BaseModel, Field, field_validator, model_validator

from db.enums import DebridProvider


class UserConfig(BaseModel):
    """User configuration carried in the addon install URL."""

    debrid_provider: str | None = Field(default=None, alias="DebridProvider")
    debrid_api_key: str | None = Field(default=None, alias="DebridApiKey")
    debrid_link_api_key: str | None = Field(default=None, alias="DebridLinkApiKey")
    language_preference: str | None = Field(default=None, alias="LangPref")

    class Config:
        extra = "ignore"
        populate_by_name = True

    @field_validator("debrid_provider", mode="before")
    @classmethod
    def normalize_provider_name(cls, value):
        if isinstance(value, str):
            return value.strip().lower().replace("-", "") or None
        return value

    @model_validator(mode="after")
    def default_to_debridlink(self) -> "UserConfig":
        if self.debrid_provider is None and self.debrid_link_api_key:
            self.debrid_provider = DebridProvider.DEBRIDLINK
        return self

    @property
    def api_key(self) -> str:
        return self.debrid_link_api_key or self.debrid_api_key or ""

    @property
    def proxy_api_key(self) -> str:
        """Credential embedded into proxied resolve URLs."""
        return self.debrid_api_key or self.debrid_link_api_key or ""
