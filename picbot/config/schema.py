"""Configuration schema using Pydantic."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Base(BaseModel):
    """Base model accepting both camelCase and snake_case keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SearchConfig(Base):
    """Image search command configuration."""

    account_id: str = ""
    api_base: str = "http://api.bigstockphoto.com/2"
    image_url_template: str = "http://www.bigstockphoto.com/image-{id}"
    limit: int = Field(default=10, ge=1)
    thumb_sizes: list[str] = Field(default_factory=lambda: ["large_thumb", "small_thumb"])
    template: str | None = None  # Overrides the default formatter pattern
    shorten_timeout: float = Field(default=15.0, gt=0)
    request_timeout: float = Field(default=10.0, gt=0)


class ShortenerConfig(Base):
    """Built-in TinyURL shortening capability."""

    enabled: bool = False
    base_url: str = "https://tinyurl.com/api-create.php"
    timeout: float = Field(default=10.0, gt=0)
    hosts: list[str] = Field(default_factory=list)  # Empty registers for every host


class CommandsConfig(Base):
    """Chat command surface."""

    prefix: str = "!"
    search_command: str = "search"


class Config(Base):
    """Root configuration for picbot."""

    search: SearchConfig = Field(default_factory=SearchConfig)
    shortener: ShortenerConfig = Field(default_factory=ShortenerConfig)
    commands: CommandsConfig = Field(default_factory=CommandsConfig)
