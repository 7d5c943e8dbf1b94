"""
Engine configuration.

Settings are read from ``BEANWIRE_*`` environment variables, e.g.
``BEANWIRE_TEARDOWN_POLICY=fail_fast``.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from beanwire.domain.enums import TeardownPolicy


class EngineSettings(BaseSettings):
    """Configuration of injection targets and the container.

    Attributes:
        teardown_policy: Whether pre-destroy continues past failing hooks.
        auto_wire: Whether the container builds unregistered classes on demand.
    """

    model_config = SettingsConfigDict(
        env_prefix="BEANWIRE_",
        case_sensitive=False,
        extra="ignore",
    )

    teardown_policy: TeardownPolicy = Field(
        default=TeardownPolicy.BEST_EFFORT,
        description="Handling of pre-destroy hook failures.",
    )
    auto_wire: bool = Field(
        default=True,
        description="Build unregistered classes through their injection target.",
    )
