from __future__ import annotations

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from azemu.utils.cli import DEFAULT_TIMEOUT_MS


class EmulatorSettings(BaseModel):
    """
    Where to find the Azure Storage Emulator and how long to let it run.

    Fields:
    - sdk_path: Azure SDK root. If not specified - "%ProgramFiles(x86)%/Microsoft SDKs/Azure".
    - directory_name: emulator directory below the SDK root
    - executable_name: emulator executable inside that directory
    - timeout_ms: wall-clock limit for one command before the process is killed
    """

    sdk_path: str | None = None
    directory_name: str = "Storage Emulator"
    executable_name: str = "AzureStorageEmulator.exe"
    timeout_ms: int = Field(default=DEFAULT_TIMEOUT_MS, gt=0)


class AutostartSettings(BaseModel):
    """Settings for starting/stopping the emulator around a developer session."""

    enabled: bool = True  # Start the emulator if it is not already running
    shutdown: bool = False  # Stop it again at the end if it was started by us


class Settings(BaseSettings):
    """
    Main configuration class.

    Loads values from the following sources:
    - Environment variables (with prefix AZEMU_)
    - Initialization values (e.g., from YAML)
    - .env file
    - Secret files
    """

    model_config = SettingsConfigDict(env_prefix="AZEMU_", env_nested_delimiter="__")

    emulator: EmulatorSettings = Field(default_factory=EmulatorSettings)
    autostart: AutostartSettings = Field(default_factory=AutostartSettings)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,  # type: type[BaseSettings]
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """
        Loading priority:
        1. Environment variables
        2. Initialization values (e.g., from YAML)
        3. .env file
        4. Secret files
        """
        return (env_settings, init_settings, dotenv_settings, file_secret_settings)
