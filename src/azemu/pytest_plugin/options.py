import pytest


def pytest_addoption(parser: pytest.Parser) -> None:
    """
    Registers custom command-line (CLI) options for pytest.

    Adds options to configure the storage emulator fixtures:
      --azemu-config <path>  : Path to the YAML configuration file.
      --azemu-no-autostart   : Never start the emulator from the fixtures.
    """
    g = parser.getgroup("azemu")
    g.addoption(
        "--azemu-config",
        action="store",
        default=None,
        help="Path to YAML configuration file for the storage emulator",
    )
    g.addoption(
        "--azemu-no-autostart",
        action="store_true",
        default=False,
        help="Do not start the Azure Storage Emulator for tests that request it",
    )
