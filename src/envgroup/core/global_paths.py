"""Platform directory paths for envgroup.

Config and log directories follow the platform conventions provided by
platformdirs. The claude settings document lives under the user's home.
"""

import os
from pathlib import Path

from platformdirs import user_config_dir, user_log_dir, user_state_dir

APP_NAME = "envgroup"


class GlobalPath:
    """Global path management for envgroup directories."""

    @classmethod
    def home(cls) -> str:
        """Get user home directory, with override for testing."""
        return os.environ.get("ENVGROUP_TEST_HOME", str(Path.home()))

    @classmethod
    def config(cls) -> str:
        """Configuration directory."""
        return user_config_dir(APP_NAME)

    @classmethod
    def state(cls) -> str:
        """State directory, also holds settings lock files."""
        return user_state_dir(APP_NAME)

    @classmethod
    def log(cls) -> str:
        """Log file directory."""
        return user_log_dir(APP_NAME)

    @classmethod
    def settings(cls) -> str:
        """Default location of the shared settings document."""
        return str(Path(cls.home()) / ".claude" / "settings.json")
