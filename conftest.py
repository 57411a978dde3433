"""Global pytest configuration."""

import os

# Keep tests off real Azure services before any imports read settings
for name in [key for key in os.environ if key.upper().startswith("AZURE_")]:
    del os.environ[name]
