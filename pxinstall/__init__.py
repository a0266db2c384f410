"""Install Perple_X on macOS from prebuilt binaries or source."""
