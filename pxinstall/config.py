import copy
import os
import re
import toml
from .cli_logger import logger

CONFIG_FILE = "pxinstall.toml"

EXECUTABLES = [
    "actcor", "convex", "fluids", "MC_fit", "pspts", "pstable", "pt2curv", "werami",
    "build", "ctransf", "frendly", "meemum", "pssect", "psvdraw", "vertex",
]

DEFAULT_CONFIG = {
    "perplex": {
        "repository": "jadconnolly/Perple_X",
        "install_root": os.path.join("~", "PerpleX"),
        "makefile": "OSX_makefile2",
        "jobs": 8,
        "executables": EXECUTABLES,
    },
    "versions": {
        # OSX_makefile2 first shipped with this release
        "min_buildable": "v7.1.12",
        # first release with prebuilt macOS binaries attached
        "min_binary": "v7.1.15",
    },
    "network": {
        "timeout": 30,
    },
}

def load_config(path="."):
    """
    Read pxinstall.toml from path. Returns {} when there is no file and None
    when the file exists but cannot be read or parsed.
    """
    config_path = os.path.join(path, CONFIG_FILE)
    if os.path.exists(config_path):
        logger.info(f"Loading configuration from {config_path}")
        try:
            with open(config_path, "r") as f:
                return toml.load(f)
        except toml.TomlDecodeError as e:
            logger.error(f"Error decoding TOML file at {config_path}: {e}")
            logger.info("Please check the file's format for syntax errors.")
        except IOError as e:
            logger.error(f"Error reading configuration file at {config_path}: {e}")
            logger.info("Please check file permissions.")
        return None
    return {}

def save_config(config, path="."):
    config_path = os.path.join(path, CONFIG_FILE)
    logger.info(f"Saving configuration to {config_path}")
    try:
        with open(config_path, "w") as f:
            toml.dump(config, f)
        return True
    except IOError as e:
        logger.error(f"Error saving configuration to {config_path}: {e}")
        logger.info("Please check file permissions and ensure the directory is writable.")
        return False

def get_settings(conf=None):
    """Merge a loaded configuration over DEFAULT_CONFIG, one table deep."""
    settings = copy.deepcopy(DEFAULT_CONFIG)
    for section, values in (conf or {}).items():
        if isinstance(values, dict) and isinstance(settings.get(section), dict):
            settings[section].update(values)
        else:
            settings[section] = values
    settings["perplex"]["install_root"] = os.path.expanduser(str(settings["perplex"]["install_root"]))
    settings["perplex"]["jobs"] = int(settings["perplex"]["jobs"])
    executables = settings["perplex"]["executables"]
    if isinstance(executables, str):
        # written by `config set` as a single string
        executables = re.split(r"[\s,]+", executables.strip())
    settings["perplex"]["executables"] = [str(exe) for exe in executables if exe]
    settings["network"]["timeout"] = float(settings["network"]["timeout"])
    return settings

def load_settings(path="."):
    return get_settings(load_config(path=path))
