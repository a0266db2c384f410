from .config import config
from .doctor import doctor
from .install import install
from .list_installed import list_installed
from .list_versions import list_versions
from .log import log
from .resolve import resolve
from .uninstall import uninstall
from .version import version
