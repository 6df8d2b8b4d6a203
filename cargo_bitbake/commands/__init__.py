from .bitbake import bitbake
from .version import version
