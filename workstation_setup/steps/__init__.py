from .context import ActionContext
from .copy_share import CopyShareStep
from .download_install import DownloadInstallStep
from .install_fonts import InstallFontsStep
from .install_package import InstallStep
from .make_dirs import MakeDirsStep

STEP_KINDS = {
    cls.kind: cls
    for cls in (
        MakeDirsStep,
        CopyShareStep,
        InstallStep,
        DownloadInstallStep,
        InstallFontsStep,
    )
}

__all__ = [
    "ActionContext",
    "CopyShareStep",
    "DownloadInstallStep",
    "InstallFontsStep",
    "InstallStep",
    "MakeDirsStep",
    "STEP_KINDS",
]
