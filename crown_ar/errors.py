class CrownARError(Exception):
    """Base error for the crown overlay."""


class AssetLoadError(CrownARError):
    pass


class CameraError(CrownARError):
    pass
