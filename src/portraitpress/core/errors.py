from __future__ import annotations


class PortraitPressError(Exception):
    """Base class for failures of a single user action. None of them are fatal to the process."""


class ResourceAcquisitionError(PortraitPressError):
    """A drawing surface could not be allocated or drawn into."""


class CompositionError(ResourceAcquisitionError):
    """The passport frame could not be composed."""


class InvalidCropError(PortraitPressError):
    """A crop rectangle resolves to zero pixels on some axis."""


class SegmentationError(PortraitPressError):
    """The segmentation collaborator rejected or raised. The message is shown to the user as-is."""


class DecodeError(PortraitPressError):
    """Source bytes could not be turned into a raster."""


class OperationCancelledError(PortraitPressError):
    """A newer request superseded this one; its result must not be applied."""
